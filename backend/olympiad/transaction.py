from contextlib import contextmanager

from olympiad.extensions import db


@contextmanager
def atomic():
    """Run a block of session work as one unit.

    Commits when the block exits cleanly; on any exception the session is
    rolled back and the exception re-raised, so nothing partial is persisted.
    """
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

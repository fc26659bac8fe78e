from functools import wraps
from flask import g, jsonify
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from olympiad.auth.capability import grant_for
from olympiad.errors import AuthorizationError
from olympiad.extensions import db
from olympiad.models.user import User


def current_user():
    verify_jwt_in_request()
    return db.session.get(User, int(get_jwt_identity()))


def admin_required(fn):
    """Restrict a route to admins and expose their grant as ``g.admin``."""

    @wraps(fn)
    def wrapper(*args, **kwargs):
        user = current_user()

        try:
            g.admin = grant_for(user)
        except AuthorizationError as e:
            return jsonify(e.to_dict()), e.status_code

        return fn(*args, **kwargs)

    return wrapper

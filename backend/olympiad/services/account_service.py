"""Admin and viewer accounts: credential checks and admin-issued sign-ups."""
import logging
import re

from olympiad.auth.capability import require_admin
from olympiad.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from olympiad.extensions import db
from olympiad.models.player import Player
from olympiad.models.user import User, UserRole
from olympiad.transaction import atomic

logger = logging.getLogger(__name__)

PASSWORD_RE = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&#]).{8,}$"
)


def check_password_policy(password):
    """Require 8+ chars with uppercase, lowercase, digit, and special char."""
    if not PASSWORD_RE.match(password):
        raise ValidationError(
            "Password must be at least 8 characters with uppercase, "
            "lowercase, digit, and special character"
        )


def authenticate(email, password):
    user = User.query.filter_by(email=email.strip().lower()).first()
    if not user or not user.check_password(password):
        logger.warning("Failed login for %s", email)
        raise AuthenticationError("Invalid email or password")
    if not user.is_active:
        raise AuthorizationError("Account is deactivated")
    return user


def active_user(user_id):
    """The account behind a token identity, if it may still act."""
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    if not user.is_active:
        raise AuthorizationError("Account is deactivated")
    return user


def register_user(actor, email, password, name, role="viewer", player_id=None):
    require_admin(actor)
    email = email.strip().lower()
    check_password_policy(password)

    with atomic() as session:
        if User.query.filter_by(email=email).first():
            raise ConflictError("Email already registered")
        if player_id is not None:
            if not session.get(Player, player_id):
                raise NotFoundError("Player not found")
            if User.query.filter_by(player_id=player_id).first():
                raise ConflictError("Player already has an account")

        user = User(email=email, name=name, role=UserRole(role), player_id=player_id)
        user.set_password(password)
        session.add(user)

    logger.info("User %s (%s) registered by user %s", user.email, role, actor.user_id)
    return user

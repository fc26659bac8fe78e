from flask import Blueprint, g, jsonify, request
from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    get_jwt_identity,
    jwt_required,
)

from olympiad.auth.decorators import admin_required
from olympiad.extensions import limiter
from olympiad.schemas.user import LoginSchema, RegisterSchema, UserSchema
from olympiad.services.account_service import active_user, authenticate, register_user

auth_bp = Blueprint("auth", __name__)
user_schema = UserSchema()
login_schema = LoginSchema()
register_schema = RegisterSchema()


def _tokens_for(user):
    identity = str(user.id)
    return {
        "access_token": create_access_token(identity=identity),
        "refresh_token": create_refresh_token(identity=identity),
    }


@auth_bp.route("/login", methods=["POST"])
@limiter.limit("10 per minute")
def login():
    data = login_schema.load(request.get_json(silent=True) or {})
    user = authenticate(data["email"], data["password"])
    return jsonify({**_tokens_for(user), "user": user_schema.dump(user)}), 200


@auth_bp.route("/register", methods=["POST"])
@admin_required
def register():
    data = register_schema.load(request.get_json(silent=True) or {})
    user = register_user(g.admin, **data)
    return jsonify({"user": user_schema.dump(user)}), 201


@auth_bp.route("/refresh", methods=["POST"])
@jwt_required(refresh=True)
@limiter.limit("30 per minute")
def refresh():
    user = active_user(int(get_jwt_identity()))
    return jsonify({"access_token": create_access_token(identity=str(user.id))}), 200


@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def me():
    user = active_user(int(get_jwt_identity()))
    return jsonify({"user": user_schema.dump(user)}), 200

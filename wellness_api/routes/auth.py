"""
Authentication routes for the Wellness Survey API.

Provides endpoints for registering new users and logging in to obtain
JSON Web Tokens (JWTs). These tokens are required for accessing
protected resources throughout the API.
"""

from __future__ import annotations

import logging

from flask import Blueprint, request
from flask_jwt_extended import create_access_token

from .. import db
from ..errors import ConflictError
from ..models import User, Role, Profile
from ..schemas import UserSchema, RegisterSchema, LoginSchema


auth_bp = Blueprint("auth", __name__)
logger = logging.getLogger(__name__)


@auth_bp.route("/register", methods=["POST"])
def register() -> tuple[dict, int]:
    """Register a new user together with an empty wellness profile.

    Expects JSON with ``username``, ``email``, ``password`` and optional
    ``first_name``/``last_name``. New accounts always get the ``user``
    role. Usernames and emails must be unique.
    """
    data = RegisterSchema().load(request.get_json(silent=True) or {})
    email = data["email"].strip().lower()
    username = data["username"].strip()
    if User.query.filter_by(email=email).first():
        raise ConflictError("A user with that email already exists.")
    if User.query.filter_by(username=username).first():
        raise ConflictError("A user with that username already exists.")

    user = User(username=username, email=email, role=Role.USER)
    user.set_password(data["password"])
    user.profile = Profile(first_name=data.get("first_name"), last_name=data.get("last_name"))
    db.session.add(user)
    db.session.commit()
    logger.info("Registered user %s", user.user_id)
    return UserSchema().dump(user), 201


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple[dict, int]:
    """Authenticate a user and return a JWT.

    Expects JSON with ``email`` and ``password``. The token identifies
    the user and carries their role and profile id. Invalid credentials
    or an inactive account return 401.
    """
    data = LoginSchema().load(request.get_json(silent=True) or {})
    user = User.query.filter_by(email=data["email"].strip().lower()).first()
    if not user or not user.is_active or not user.check_password(data["password"]):
        return {"error": "Invalid email or password."}, 401

    additional_claims = {
        "role": user.role.value,
        "profile_id": user.profile.profile_id if user.profile else None,
    }
    access_token = create_access_token(identity=user.user_id, additional_claims=additional_claims)
    return {"access_token": access_token, "user": UserSchema().dump(user)}, 200

import logging

from flask import Blueprint, g

from models import db
from models.user import User
from schemas import ForgotPasswordIn, LoginIn, ResetPasswordIn
from services import get_notifier
from utils.auth_utils import (
    generate_reset_token, generate_token, hash_password, verify_password, verify_reset_token,
)
from utils.decorators import token_required
from utils.errors import NotFoundError, ValidationError
from utils.responses import fail, ok
from utils.validators import parse_body

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/login", methods=["POST"])
def login():
    body = parse_body(LoginIn)
    user = User.query.filter(db.func.lower(User.email) == body.email.lower()).first()

    if not user or not verify_password(user.password, body.password):
        logger.info("Failed login for %s", body.email)
        return fail("Invalid email or password", 401)

    token = generate_token(user.id, user.email)
    return ok("Login successful", {"token": token, "user": user.to_dict()})


@auth_bp.route("/profile", methods=["GET"])
@token_required
def profile():
    user = db.session.get(User, g.user_id)
    if not user:
        raise NotFoundError("User not found")
    return ok("Profile", user.to_dict())


@auth_bp.route("/forgot-password", methods=["POST"])
def forgot_password():
    body = parse_body(ForgotPasswordIn)
    user = User.query.filter(db.func.lower(User.email) == body.email.lower()).first()

    # Same answer whether the account exists or not
    if user and not get_notifier().password_reset(user.email, generate_reset_token(user.email)):
        logger.warning("Reset link for user %s was not sent", user.id)

    return ok("If this account exists, a reset link has been sent")


@auth_bp.route("/reset-password", methods=["POST"])
def reset_password():
    body = parse_body(ResetPasswordIn)
    email = verify_reset_token(body.token)
    if not email:
        raise ValidationError("Invalid or expired reset token", field="token")

    user = User.query.filter_by(email=email).first()
    if not user:
        raise ValidationError("Invalid or expired reset token", field="token")

    user.password = hash_password(body.password)
    db.session.commit()
    logger.info("Password reset for user %s", user.id)
    return ok("Password updated")

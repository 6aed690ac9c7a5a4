# dao/user.py
import logging
import secrets
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from configs import db
from dao.errors import Forbidden, NotFoundError, ValidationError
from db.models.user import User, UserRole, VerificationToken
from utils.mailer import send_verification_code

logger = logging.getLogger(__name__)


def list_users() -> List[User]:
    return User.query.order_by(User.email.asc()).all()


def get_user(user_id: int) -> Optional[User]:
    return db.session.get(User, int(user_id))


def get_by_email(email: str) -> Optional[User]:
    return User.query.filter_by(email=(email or "").strip().lower()).one_or_none()


def _generate_code() -> str:
    return f"{secrets.randbelow(900000) + 100000}"


def issue_verification(user: User, ttl_minutes: int = 15) -> VerificationToken:
    """Replace the user's code with a fresh 6-digit one and deliver it."""
    token = user.verification_token
    if token is None:
        token = VerificationToken(user=user)
        db.session.add(token)
    token.token = _generate_code()
    token.expires = datetime.utcnow() + timedelta(minutes=ttl_minutes)
    _commit()
    send_verification_code(user.email, token.token)
    return token


def register(
    name: str,
    email: str,
    password: str,
    ttl_minutes: int = 15,
    role: UserRole = UserRole.STAFF,
) -> User:
    email = (email or "").strip().lower()
    if not email or "@" not in email:
        raise ValidationError("A valid email is required")
    if not password or len(password) < 6:
        raise ValidationError("Password must be at least 6 characters")
    if get_by_email(email):
        raise ValidationError("User with this email already exists")

    user = User(
        email=email,
        name=(name or "").strip() or None,
        password_hash=generate_password_hash(password),
        role=role,
    )
    db.session.add(user)
    _commit()
    logger.info("Registered user %s", email)
    issue_verification(user, ttl_minutes)
    return user


def verify_email(email: str, code: str) -> User:
    user = get_by_email(email)
    if not user or not user.verification_token:
        raise ValidationError("Invalid verification attempt")
    token = user.verification_token
    if token.token != str(code or "").strip() or token.expires < datetime.utcnow():
        raise ValidationError("Invalid or expired verification code")

    user.is_verified = True
    user.email_verified_at = datetime.utcnow()
    user.verification_token = None  # delete-orphan
    _commit()
    return user


def resend_verification(email: str, ttl_minutes: int = 15) -> VerificationToken:
    if not email:
        raise ValidationError("Email is required")
    user = get_by_email(email)
    if not user:
        raise NotFoundError("Email not found")
    return issue_verification(user, ttl_minutes)


def authenticate(email: str, password: str) -> User:
    user = get_by_email(email)
    if not user or not check_password_hash(user.password_hash, password or ""):
        raise ValidationError("Invalid email or password")
    if not user.is_active:
        raise Forbidden("Account is disabled")
    if not user.is_verified:
        raise Forbidden("Email is not verified")
    return user


def _commit():
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

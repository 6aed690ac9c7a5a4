# db/models/user.py
import enum
from datetime import datetime

from flask_login import UserMixin

from configs import db


class UserRole(enum.Enum):
    ADMIN = "ADMIN"
    STAFF = "STAFF"


class User(db.Model, UserMixin):
    __tablename__ = "user_account"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    name = db.Column(db.String(120))
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(
        db.Enum(UserRole, name="userrole"), default=UserRole.STAFF, nullable=False
    )
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    is_verified = db.Column(db.Boolean, default=False, nullable=False)
    email_verified_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    verification_token = db.relationship(
        "VerificationToken",
        uselist=False,
        back_populates="user",
        cascade="all, delete-orphan",
    )

    def get_id(self):
        return str(self.id)

    def has_role(self, *roles: UserRole):
        """True when the user holds one of the given roles."""
        return self.role in roles


class VerificationToken(db.Model):
    __tablename__ = "verification_token"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("user_account.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    token = db.Column(db.String(6), nullable=False)
    expires = db.Column(db.DateTime, nullable=False)

    user = db.relationship("User", back_populates="verification_token")

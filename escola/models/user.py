from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash

from escola.extensions import db
from .mixins import SerializerMixin, TimestampMixin, new_id


class User(UserMixin, TimestampMixin, SerializerMixin, db.Model):
    __tablename__ = "users"
    _hidden = ("password_hash",)

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True)
    password_hash = db.Column(db.String(255))
    role = db.Column(db.String(20), nullable=False, default="student")
    email_verified = db.Column(db.Boolean, nullable=False, default=False)
    active = db.Column(db.Boolean, nullable=False, default=True)

    @property
    def is_active(self):
        return bool(self.active)

    def set_password(self, senha: str):
        self.password_hash = generate_password_hash(senha)

    def check_password(self, senha: str) -> bool:
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, senha)

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"

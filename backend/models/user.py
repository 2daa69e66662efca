# backend/models/user.py

from .base import db
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash

ROLES = ('admin', 'technician')


class User(UserMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), index=True, unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), nullable=False)
    role = db.Column(db.String(20), default='technician', nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    photo_url = db.Column(db.String(500))

    def set_password(self, password):
        """Creates a hashed password."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Checks a password against the stored hash."""
        return check_password_hash(self.password_hash, password)

    @property
    def is_authenticated(self):
        # disabled accounts stay logged in and get a 403 from active_user_required
        return True

    @property
    def is_admin(self):
        return self.role == 'admin'

    def to_dict(self):
        # The password hash never leaves the server
        return {
            'id': self.id,
            'username': self.username,
            'name': self.name,
            'email': self.email,
            'role': self.role,
            'isActive': self.is_active,
            'photoUrl': self.photo_url,
        }

    def __repr__(self):
        return f'<User id={self.id} username={self.username} role={self.role}>'

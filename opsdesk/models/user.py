# File: opsdesk/models/user.py
from datetime import datetime

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from opsdesk.common.datetime_utils import iso
from opsdesk.core.enums import ADMIN_ROLES, MANAGER_ROLES, Role, UserStatus
from opsdesk.extensions import db


class User(db.Model, UserMixin):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False, default='')
    role = db.Column(db.String(20), nullable=False, default=Role.STAFF.value)
    status = db.Column(db.String(20), nullable=False, default=UserStatus.ACTIVE.value)
    department = db.Column(db.String(100))
    position = db.Column(db.String(100))
    phone = db.Column(db.String(50))
    avatar = db.Column(db.String(500))
    must_change_password = db.Column(db.Boolean, nullable=False, default=False)
    last_active = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    # Flask-Login refuses sessions for inactive accounts
    @property
    def is_active(self):
        return self.status == UserStatus.ACTIVE.value

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def role_enum(self) -> Role:
        return Role(self.role)

    @property
    def is_admin(self):
        return self.role_enum in ADMIN_ROLES

    @property
    def is_manager(self):
        return self.role_enum in MANAGER_ROLES

    @property
    def is_super_admin(self):
        return self.role == Role.SUPER_ADMIN.value

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        try:
            return check_password_hash(self.password_hash, password)
        except (TypeError, ValueError):
            # placeholder or corrupted hashes
            return False

    def to_summary(self):
        return {
            'id': self.id,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'avatar': self.avatar,
        }

    def to_dict(self):
        data = self.to_summary()
        data.update({
            'email': self.email,
            'role': self.role,
            'status': self.status,
            'department': self.department,
            'position': self.position,
            'phone': self.phone,
            'mustChangePassword': self.must_change_password,
            'lastActive': iso(self.last_active),
            'createdAt': iso(self.created_at),
        })
        return data

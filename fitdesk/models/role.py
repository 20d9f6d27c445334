from datetime import datetime
from fitdesk.extensions import db

MODULES = ("students", "hr", "classes", "communication", "financial", "settings")
ACTIONS = ("view", "create", "edit", "delete", "export", "import")


class Role(db.Model):
    __tablename__ = "roles"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    color = db.Column(db.String(20))
    is_admin = db.Column(db.Boolean, default=False)
    is_default = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    company = db.relationship("Company", back_populates="roles")
    permissions = db.relationship("RolePermission", back_populates="role", cascade="all, delete-orphan")
    staff = db.relationship("Staff", back_populates="role")

    __table_args__ = (
        db.UniqueConstraint("company_id", "name", name="uq_roles_company_name"),
    )

    def permission_set(self):
        if self.is_admin:
            return {(m, a) for m in MODULES for a in ACTIONS}
        return {(p.module_key, p.action) for p in self.permissions}

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "color": self.color,
            "is_admin": bool(self.is_admin),
            "is_default": bool(self.is_default),
            "permissions": sorted(f"{m}:{a}" for m, a in self.permission_set()),
        }


class RolePermission(db.Model):
    __tablename__ = "role_permissions"

    id = db.Column(db.Integer, primary_key=True)
    role_id = db.Column(db.Integer, db.ForeignKey("roles.id"), nullable=False, index=True)
    module_key = db.Column(db.String(30), nullable=False)
    action = db.Column(
        db.String(10),
        db.CheckConstraint("action IN ('view','create','edit','delete','export','import')"),
        nullable=False,
    )

    role = db.relationship("Role", back_populates="permissions")

    __table_args__ = (
        db.UniqueConstraint("role_id", "module_key", "action", name="uq_role_permission"),
    )

from fitdesk.models.role import ACTIONS, MODULES

ALL_PERMISSIONS = frozenset((m, a) for m in MODULES for a in ACTIONS)


class Actor:
    """The authenticated user together with their company membership."""

    def __init__(self, user, kind, company=None, staff=None, student=None, permissions=frozenset()):
        self.user = user
        self.kind = kind
        self.company = company
        self.staff = staff
        self.student = student
        self.permissions = frozenset(permissions)

    @property
    def is_company_user(self):
        return self.kind in ("owner", "staff")

    @property
    def is_company_admin(self):
        return self.kind == "owner" or (self.staff is not None and self.permissions == ALL_PERMISSIONS)

    def can(self, module, action):
        return (module, action) in self.permissions

    def permission_list(self):
        return sorted(f"{m}:{a}" for m, a in self.permissions)


def resolve_actor(user):
    """Look up what the user is by membership, not by the role column alone."""
    if user.is_admin:
        return Actor(user, "admin", permissions=ALL_PERMISSIONS)

    if user.owned_company is not None:
        return Actor(user, "owner", company=user.owned_company, permissions=ALL_PERMISSIONS)

    staff = user.staff_record
    if staff is not None:
        permissions = staff.role.permission_set() if staff.role else set()
        return Actor(user, "staff", company=staff.company, staff=staff, permissions=permissions)

    student = user.student_record
    if student is not None:
        return Actor(user, "student", company=student.company, student=student)

    return Actor(user, None)

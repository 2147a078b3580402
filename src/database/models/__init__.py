from .role import Role
from .association import UserRole
from .user import User
from .entry import Entry

__all__ = ["Role", "UserRole", "User", "Entry"]

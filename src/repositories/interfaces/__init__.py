from .entry import IEntryRepository
from .role import IRoleRepository
from .user import IUserRepository

__all__ = ["IEntryRepository", "IRoleRepository", "IUserRepository"]

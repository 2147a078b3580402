from typing import Set

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from ..database import Base

class User(Base):
    """
    항목(Entry)을 작성하고 열람하는 사용자를 나타냅니다.
    사용자는 여러 역할을 가질 수 있으며, 가장 높은 가중치의 역할이 사용자의 레벨이 됩니다.
    """
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False, index=True)
    display_name = Column(String, nullable=True)
    password_hash = Column(String, nullable=False)

    roles = relationship("Role", secondary="user_roles", lazy="selectin")
    entries = relationship("Entry", back_populates="author", cascade="all, delete-orphan")

    @property
    def role_names(self) -> Set[str]:
        return {role.name for role in self.roles}

    @property
    def name(self) -> str:
        return self.display_name or self.username

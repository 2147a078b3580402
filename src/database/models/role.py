from sqlalchemy import Column, Integer, String
from ..database import Base

class Role(Base):
    """
    사용자에게 부여되는 역할을 정의합니다.
    (예: 'administrator', 'editor', 'subscriber').
    역할의 열람 가중치는 DB가 아닌 설정(RoleHierarchy)에서 결정됩니다.
    """
    __tablename__ = "roles"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)

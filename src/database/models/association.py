from sqlalchemy import Column, Integer, ForeignKey
from ..database import Base

class UserRole(Base):
    """
    사용자(User)와 역할(Role) 사이의 다대다(many-to-many) 관계를
    연결하는 연관 테이블(Association Table) 모델입니다.
    """
    __tablename__ = 'user_roles'
    user_id = Column(Integer, ForeignKey('users.id', ondelete="CASCADE"), primary_key=True)
    role_id = Column(Integer, ForeignKey('roles.id', ondelete="CASCADE"), primary_key=True)

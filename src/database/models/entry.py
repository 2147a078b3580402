from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from ..database import Base

class Entry(Base):
    """
    사용자가 작성한 짧은 글 하나를 나타냅니다.
    열람 및 수정 가능 여부는 작성자의 역할 레벨과 소유 여부로 결정됩니다.
    """
    __tablename__ = "entries"
    id = Column(Integer, primary_key=True, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    author = relationship("User", back_populates="entries", lazy="joined")

import logging
import math
from typing import List, Optional, Tuple
from sqlalchemy import exists, or_, true
from sqlalchemy.orm import Session
from src.database import models
from src.permissions.visibility import VisibilityPredicate
from src.repositories.interfaces import IEntryRepository

logger = logging.getLogger(__name__)

def visibility_clause(predicate: VisibilityPredicate):
    """
    VisibilityPredicate를 Entry 쿼리에 추가할 SQL 조건으로 변환합니다.

    작성자의 레벨이 조회자 레벨 이하라는 조건은
    '기본 레벨이 조회자 레벨 이하이고, 조회자보다 높은 가중치의 역할을 하나도 갖지 않음'과 같습니다.
    (알 수 없는 역할은 기본 레벨로 취급되므로)
    """
    if not predicate.fallback_visible:
        return models.Entry.author_id == predicate.viewer_id

    hidden_roles = predicate.hidden_roles
    if not hidden_roles:
        level_ok = true()
    else:
        has_hidden_role = exists().where(
            models.UserRole.user_id == models.Entry.author_id,
            models.UserRole.role_id == models.Role.id,
            models.Role.name.in_(hidden_roles),
        )
        level_ok = ~has_hidden_role
    return or_(models.Entry.author_id == predicate.viewer_id, level_ok)

class SqlalchemyEntryRepository(IEntryRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, entry_model: models.Entry) -> models.Entry:
        self.db.add(entry_model)
        self.db.commit()
        self.db.refresh(entry_model)
        return entry_model

    def find_by_id(self, entry_id: int) -> Optional[models.Entry]:
        return self.db.query(models.Entry).filter(models.Entry.id == entry_id).first()

    def update_content(self, entry: models.Entry, content: str) -> models.Entry:
        entry.content = content
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def delete(self, entry: models.Entry) -> bool:
        if entry:
            self.db.delete(entry)
            self.db.commit()
            return True
        return False

    def list_entries(
        self, predicate: VisibilityPredicate, page: int, page_size: int, order: str
    ) -> Tuple[List[models.Entry], int]:
        query = self.db.query(models.Entry).filter(visibility_clause(predicate))

        total = query.count()
        total_pages = math.ceil(total / page_size) if total else 0

        if order == "ASC":
            ordering = (models.Entry.created_at.asc(), models.Entry.id.asc())
        else:
            ordering = (models.Entry.created_at.desc(), models.Entry.id.desc())

        entries = query.order_by(*ordering).offset((page - 1) * page_size).limit(page_size).all()
        logger.debug("Listed %d of %d entries for %r (page %d).", len(entries), total, predicate, page)
        return entries, total_pages

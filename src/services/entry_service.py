import logging
from typing import Dict, Any

from src.config import clamp_per_page
from src.database import models
from src.permissions.policy import EditPolicy
from src.permissions.roles import RoleHierarchy
from src.permissions.visibility import can_view, visible_author_predicate
from src.repositories.interfaces import IEntryRepository
from src.services.exceptions import (
    EmptyContentError, EntryNotFoundError, PermissionDeniedError
)
from src.utils.text_sanitizer import sanitize_text_field

logger = logging.getLogger(__name__)

ORDERS = ("ASC", "DESC")
DEFAULT_ORDER = "DESC"


def normalize_page(page) -> int:
    """페이지 번호를 1 이상의 정수로 보정합니다."""
    try:
        page = int(page)
    except (TypeError, ValueError):
        return 1
    return max(page, 1)


def normalize_order(order) -> str:
    """정렬 방향을 'ASC' 또는 'DESC'로 보정합니다. 그 외 값은 기본값(DESC)이 됩니다."""
    order = str(order or "").strip().upper()
    return order if order in ORDERS else DEFAULT_ORDER


class EntryService:
    """항목(Entry)의 목록 조회, 생성, 수정, 삭제와 열람/편집 권한 판단을 담당합니다."""

    def __init__(self, entry_repo: IEntryRepository, hierarchy: RoleHierarchy, edit_policy: EditPolicy, per_page: int = 10):
        """
        EntryService를 초기화합니다.

        Args:
            entry_repo: 항목 데이터에 접근하기 위한 리포지토리.
            hierarchy: 역할-가중치 테이블.
            edit_policy: 수정/삭제 권한을 판단하는 정책 객체.
            per_page: 페이지당 항목 수. 1~100 범위로 보정됩니다.
        """
        self.entry_repo = entry_repo
        self.hierarchy = hierarchy
        self.edit_policy = edit_policy
        self.per_page = clamp_per_page(per_page)

    def level_of(self, user: models.User) -> int:
        return self.hierarchy.level_of(user.role_names)

    def list_entries(self, viewer: models.User, page=1, order=DEFAULT_ORDER) -> Dict[str, Any]:
        """
        조회자가 볼 수 있는 항목을 작성일 순으로 한 페이지 조회합니다.

        Returns:
            {'entries': [항목 뷰...], 'total_pages': 전체 페이지 수}
        """
        predicate = visible_author_predicate(self.level_of(viewer), viewer.id, self.hierarchy)
        entries, total_pages = self.entry_repo.list_entries(
            predicate, normalize_page(page), self.per_page, normalize_order(order)
        )
        return {
            "entries": [self.prepare_entry(viewer, entry) for entry in entries],
            "total_pages": total_pages,
        }

    def create_entry(self, viewer: models.User, content) -> Dict[str, Any]:
        """
        새 항목을 생성합니다.

        Raises:
            EmptyContentError: 정리된 내용이 비어 있을 때. (저장소에 접근하기 전에 발생)
        """
        content = self._clean_content(content)
        entry = self.entry_repo.create(models.Entry(content=content, author_id=viewer.id))
        logger.info("Entry %s created by user %s.", entry.id, viewer.id)
        return self.prepare_entry(viewer, entry)

    def update_entry(self, viewer: models.User, entry_id: int, content) -> Dict[str, Any]:
        """
        항목의 내용을 수정합니다.

        Raises:
            EntryNotFoundError: 해당 ID의 항목을 찾을 수 없을 때.
            PermissionDeniedError: 조회자에게 수정 권한이 없을 때.
            EmptyContentError: 정리된 내용이 비어 있을 때.
        """
        entry = self._get_mutable_entry(viewer, entry_id)
        content = self._clean_content(content)
        entry = self.entry_repo.update_content(entry, content)
        logger.info("Entry %s updated by user %s.", entry.id, viewer.id)
        return self.prepare_entry(viewer, entry)

    def delete_entry(self, viewer: models.User, entry_id: int) -> bool:
        """
        항목을 삭제합니다.

        Raises:
            EntryNotFoundError: 항목이 없거나, 저장소가 삭제하지 못했을 때.
            PermissionDeniedError: 조회자에게 삭제 권한이 없을 때.
        """
        entry = self._get_mutable_entry(viewer, entry_id)
        if not self.entry_repo.delete(entry):
            raise EntryNotFoundError(f"Entry with id '{entry_id}' could not be deleted.")
        logger.info("Entry %s deleted by user %s.", entry_id, viewer.id)
        return True

    def can_edit(self, viewer: models.User, entry: models.Entry) -> bool:
        return self.edit_policy.can_mutate(viewer, entry)

    def prepare_entry(self, viewer: models.User, entry: models.Entry) -> Dict[str, Any]:
        """항목을 클라이언트에 전달할 딕셔너리 형태로 변환합니다."""
        author = entry.author
        author_level = self.level_of(author)
        return {
            "id": entry.id,
            "content": entry.content,
            "author": {
                "name": author.name,
                "roles": sorted(role.capitalize() for role in author.role_names),
                "level": author_level,
            },
            "date": entry.created_at.isoformat() if entry.created_at else None,
            "can_edit": self.can_edit(viewer, entry),
            "can_view": can_view(self.level_of(viewer), viewer.id, author, self.hierarchy),
        }

    def _get_mutable_entry(self, viewer: models.User, entry_id: int) -> models.Entry:
        entry = self.entry_repo.find_by_id(entry_id)
        if not entry:
            raise EntryNotFoundError(f"Entry with id '{entry_id}' not found.")
        if not self.can_edit(viewer, entry):
            logger.warning("User %s was denied changes to entry %s.", viewer.id, entry_id)
            raise PermissionDeniedError("Permission denied.")
        return entry

    @staticmethod
    def _clean_content(content) -> str:
        content = sanitize_text_field(content)
        if not content:
            raise EmptyContentError("Content cannot be empty.")
        return content

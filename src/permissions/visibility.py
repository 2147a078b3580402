# src/permissions/visibility.py
from typing import List

from src.permissions.roles import RoleHierarchy


class VisibilityPredicate:
    """
    조회자가 어떤 항목을 볼 수 있는지 나타내는 조건 객체입니다.

    항목은 다음 중 하나를 만족하면 보입니다.
      - 항목 작성자가 조회자 본인인 경우
      - 작성자의 레벨이 조회자의 레벨 이하인 경우 (같은 레벨 포함)

    이 객체는 I/O를 수행하지 않습니다. 리포지토리는 목록 조회 시 이 객체를 인자로 받아
    SQL 조건으로 변환하고, 메모리 상의 항목은 객체를 직접 호출하여 검사합니다.
    """

    def __init__(self, viewer_level: int, viewer_id: int, hierarchy: RoleHierarchy):
        self.viewer_level = viewer_level
        self.viewer_id = viewer_id
        self.hierarchy = hierarchy

    def allows_author(self, author_id: int, author_roles) -> bool:
        if author_id == self.viewer_id:
            return True
        return self.hierarchy.level_of(author_roles) <= self.viewer_level

    def __call__(self, entry) -> bool:
        author = entry.author
        return self.allows_author(author.id, author.role_names)

    @property
    def hidden_roles(self) -> List[str]:
        """작성자가 이 중 하나라도 가지고 있으면 (본인이 아닌 한) 항목이 숨겨지는 역할 목록."""
        return self.hierarchy.roles_above(self.viewer_level)

    @property
    def fallback_visible(self) -> bool:
        """기본 레벨(역할 없음 또는 알 수 없는 역할)의 작성자를 볼 수 있는지 여부."""
        return self.hierarchy.fallback_weight <= self.viewer_level

    def __repr__(self) -> str:
        return f"VisibilityPredicate(viewer_id={self.viewer_id!r}, viewer_level={self.viewer_level!r})"


def visible_author_predicate(viewer_level: int, viewer_id: int, hierarchy: RoleHierarchy) -> VisibilityPredicate:
    return VisibilityPredicate(viewer_level, viewer_id, hierarchy)


def can_view(viewer_level: int, viewer_id: int, author, hierarchy: RoleHierarchy) -> bool:
    """단일 작성자에 대한 열람 가능 여부를 반환합니다."""
    return visible_author_predicate(viewer_level, viewer_id, hierarchy).allows_author(author.id, author.role_names)

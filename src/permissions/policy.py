# src/permissions/policy.py
from abc import ABC, abstractmethod
from typing import Dict, FrozenSet

from src.permissions.roles import RoleHierarchy, RoleName

EDIT_ENTRIES = "edit_entries"
EDIT_OTHERS_ENTRIES = "edit_others_entries"


class EditPolicy(ABC):
    """항목 수정/삭제 권한을 판단하는 정책. 요청마다, 항목마다 새로 평가합니다."""

    def __init__(self, hierarchy: RoleHierarchy):
        self.hierarchy = hierarchy

    @abstractmethod
    def can_mutate(self, viewer, entry) -> bool:
        """viewer가 entry를 수정하거나 삭제할 수 있으면 True를 반환합니다."""
        pass


class OwnershipPolicy(EditPolicy):
    """관리자이거나 작성자 본인인 경우에만 허용합니다."""

    def can_mutate(self, viewer, entry) -> bool:
        if self.hierarchy.is_administrator(viewer.role_names):
            return True
        return entry.author_id == viewer.id


class CapabilityPolicy(EditPolicy):
    """
    역할별 권한(capability) 집합으로 판단합니다.

    - 작성자 본인은 'edit_entries' 권한이 있으면 허용됩니다.
    - 다른 사람의 항목은 'edit_others_entries' 권한이 있고,
      작성자의 레벨이 자신의 레벨 이하일 때만 허용됩니다.
    - 테이블에 없는 역할은 기본 역할의 권한을 받습니다.
    """

    def __init__(self, hierarchy: RoleHierarchy, editors_edit_others: bool = False):
        super().__init__(hierarchy)
        self.capabilities = build_capabilities(editors_edit_others)

    def capabilities_of(self, roles) -> FrozenSet[str]:
        fallback = self.capabilities.get(self.hierarchy.default_role, frozenset())
        roles = set(roles)
        if not roles:
            return fallback
        granted = set()
        for role in roles:
            granted |= self.capabilities.get(role, fallback)
        return frozenset(granted)

    def can_mutate(self, viewer, entry) -> bool:
        granted = self.capabilities_of(viewer.role_names)
        if entry.author_id == viewer.id:
            return EDIT_ENTRIES in granted
        if EDIT_OTHERS_ENTRIES not in granted:
            return False
        viewer_level = self.hierarchy.level_of(viewer.role_names)
        author_level = self.hierarchy.level_of(entry.author.role_names)
        return author_level <= viewer_level


def build_capabilities(editors_edit_others: bool = False) -> Dict[str, FrozenSet[str]]:
    editor_caps = {EDIT_ENTRIES}
    if editors_edit_others:
        editor_caps.add(EDIT_OTHERS_ENTRIES)
    return {
        RoleName.ADMINISTRATOR.value: frozenset({EDIT_ENTRIES, EDIT_OTHERS_ENTRIES}),
        RoleName.EDITOR.value: frozenset(editor_caps),
        RoleName.SUBSCRIBER.value: frozenset({EDIT_ENTRIES}),
    }


def build_edit_policy(settings, hierarchy: RoleHierarchy) -> EditPolicy:
    """
    설정에 따라 편집 정책 객체를 생성합니다.

    Raises:
        ValueError: 알 수 없는 정책 이름일 때.
    """
    if settings.edit_policy == "ownership":
        return OwnershipPolicy(hierarchy)
    if settings.edit_policy == "capability":
        return CapabilityPolicy(hierarchy, editors_edit_others=settings.editors_edit_others)
    raise ValueError(f"Unknown edit policy '{settings.edit_policy}'.")

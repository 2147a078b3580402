# tests/permissions/test_policy.py
import pytest

from src.config import Settings
from src.database import models
from src.permissions.policy import (
    CapabilityPolicy, OwnershipPolicy, build_edit_policy,
    EDIT_ENTRIES, EDIT_OTHERS_ENTRIES,
)
from src.permissions.roles import RoleHierarchy

def make_user(user_id, *role_names):
    return models.User(id=user_id, username=f"user{user_id}", password_hash="x",
                       roles=[models.Role(name=name) for name in role_names])

def make_entry(author):
    return models.Entry(id=99, content="text", author_id=author.id, author=author)

# ===================================================================
#  정책 A: 관리자 또는 작성자 (OwnershipPolicy)
# ===================================================================
class TestOwnershipPolicy:
    @pytest.fixture
    def policy(self, hierarchy: RoleHierarchy) -> OwnershipPolicy:
        return OwnershipPolicy(hierarchy)

    def test_author_can_mutate_own_entry(self, policy):
        author = make_user(1, "subscriber")
        assert policy.can_mutate(author, make_entry(author))

    def test_administrator_can_mutate_any_entry(self, policy):
        admin = make_user(1, "administrator")
        other_admin = make_user(2, "administrator")
        assert policy.can_mutate(admin, make_entry(make_user(3, "subscriber")))
        assert policy.can_mutate(admin, make_entry(other_admin))

    def test_editor_cannot_mutate_others_entries(self, policy):
        """정책 A에서는 편집자도 다른 사람의 항목을 수정할 수 없는지 테스트합니다."""
        editor = make_user(1, "editor")
        assert not policy.can_mutate(editor, make_entry(make_user(2, "subscriber")))

    def test_non_owner_subscriber_is_refused(self, policy):
        assert not policy.can_mutate(make_user(1, "subscriber"), make_entry(make_user(2, "subscriber")))

    def test_roleless_author_can_mutate_own_entry(self, policy):
        author = make_user(1)
        assert policy.can_mutate(author, make_entry(author))

    def test_decision_follows_current_roles(self, policy):
        """역할 변경이 다음 평가에 바로 반영되는지(캐시하지 않음) 테스트합니다."""
        user = make_user(1, "subscriber")
        entry = make_entry(make_user(2, "subscriber"))
        assert not policy.can_mutate(user, entry)
        user.roles.append(models.Role(name="administrator"))
        assert policy.can_mutate(user, entry)

# ===================================================================
#  정책 B: 권한(capability) 위임 (CapabilityPolicy)
# ===================================================================
class TestCapabilityPolicy:
    def test_default_capabilities(self, hierarchy: RoleHierarchy):
        policy = CapabilityPolicy(hierarchy)
        assert policy.capabilities_of({"administrator"}) == {EDIT_ENTRIES, EDIT_OTHERS_ENTRIES}
        assert policy.capabilities_of({"editor"}) == {EDIT_ENTRIES}
        assert policy.capabilities_of({"unknown-role"}) == {EDIT_ENTRIES}
        assert policy.capabilities_of(set()) == {EDIT_ENTRIES}

    def test_editor_flag_grants_edit_others(self, hierarchy: RoleHierarchy):
        policy = CapabilityPolicy(hierarchy, editors_edit_others=True)
        assert EDIT_OTHERS_ENTRIES in policy.capabilities_of({"editor"})

    def test_editor_without_flag_cannot_mutate_others(self, hierarchy: RoleHierarchy):
        policy = CapabilityPolicy(hierarchy, editors_edit_others=False)
        assert not policy.can_mutate(make_user(1, "editor"), make_entry(make_user(2, "subscriber")))

    def test_editor_with_flag_mutates_lower_and_equal_levels_only(self, hierarchy: RoleHierarchy):
        """편집자 플래그가 켜지면 자신 이하 레벨의 항목만 수정할 수 있는지 테스트합니다."""
        policy = CapabilityPolicy(hierarchy, editors_edit_others=True)
        editor = make_user(1, "editor")
        assert policy.can_mutate(editor, make_entry(make_user(2, "subscriber")))
        assert policy.can_mutate(editor, make_entry(make_user(3, "editor")))
        assert not policy.can_mutate(editor, make_entry(make_user(4, "administrator")))

    def test_administrator_mutates_everything(self, hierarchy: RoleHierarchy):
        policy = CapabilityPolicy(hierarchy)
        admin = make_user(1, "administrator")
        assert policy.can_mutate(admin, make_entry(make_user(2, "administrator")))
        assert policy.can_mutate(admin, make_entry(make_user(3)))

    def test_author_mutates_own_entry(self, hierarchy: RoleHierarchy):
        policy = CapabilityPolicy(hierarchy)
        author = make_user(1, "subscriber")
        assert policy.can_mutate(author, make_entry(author))

# ===================================================================
#  설정에 따른 정책 선택 테스트
# ===================================================================
class TestBuildEditPolicy:
    def test_ownership_is_default(self, hierarchy: RoleHierarchy):
        assert isinstance(build_edit_policy(Settings(), hierarchy), OwnershipPolicy)

    def test_capability_policy_receives_editor_flag(self, hierarchy: RoleHierarchy):
        policy = build_edit_policy(Settings(edit_policy="capability", editors_edit_others=True), hierarchy)
        assert isinstance(policy, CapabilityPolicy)
        assert EDIT_OTHERS_ENTRIES in policy.capabilities_of({"editor"})

    def test_unknown_policy_is_rejected(self, hierarchy: RoleHierarchy):
        with pytest.raises(ValueError):
            build_edit_policy(Settings.model_construct(edit_policy="everyone"), hierarchy)

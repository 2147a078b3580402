# src/permissions/roles.py
from enum import Enum
from types import MappingProxyType
from typing import Iterable, List, Mapping


class RoleName(str, Enum):
    """시스템이 알고 있는 역할 이름. 이 밖의 문자열은 '알 수 없는 역할'로 취급합니다."""
    ADMINISTRATOR = "administrator"
    EDITOR = "editor"
    SUBSCRIBER = "subscriber"


# 역할별 열람 가중치 (숫자가 클수록 더 많은 항목을 볼 수 있음)
DEFAULT_ROLE_WEIGHTS = {
    RoleName.ADMINISTRATOR.value: 100,
    RoleName.EDITOR.value: 60,
    RoleName.SUBSCRIBER.value: 20,
}


class RoleHierarchy:
    """
    역할 이름을 가중치(레벨)로 변환하는 불변 테이블입니다.

    테이블에 없는 역할과 역할이 하나도 없는 사용자는 기본 역할(subscriber)의
    가중치를 받습니다. 인스턴스는 생성 후 변경되지 않으며, 설정을 바꾸려면
    새 인스턴스를 만들어 교체합니다.
    """

    def __init__(self, weights: Mapping[str, int], default_role: str = RoleName.SUBSCRIBER.value):
        self._weights = MappingProxyType(dict(weights))
        self.default_role = default_role
        self.fallback_weight = self._weights[default_role]

    @classmethod
    def from_mapping(cls, weights: Mapping[str, int], default_role: str = RoleName.SUBSCRIBER.value) -> "RoleHierarchy":
        """
        설정값을 검증한 뒤 RoleHierarchy를 생성합니다.

        Raises:
            ValueError: 가중치가 음이 아닌 정수가 아니거나, 기본 역할이 테이블에 없거나,
                기본 역할보다 가중치가 낮은 역할이 있을 때.
        """
        for name, weight in weights.items():
            if isinstance(weight, bool) or not isinstance(weight, int) or weight < 0:
                raise ValueError(f"Weight for role '{name}' must be a non-negative integer, got {weight!r}.")
        if default_role not in weights:
            raise ValueError(f"Default role '{default_role}' is missing from the role weight table.")
        # 모든 사용자의 레벨은 기본 역할의 가중치 이상이어야 합니다.
        floor = weights[default_role]
        for name, weight in weights.items():
            if weight < floor:
                raise ValueError(
                    f"Weight for role '{name}' ({weight}) is below the default role '{default_role}' ({floor})."
                )
        return cls(weights, default_role=default_role)

    @property
    def weights(self) -> Mapping[str, int]:
        return self._weights

    def weight_of(self, role: str) -> int:
        return self._weights.get(role, self.fallback_weight)

    def level_of(self, roles: Iterable[str]) -> int:
        """
        역할 집합의 레벨(가장 높은 가중치)을 계산합니다.
        빈 집합이면 기본 역할의 가중치를 반환합니다.
        """
        return max((self.weight_of(role) for role in roles), default=self.fallback_weight)

    def roles_above(self, level: int) -> List[str]:
        """가중치가 주어진 레벨보다 엄격하게 큰, 알려진 역할 이름 목록을 반환합니다."""
        return sorted(name for name, weight in self._weights.items() if weight > level)

    def is_administrator(self, roles: Iterable[str]) -> bool:
        return RoleName.ADMINISTRATOR.value in set(roles)

    def __repr__(self) -> str:
        return f"RoleHierarchy({dict(self._weights)!r}, default_role={self.default_role!r})"

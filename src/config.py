# src/config.py
from typing import Annotated, Dict, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from src.permissions.roles import DEFAULT_ROLE_WEIGHTS, RoleHierarchy, RoleName

DEFAULT_PER_PAGE = 10
MIN_PER_PAGE = 1
MAX_PER_PAGE = 100


def clamp_per_page(value) -> int:
    """페이지 크기를 1~100 범위로 보정합니다. 숫자가 아니면 기본값을 사용합니다."""
    try:
        per_page = int(value)
    except (TypeError, ValueError):
        return DEFAULT_PER_PAGE
    return max(MIN_PER_PAGE, min(MAX_PER_PAGE, per_page))


def parse_role_weights(raw: str) -> Dict[str, int]:
    """
    'administrator=100,editor=60,subscriber=20' 형식의 문자열을 역할-가중치 딕셔너리로 변환합니다.

    Raises:
        ValueError: 형식이 잘못되었거나 가중치가 정수가 아닐 때.
    """
    weights = {}
    for pair in raw.split(","):
        pair = pair.strip()
        if not pair:
            continue
        name, sep, weight = pair.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"Invalid role weight '{pair}'. Expected 'role=weight'.")
        weights[name.strip().lower()] = int(weight.strip())
    return weights


class Settings(BaseSettings):
    """
    애플리케이션 전역 설정입니다.

    모든 값은 ENTRIES_ 접두사가 붙은 환경 변수나 .env 파일로 덮어쓸 수 있습니다.
    예: ENTRIES_EDIT_POLICY=capability

    한 번 생성되면 변경되지 않으며, 설정을 다시 읽으려면 load_settings()를 다시 호출합니다.
    """

    model_config = SettingsConfigDict(
        env_prefix="ENTRIES_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    database_url: str = Field(default="sqlite:///entries.db", description="SQLAlchemy 데이터베이스 URL")
    per_page: int = Field(default=DEFAULT_PER_PAGE, description="목록 한 페이지의 항목 수 (1~100)")
    edit_policy: Literal["ownership", "capability"] = Field(
        default="ownership",
        description="수정/삭제 권한 정책 (ownership: 작성자 또는 관리자, capability: 역할별 권한)"
    )
    editors_edit_others: bool = Field(default=False, description="capability 정책에서 편집자가 다른 사용자의 항목을 수정할 수 있는지 여부")
    role_weights: Annotated[Dict[str, int], NoDecode] = Field(
        default_factory=lambda: dict(DEFAULT_ROLE_WEIGHTS),
        description="역할별 가중치 ('administrator=100,editor=60,subscriber=20' 형식)"
    )
    default_role: str = Field(default=RoleName.SUBSCRIBER.value, description="알 수 없는 역할에 적용할 기본 역할")
    token_ttl_minutes: int = Field(default=60, gt=0, description="인증 토큰 유효 시간(분)")
    log_level: str = Field(default="INFO", description="로그 레벨")
    host: str = ""
    port: int = Field(default=8000, ge=0, le=65535)

    @field_validator("per_page", mode="before")
    @classmethod
    def clamp_page_size(cls, v):
        return clamp_per_page(v)

    @field_validator("edit_policy", mode="before")
    @classmethod
    def normalize_policy_name(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("role_weights", mode="before")
    @classmethod
    def parse_weights(cls, v):
        if isinstance(v, str):
            return parse_role_weights(v) if v.strip() else dict(DEFAULT_ROLE_WEIGHTS)
        return v

    @field_validator("log_level", mode="after")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode="after")
    def validate_role_table(self) -> "Settings":
        """역할 테이블이 RoleHierarchy의 조건(기본 역할 포함, 하한 등)을 만족하는지 미리 검증합니다."""
        self.role_hierarchy()
        return self

    def role_hierarchy(self) -> RoleHierarchy:
        return RoleHierarchy.from_mapping(self.role_weights, default_role=self.default_role)


def load_settings() -> Settings:
    """
    환경 변수와 .env 파일에서 설정을 읽어 새로운 Settings 객체를 생성합니다.

    Raises:
        pydantic.ValidationError: 편집 정책 이름, 숫자 값, 역할 가중치 형식이 잘못되었을 때.
    """
    return Settings()

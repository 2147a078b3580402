# tests/test_config.py
import pytest
from pydantic import ValidationError

from src.config import Settings, clamp_per_page, load_settings, parse_role_weights

@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    # 작업 디렉터리의 .env 파일이 테스트 결과에 섞이지 않도록 빈 디렉터리에서 실행
    monkeypatch.chdir(tmp_path)
    for name in ("ENTRIES_DATABASE_URL", "ENTRIES_PER_PAGE", "ENTRIES_EDIT_POLICY",
                 "ENTRIES_EDITORS_EDIT_OTHERS", "ENTRIES_ROLE_WEIGHTS", "ENTRIES_TOKEN_TTL_MINUTES",
                 "ENTRIES_LOG_LEVEL", "ENTRIES_HOST", "ENTRIES_PORT"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch

def test_defaults(clean_env):
    settings = load_settings()
    assert settings.per_page == 10
    assert settings.edit_policy == "ownership"
    assert settings.editors_edit_others is False
    assert settings.port == 8000
    assert settings.role_hierarchy().level_of({"administrator"}) == 100

def test_values_from_environment(clean_env):
    clean_env.setenv("ENTRIES_PER_PAGE", "25")
    clean_env.setenv("ENTRIES_EDIT_POLICY", "Capability")
    clean_env.setenv("ENTRIES_EDITORS_EDIT_OTHERS", "yes")
    clean_env.setenv("ENTRIES_ROLE_WEIGHTS", "administrator=100, editor=70, subscriber=10")
    clean_env.setenv("ENTRIES_LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.per_page == 25
    assert settings.edit_policy == "capability"
    assert settings.editors_edit_others is True
    assert settings.log_level == "DEBUG"
    assert settings.role_hierarchy().level_of({"editor"}) == 70
    assert settings.role_hierarchy().level_of(set()) == 10

def test_values_from_dotenv_file(clean_env, tmp_path):
    """.env 파일의 값도 ENTRIES_ 접두사로 읽히는지 테스트합니다."""
    (tmp_path / ".env").write_text("ENTRIES_PER_PAGE=3\nENTRIES_EDIT_POLICY=capability\n", encoding="utf-8")
    settings = load_settings()
    assert settings.per_page == 3
    assert settings.edit_policy == "capability"

def test_per_page_is_clamped(clean_env):
    clean_env.setenv("ENTRIES_PER_PAGE", "500")
    assert load_settings().per_page == 100
    clean_env.setenv("ENTRIES_PER_PAGE", "many")
    assert load_settings().per_page == 10

def test_unknown_edit_policy(clean_env):
    clean_env.setenv("ENTRIES_EDIT_POLICY", "anarchy")
    with pytest.raises(ValidationError):
        load_settings()

@pytest.mark.parametrize("name, value", [
    ("ENTRIES_PORT", "abc"),
    ("ENTRIES_TOKEN_TTL_MINUTES", "soon"),
    ("ENTRIES_TOKEN_TTL_MINUTES", "0"),
    ("ENTRIES_ROLE_WEIGHTS", "editor=high"),
    ("ENTRIES_ROLE_WEIGHTS", "administrator=100,subscriber=20,guest=5"),
])
def test_invalid_values_are_reported(clean_env, name, value):
    """잘못된 값은 필드 이름이 담긴 ValidationError로 보고되는지 테스트합니다."""
    clean_env.setenv(name, value)
    with pytest.raises(ValidationError):
        load_settings()

def test_each_load_builds_a_new_object(clean_env):
    """설정은 변경하지 않고 다시 읽어서 교체하는지 테스트합니다."""
    first = load_settings()
    clean_env.setenv("ENTRIES_PER_PAGE", "5")
    second = load_settings()
    assert first.per_page == 10
    assert second.per_page == 5
    with pytest.raises(ValidationError):
        first.per_page = 50

@pytest.mark.parametrize("value, expected", [("10", 10), (0, 1), (101, 100), ("abc", 10), (None, 10)])
def test_clamp_per_page(value, expected):
    assert clamp_per_page(value) == expected

def test_parse_role_weights():
    assert parse_role_weights("administrator=100,editor=60") == {"administrator": 100, "editor": 60}
    with pytest.raises(ValueError):
        parse_role_weights("administrator")
    with pytest.raises(ValueError):
        parse_role_weights("editor=high")

def test_settings_without_default_role_weight(clean_env):
    with pytest.raises(ValidationError):
        Settings(role_weights={"administrator": 100})

# tests/conftest.py
import hashlib
from datetime import datetime, timedelta

import pytest

from src.database import models
from src.database.database import Base, build_engine, build_session_factory
from src.permissions.roles import DEFAULT_ROLE_WEIGHTS, RoleHierarchy

# ===================================================================
#  공용 Fixture 설정
# ===================================================================

@pytest.fixture
def hierarchy() -> RoleHierarchy:
    """기본 역할-가중치 테이블 (administrator=100, editor=60, subscriber=20)."""
    return RoleHierarchy.from_mapping(DEFAULT_ROLE_WEIGHTS)

@pytest.fixture
def db_engine():
    """테스트마다 새로 만드는 인메모리 SQLite 엔진."""
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()

@pytest.fixture
def session_factory(db_engine):
    return build_session_factory(db_engine)

@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()

@pytest.fixture
def make_user(db_session):
    """역할 이름 목록을 받아 사용자를 DB에 생성하는 팩토리. 역할은 필요할 때 생성됩니다."""
    def _make_user(username, roles=(), password=None):
        role_models = []
        for name in roles:
            role = db_session.query(models.Role).filter_by(name=name).first()
            if role is None:
                role = models.Role(name=name)
                db_session.add(role)
            role_models.append(role)
        password_hash = hashlib.sha256((password or username).encode('utf-8')).hexdigest()
        user = models.User(username=username, display_name=username.title(), password_hash=password_hash, roles=role_models)
        db_session.add(user)
        db_session.commit()
        return user
    return _make_user

@pytest.fixture
def make_entry(db_session):
    """작성자와 내용을 받아 항목을 생성하는 팩토리. 생성 순서대로 작성 시각이 1분씩 늘어납니다."""
    base_time = datetime(2024, 1, 1, 12, 0, 0)
    counter = {"n": 0}

    def _make_entry(author, content="hello"):
        counter["n"] += 1
        entry = models.Entry(content=content, author_id=author.id, created_at=base_time + timedelta(minutes=counter["n"]))
        db_session.add(entry)
        db_session.commit()
        return entry
    return _make_entry

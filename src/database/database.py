from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from src.config import load_settings

# 모든 모델 클래스가 상속받을 Base 클래스
Base = declarative_base()


def build_engine(database_url: str):
    """
    데이터베이스 URL로 SQLAlchemy 엔진을 생성합니다.
    SQLite 인메모리 DB는 모든 세션이 같은 연결을 공유하도록 StaticPool을 사용합니다.
    """
    if not database_url.startswith("sqlite"):
        return create_engine(database_url)
    # connect_args는 SQLite에서만 필요합니다. (thread-safe 설정)
    connect_args = {"check_same_thread": False}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(database_url, connect_args=connect_args, poolclass=StaticPool)
    return create_engine(database_url, connect_args=connect_args)


def build_session_factory(engine):
    # autocommit=False, autoflush=False로 설정하여, 명시적으로 commit을 호출해야 DB에 반영됩니다.
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


# 데이터베이스 연결 문자열은 환경 변수(ENTRIES_DATABASE_URL)에서 읽습니다.
engine = build_engine(load_settings().database_url)
SessionLocal = build_session_factory(engine)

import hashlib
import logging

from .database import engine, SessionLocal, Base
from .models import *
from src.permissions.roles import RoleName

logger = logging.getLogger(__name__)

# 역할별 데모 사용자 (사용자 이름 = 비밀번호)
DEMO_USERS = [
    ("admin", "Admin", RoleName.ADMINISTRATOR.value),
    ("editor", "Editor", RoleName.EDITOR.value),
    ("subscriber", "Subscriber", RoleName.SUBSCRIBER.value),
]


def initialize_db(bind=None, session_factory=None):
    """
    DB와 테이블을 생성하고, 기본 역할과 데모 사용자를 삽입합니다.
    SQLAlchemy 모델을 사용하여 모든 작업을 수행합니다.
    """
    bind = bind or engine
    session_factory = session_factory or SessionLocal
    logger.info("Initializing database...")

    # 모든 테이블을 생성합니다. (이미 존재하면 생성하지 않음)
    Base.metadata.create_all(bind=bind)

    db = session_factory()
    try:
        # 기본 데이터가 이미 있는지 확인
        if db.query(Role).first():
            logger.info("Seed data already present, skipping.")
            return

        roles = {name.value: Role(name=name.value) for name in RoleName}
        db.add_all(roles.values())

        for username, display_name, role_name in DEMO_USERS:
            password_hash = hashlib.sha256(username.encode('utf-8')).hexdigest()
            user = User(username=username, display_name=display_name, password_hash=password_hash)
            user.roles.append(roles[role_name])
            db.add(user)

        db.commit()
        logger.info("Database initialized with %d roles and %d demo users.", len(roles), len(DEMO_USERS))

    except Exception:
        logger.exception("Database initialization failed.")
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == '__main__':
    from src.config import load_settings
    from src.utils.logging_utils import configure_logging

    configure_logging(load_settings().log_level)
    initialize_db()

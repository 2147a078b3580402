import hashlib
import logging
import uuid
from datetime import datetime, timedelta
from typing import Dict, Any, Iterable, List, Optional

from src.database import models
from src.permissions.roles import RoleHierarchy
from src.repositories.interfaces import IUserRepository, IRoleRepository
from src.services.exceptions import (
    UserCreationError, UserNotFoundError, RoleNotFoundError,
    AuthenticationError, TokenInvalidError, PermissionDeniedError
)

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode('utf-8')).hexdigest()


class IdentityService:
    """사용자, 역할, 인증 등 신원 및 접근 관리 서비스를 제공합니다."""
    _token_cache = {}

    def __init__(self, user_repo: IUserRepository, role_repo: IRoleRepository, hierarchy: RoleHierarchy, token_ttl_minutes: int = 60):
        """
        IdentityService를 초기화합니다.

        Args:
            user_repo: 사용자 데이터에 접근하기 위한 리포지토리.
            role_repo: 역할 데이터에 접근하기 위한 리포지토리.
            hierarchy: 사용자 레벨 계산에 사용할 역할-가중치 테이블.
            token_ttl_minutes: 발급한 토큰의 유효 시간(분).
        """
        self.user_repo = user_repo
        self.role_repo = role_repo
        self.hierarchy = hierarchy
        self.token_ttl = timedelta(minutes=token_ttl_minutes)

    def describe_user(self, user: models.User) -> Dict[str, Any]:
        """사용자 정보(비밀번호 제외)와 역할, 레벨을 딕셔너리로 반환합니다."""
        return {
            "id": user.id,
            "username": user.username,
            "name": user.name,
            "roles": sorted(user.role_names),
            "level": self.hierarchy.level_of(user.role_names),
        }

    def create_user(self, username: str, password: str, display_name: Optional[str] = None, roles: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """
        새로운 사용자를 생성합니다. 비밀번호는 해시하여 저장합니다.

        Raises:
            UserCreationError: 사용자 이름이나 비밀번호가 없거나, 동일한 이름의 사용자가 이미 존재할 때.
            RoleNotFoundError: 요청한 역할이 DB에 없을 때.
        """
        if not username or not password:
            raise UserCreationError("Username and password are required.")
        if self.user_repo.find_by_username(username):
            raise UserCreationError(f"User with username '{username}' already exists.")

        role_models = [self._get_role(name) for name in (roles or [])]
        new_user = models.User(username=username, display_name=display_name, password_hash=hash_password(password))
        new_user.roles.extend(role_models)
        created_user = self.user_repo.create(new_user)
        logger.info("User '%s' created with roles %s.", username, sorted(created_user.role_names))
        return self.describe_user(created_user)

    def list_users(self) -> List[Dict[str, Any]]:
        """모든 사용자의 목록을 조회합니다. (비밀번호 제외)"""
        return [self.describe_user(u) for u in self.user_repo.list_all()]

    def get_user(self, user_id: int) -> Dict[str, Any]:
        """
        ID로 특정 사용자를 조회합니다. (비밀번호 제외)

        Raises:
            UserNotFoundError: 해당 ID의 사용자를 찾을 수 없을 때.
        """
        return self.describe_user(self._get_user(user_id))

    def delete_user(self, user_id: int) -> bool:
        """
        사용자를 삭제합니다. 사용자가 작성한 항목과 역할 연결도 함께 삭제됩니다.

        Raises:
            UserNotFoundError: 해당 ID의 사용자를 찾을 수 없을 때.
        """
        user = self._get_user(user_id)
        self.user_repo.delete(user)
        return True

    def assign_role(self, user_id: int, role_name: str) -> bool:
        """
        사용자에게 역할을 부여합니다.

        Raises:
            UserNotFoundError: 해당 ID의 사용자를 찾을 수 없을 때.
            RoleNotFoundError: 해당 이름의 역할을 찾을 수 없을 때.
        """
        user = self._get_user(user_id)
        role = self._get_role(role_name)
        self.user_repo.add_role(user, role)
        return True

    def revoke_role(self, user_id: int, role_name: str) -> bool:
        """
        사용자의 역할을 회수합니다.

        Raises:
            UserNotFoundError: 해당 ID의 사용자를 찾을 수 없을 때.
            RoleNotFoundError: 해당 이름의 역할을 찾을 수 없을 때.
        """
        user = self._get_user(user_id)
        role = self._get_role(role_name)
        self.user_repo.remove_role(user, role)
        return True

    def require_administrator(self, user: models.User):
        """
        Raises:
            PermissionDeniedError: 사용자가 관리자가 아닐 때.
        """
        if not self.hierarchy.is_administrator(user.role_names):
            logger.warning("User %s attempted an administrator-only operation.", user.id)
            raise PermissionDeniedError("Administrator role required.")

    def authenticate(self, username: str, password: str) -> Dict[str, str]:
        """
        자격증명을 검증하고, 성공 시 인증 토큰을 발급합니다.

        Raises:
            AuthenticationError: 사용자 이름 또는 비밀번호가 올바르지 않을 때.
        """
        user = self.user_repo.find_by_username(username)
        if not user or user.password_hash != hash_password(password or ""):
            raise AuthenticationError("Invalid username or password.")

        self._prune_expired_tokens()
        token = str(uuid.uuid4())
        expires_at = datetime.now() + self.token_ttl
        self._token_cache[token] = {
            'user_id': user.id,
            'expires_at': expires_at
        }
        return {"token": token, "expires_at": expires_at.isoformat()}

    def validate_token(self, token: str) -> Dict[str, Any]:
        """
        인증 토큰의 유효성을 검증하고, 유효하면 토큰 데이터를 반환합니다.

        Raises:
            TokenInvalidError: 토큰을 찾을 수 없거나 만료되었을 때.
        """
        token_data = self._token_cache.get(token)
        if not token_data:
            raise TokenInvalidError("Token not found or invalid.")

        if datetime.now() > token_data['expires_at']:
            del self._token_cache[token]
            raise TokenInvalidError("Token has expired.")

        return token_data

    def current_user(self, token: str) -> models.User:
        """
        토큰에 해당하는 사용자를 조회합니다.
        역할이 바뀌었을 수 있으므로 매 요청마다 DB에서 다시 읽습니다.

        Raises:
            TokenInvalidError: 토큰이 유효하지 않거나, 토큰의 사용자가 삭제되었을 때.
        """
        token_data = self.validate_token(token)
        user = self.user_repo.find_by_id(token_data['user_id'])
        if not user:
            del self._token_cache[token]
            raise TokenInvalidError("Token user no longer exists.")
        return user

    def _prune_expired_tokens(self):
        """만료된 토큰을 캐시에서 제거합니다."""
        now = datetime.now()
        expired = [token for token, data in self._token_cache.items() if now > data['expires_at']]
        for token in expired:
            del self._token_cache[token]

    def _get_user(self, user_id: int) -> models.User:
        user = self.user_repo.find_by_id(user_id)
        if not user:
            raise UserNotFoundError(f"User with id '{user_id}' not found.")
        return user

    def _get_role(self, role_name: str) -> models.Role:
        role = self.role_repo.find_by_name(role_name)
        if not role:
            raise RoleNotFoundError(f"Role '{role_name}' not found.")
        return role

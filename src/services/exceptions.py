# src/services/exceptions.py

# --- General Exceptions ---
class EntryNotFoundError(Exception):
    """항목을 찾을 수 없을 때"""
    pass

class UserNotFoundError(Exception):
    """사용자를 찾을 수 없을 때"""
    pass

class RoleNotFoundError(Exception):
    """역할을 찾을 수 없을 때"""
    pass

# --- Creation/Validation Exceptions ---
class EmptyContentError(ValueError):
    """항목 내용이 비어 있거나 공백뿐일 때"""
    pass

class UserCreationError(Exception):
    """사용자 생성 실패 시"""
    pass

# --- Auth Exceptions ---
class PermissionDeniedError(Exception):
    """권한이 없는 사용자가 수정/삭제 등을 시도할 때"""
    pass

class TokenInvalidError(Exception):
    """토큰이 유효하지 않거나 없을 때"""
    pass

class AuthenticationError(Exception):
    """사용자 자격 증명 실패 시"""
    pass

# src/app.py
from wsgiref.simple_server import make_server
from urllib.parse import parse_qs
import json
import logging
import re

# SQLAlchemy 및 의존성 임포트
from src.config import Settings, load_settings
from src.database.database import SessionLocal
from src.permissions.policy import build_edit_policy
from src.repositories.sqlalchemy.sqlalchemy_entry_repository import SqlalchemyEntryRepository
from src.repositories.sqlalchemy.sqlalchemy_user_repository import SqlalchemyUserRepository
from src.repositories.sqlalchemy.sqlalchemy_role_repository import SqlalchemyRoleRepository
from src.services.entry_service import EntryService
from src.services.identity_service import IdentityService
from src.services.exceptions import *

logger = logging.getLogger(__name__)

# --------------------------------------------------------------------------
## 요청 처리 유틸리티 함수
# --------------------------------------------------------------------------

def _read_body(environ) -> bytes:
    try:
        content_length = int(environ.get("CONTENT_LENGTH") or 0)
    except ValueError:
        content_length = 0
    return environ["wsgi.input"].read(content_length) if content_length > 0 else b""

def get_request_data(environ):
    try:
        body = _read_body(environ)
        data = json.loads(body) if body else {}
    except (ValueError, json.JSONDecodeError):
        raise ValueError("Invalid or missing JSON body.")
    if not isinstance(data, dict):
        raise ValueError("JSON body must be an object.")
    return data

def get_form_data(environ):
    """application/x-www-form-urlencoded 본문을 딕셔너리로 변환합니다. (JSON 본문도 허용)"""
    content_type = environ.get("CONTENT_TYPE", "")
    if content_type.startswith("application/json"):
        return get_request_data(environ)
    body = _read_body(environ).decode("utf-8", errors="replace")
    return {key: values[-1] for key, values in parse_qs(body, keep_blank_values=True).items()}

def get_query_params(environ):
    query = parse_qs(environ.get("QUERY_STRING", ""), keep_blank_values=True)
    return {key: values[-1] for key, values in query.items()}

def get_current_user(environ):
    auth_token = environ.get('HTTP_X_AUTH_TOKEN')
    if not auth_token:
        raise TokenInvalidError("Missing 'X-Auth-Token' header.")
    identity_service = environ['services']['identity']
    return identity_service.current_user(auth_token)

def require_administrator(environ):
    user = get_current_user(environ)
    environ['services']['identity'].require_administrator(user)
    return user

def handle_exception(e):
    error_map = {
        TokenInvalidError: "401 Unauthorized",
        AuthenticationError: "401 Unauthorized",
        PermissionDeniedError: "403 Forbidden",
        EntryNotFoundError: "404 Not Found",
        UserNotFoundError: "404 Not Found",
        RoleNotFoundError: "404 Not Found",
        ValueError: "400 Bad Request",
        EmptyContentError: "400 Bad Request",
        UserCreationError: "400 Bad Request",
    }
    # 등록되지 않은 하위 클래스(예: UnicodeDecodeError)는 가장 가까운 부모 클래스의 상태 코드를 따릅니다.
    for klass in type(e).__mro__:
        status = error_map.get(klass)
        if status is not None:
            return status, str(e)
    logger.exception("Unhandled error while processing request.")
    return "500 Internal Server Error", "Internal Server Error"

# --------------------------------------------------------------------------
## WSGI 애플리케이션 (의존성 주입 및 라우팅)
# --------------------------------------------------------------------------

def create_app(settings: Settings = None, session_factory=None):
    """
    설정과 세션 팩토리를 받아 WSGI 애플리케이션을 생성합니다.
    역할 테이블과 편집 정책은 여기서 한 번만 만들어지고, 요청 간에 변경되지 않습니다.
    """
    settings = settings or load_settings()
    session_factory = session_factory or SessionLocal
    hierarchy = settings.role_hierarchy()
    edit_policy = build_edit_policy(settings, hierarchy)

    def application(environ, start_response):
        path = environ.get("PATH_INFO", "")
        method = environ.get("REQUEST_METHOD", "")
        is_ajax = path.startswith("/ajax")

        db_session = session_factory()
        try:
            # 1. 의존성 생성 (Repositories -> Services)
            entry_repo = SqlalchemyEntryRepository(db_session)
            user_repo = SqlalchemyUserRepository(db_session)
            role_repo = SqlalchemyRoleRepository(db_session)

            identity_service = IdentityService(user_repo, role_repo, hierarchy, settings.token_ttl_minutes)
            entry_service = EntryService(entry_repo, hierarchy, edit_policy, settings.per_page)

            # 2. 생성된 서비스 객체들을 environ을 통해 핸들러에 전달
            environ['services'] = {
                'entries': entry_service,
                'identity': identity_service,
            }

            # 3. 라우팅 및 핸들러 실행
            handler, path_args = None, []
            for route_method, pattern, route_handler in ROUTES:
                if method == route_method and (match := re.match(pattern, path)):
                    handler, path_args = route_handler, match.groups()
                    break

            if handler:
                status, response_body = handler(environ, *path_args)
            else:
                status, response_body = '404 Not Found', json.dumps({'error': 'Not Found'})

        except Exception as e:
            db_session.rollback()
            status, message = handle_exception(e)
            if is_ajax:
                response_body = json.dumps({"success": False, "data": {"message": message}})
            else:
                response_body = json.dumps({"error": message})
        finally:
            db_session.close()

        start_response(status, [("Content-Type", "application/json")])
        return [response_body.encode("utf-8")]

    return application

# --------------------------------------------------------------------------
## REST 핸들러 함수
# --------------------------------------------------------------------------

def auth_tokens_handler(environ, *args):
    data = get_request_data(environ)
    token = environ['services']['identity'].authenticate(data.get('username'), data.get('password'))
    return '201 Created', json.dumps(token)

def me_handler(environ, *args):
    user = get_current_user(environ)
    return '200 OK', json.dumps(environ['services']['identity'].describe_user(user))

def list_entries_handler(environ, *args):
    user = get_current_user(environ)
    params = get_query_params(environ)
    result = environ['services']['entries'].list_entries(user, params.get('page', 1), params.get('order', 'DESC'))
    return '200 OK', json.dumps(result)

def create_entry_handler(environ, *args):
    user = get_current_user(environ)
    data = get_request_data(environ)
    entry = environ['services']['entries'].create_entry(user, data.get('content'))
    return '201 Created', json.dumps(entry)

def update_entry_handler(environ, entry_id):
    user = get_current_user(environ)
    data = get_request_data(environ)
    entry = environ['services']['entries'].update_entry(user, int(entry_id), data.get('content'))
    return '200 OK', json.dumps(entry)

def delete_entry_handler(environ, entry_id):
    user = get_current_user(environ)
    environ['services']['entries'].delete_entry(user, int(entry_id))
    return '204 No Content', ''

def create_user_handler(environ, *args):
    require_administrator(environ)
    data = get_request_data(environ)
    user = environ['services']['identity'].create_user(
        data.get('username'), data.get('password'), data.get('display_name'), data.get('roles')
    )
    return '201 Created', json.dumps(user)

def list_users_handler(environ, *args):
    require_administrator(environ)
    users = environ['services']['identity'].list_users()
    return '200 OK', json.dumps({"users": users})

def get_user_handler(environ, user_id):
    require_administrator(environ)
    user = environ['services']['identity'].get_user(int(user_id))
    return '200 OK', json.dumps(user)

def delete_user_handler(environ, user_id):
    require_administrator(environ)
    environ['services']['identity'].delete_user(int(user_id))
    return '204 No Content', ''

def assign_role_handler(environ, user_id, role_name):
    require_administrator(environ)
    environ['services']['identity'].assign_role(int(user_id), role_name)
    return '204 No Content', ''

def revoke_role_handler(environ, user_id, role_name):
    require_administrator(environ)
    environ['services']['identity'].revoke_role(int(user_id), role_name)
    return '204 No Content', ''

# --------------------------------------------------------------------------
## Ajax 핸들러 (form-post 방식, {"success": ..., "data": ...} 형태로 응답)
# --------------------------------------------------------------------------

def _ajax_success(data=None):
    return '200 OK', json.dumps({"success": True, "data": data})

def _parse_entry_id(data):
    try:
        return int(data.get('id'))
    except (TypeError, ValueError):
        raise ValueError("Missing or invalid entry id.")

def ajax_get_entries(environ, user, data):
    result = environ['services']['entries'].list_entries(user, data.get('page', 1), data.get('order', 'DESC'))
    return _ajax_success(result)

def ajax_create_entry(environ, user, data):
    return _ajax_success(environ['services']['entries'].create_entry(user, data.get('content')))

def ajax_update_entry(environ, user, data):
    entry_id = _parse_entry_id(data)
    return _ajax_success(environ['services']['entries'].update_entry(user, entry_id, data.get('content')))

def ajax_delete_entry(environ, user, data):
    environ['services']['entries'].delete_entry(user, _parse_entry_id(data))
    return _ajax_success()

# action 이름 -> (허용 메서드, 핸들러)
AJAX_ACTIONS = {
    'get_entries': ('GET', ajax_get_entries),
    'create_entry': ('POST', ajax_create_entry),
    'update_entry': ('POST', ajax_update_entry),
    'delete_entry': ('POST', ajax_delete_entry),
}

def ajax_handler(environ, *args):
    method = environ.get("REQUEST_METHOD", "")
    data = get_query_params(environ)
    if method == 'POST':
        data.update(get_form_data(environ))

    action = AJAX_ACTIONS.get(data.get('action', ''))
    if not action:
        raise ValueError(f"Unknown action '{data.get('action', '')}'.")
    allowed_method, action_handler = action
    if method != allowed_method:
        raise ValueError("Invalid request method.")

    user = get_current_user(environ)
    return action_handler(environ, user, data)

ROUTES = [
    ('POST', r'^/v1/auth/tokens$', auth_tokens_handler),
    ('GET', r'^/v1/me$', me_handler),
    ('GET', r'^/v1/entries$', list_entries_handler),
    ('POST', r'^/v1/entries$', create_entry_handler),
    ('PUT', r'^/v1/entries/([0-9]+)$', update_entry_handler),
    ('PATCH', r'^/v1/entries/([0-9]+)$', update_entry_handler),
    ('DELETE', r'^/v1/entries/([0-9]+)$', delete_entry_handler),
    ('POST', r'^/v1/users$', create_user_handler),
    ('GET', r'^/v1/users$', list_users_handler),
    ('GET', r'^/v1/users/([0-9]+)$', get_user_handler),
    ('DELETE', r'^/v1/users/([0-9]+)$', delete_user_handler),
    ('PUT', r'^/v1/users/([0-9]+)/roles/([a-zA-Z_-]+)$', assign_role_handler),
    ('DELETE', r'^/v1/users/([0-9]+)/roles/([a-zA-Z_-]+)$', revoke_role_handler),
    ('GET', r'^/ajax$', ajax_handler),
    ('POST', r'^/ajax$', ajax_handler),
]

application = create_app()

# --------------------------------------------------------------------------
## 서버 실행
# --------------------------------------------------------------------------

if __name__ == "__main__":
    from src.database.db_init import initialize_db
    from src.utils.logging_utils import configure_logging

    settings = load_settings()
    configure_logging(settings.log_level)
    initialize_db()
    try:
        with make_server(settings.host, settings.port, application) as httpd:
            logger.info("Serving entries on port %d...", settings.port)
            httpd.serve_forever()
    except OSError:
        logger.exception("Error starting server.")

# deps.py
from functools import lru_cache

from fastapi import Depends, Request

from baserow_service import BaserowService
from config import get_settings
from field_map import FieldMap, load_field_map
from services.view_router import AdminSession, sessions


@lru_cache
def get_field_map() -> FieldMap:
    return load_field_map(get_settings().field_map_path)


@lru_cache
def get_baserow_service() -> BaserowService:
    """
    FastAPI dependency that provides the shared Baserow client.
    """
    settings = get_settings()
    return BaserowService(
        base_url=settings.baserow_url,
        token=settings.baserow_token,
        table_id=settings.baserow_table_id,
        category_table_id=settings.baserow_category_table_id,
        field_map=get_field_map(),
        timeout=settings.request_timeout,
    )


def get_admin_session(request: Request, service: BaserowService = Depends(get_baserow_service)) -> AdminSession:
    """
    FastAPI dependency that provides the AdminSession bound to the session cookie.
    """
    return sessions.get_or_create(request.state.session_id, service)

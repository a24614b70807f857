"""
HTTP роуты для пользовательских настроек (смещение входа бота, автоматизации).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from apps.api_gateway.deps import not_found, store_dep
from recall_notetaker.contracts.http_api import SettingsCreateRequest, SettingsUpdateRequest
from recall_notetaker.storage.memory_store import MemoryStore
from recall_notetaker.storage.models import AppSettings

router = APIRouter()

STORE_DEP = Depends(store_dep)


@router.get("/settings", response_model=list[AppSettings])
def list_settings(store: MemoryStore = STORE_DEP) -> list[AppSettings]:
    return store.list_settings()


@router.get("/settings/user/{user_id}", response_model=AppSettings)
def get_settings_for_user(user_id: str, store: MemoryStore = STORE_DEP) -> AppSettings:
    record = store.get_settings_by_user(user_id)
    if record is None:
        raise not_found("Settings not found.")
    return record


@router.get("/settings/{settings_id}", response_model=AppSettings)
def get_settings_record(settings_id: str, store: MemoryStore = STORE_DEP) -> AppSettings:
    record = store.get_settings_by_id(settings_id)
    if record is None:
        raise not_found("Settings not found.")
    return record


@router.post("/settings", response_model=AppSettings, status_code=status.HTTP_201_CREATED)
def create_settings(req: SettingsCreateRequest, store: MemoryStore = STORE_DEP) -> AppSettings:
    automations = (
        [a.model_dump() for a in req.automations] if req.automations is not None else None
    )
    return store.create_settings(
        user_id=req.user_id,
        bot_join_minutes=req.bot_join_minutes,
        automations=automations,
    )


@router.patch("/settings/{settings_id}", response_model=AppSettings)
def update_settings(
    settings_id: str,
    req: SettingsUpdateRequest,
    store: MemoryStore = STORE_DEP,
) -> AppSettings:
    record = store.update_settings(settings_id, req.model_dump(exclude_none=True))
    if record is None:
        raise not_found("Settings not found.")
    return record


@router.delete("/settings/{settings_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_settings(settings_id: str, store: MemoryStore = STORE_DEP) -> Response:
    if not store.delete_settings(settings_id):
        raise not_found("Settings not found.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

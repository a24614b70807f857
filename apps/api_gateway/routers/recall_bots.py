"""
HTTP роуты для ботов Recall.

- CRUD по локальным записям ботов
- POST /v1/recall-bots/schedule: запланировать бота для встречи
- POST /v1/recall-bots/{bot_id}/refresh: разовая сверка записи с Recall
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from apps.api_gateway.deps import http_error, not_found, store_dep
from recall_notetaker.common.errors import (
    ConfigurationError,
    ConflictError,
    NotFoundError,
    SchedulingError,
    TransportError,
    ValidationError,
)
from recall_notetaker.common.logging import get_project_logger
from recall_notetaker.contracts.http_api import (
    RecallBotCreateRequest,
    RecallBotScheduleRequest,
    RecallBotUpdateRequest,
)
from recall_notetaker.services.recall_bot_service import (
    is_recall_configured,
    reconcile_bot_record,
    schedule_bot,
)
from recall_notetaker.storage.memory_store import MemoryStore
from recall_notetaker.storage.models import BotRecord

log = get_project_logger()

router = APIRouter()

STORE_DEP = Depends(store_dep)


# =============================================================================
# CRUD
# =============================================================================
@router.get("/recall-bots", response_model=list[BotRecord])
def list_recall_bots(store: MemoryStore = STORE_DEP) -> list[BotRecord]:
    return store.list_bot_records()


@router.get("/recall-bots/{bot_id}", response_model=BotRecord)
def get_recall_bot(bot_id: str, store: MemoryStore = STORE_DEP) -> BotRecord:
    record = store.get_bot_record(bot_id)
    if record is None:
        raise not_found("Recall bot not found.")
    return record


@router.post("/recall-bots", response_model=BotRecord, status_code=status.HTTP_201_CREATED)
def create_recall_bot(req: RecallBotCreateRequest, store: MemoryStore = STORE_DEP) -> BotRecord:
    try:
        return store.create_bot_record(req.model_dump(exclude_none=True))
    except ConflictError as e:
        raise http_error(status.HTTP_409_CONFLICT, e) from e


@router.patch("/recall-bots/{bot_id}", response_model=BotRecord)
def update_recall_bot(
    bot_id: str,
    req: RecallBotUpdateRequest,
    store: MemoryStore = STORE_DEP,
) -> BotRecord:
    record = store.update_bot_record(bot_id, req.model_dump(exclude_none=True))
    if record is None:
        raise not_found("Recall bot not found.")
    return record


@router.delete("/recall-bots/{bot_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_recall_bot(bot_id: str, store: MemoryStore = STORE_DEP) -> Response:
    if not store.delete_bot_record(bot_id):
        raise not_found("Recall bot not found.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# ПЛАНИРОВАНИЕ И СВЕРКА
# =============================================================================
@router.post(
    "/recall-bots/schedule",
    response_model=BotRecord,
    status_code=status.HTTP_201_CREATED,
)
def schedule_recall_bot(
    req: RecallBotScheduleRequest,
    store: MemoryStore = STORE_DEP,
) -> BotRecord:
    if not is_recall_configured():
        raise http_error(
            status.HTTP_400_BAD_REQUEST,
            ConfigurationError("Recall.ai is not configured on the server."),
        )

    # Проверка существующего бота и планирование под одним резервом event_id
    try:
        with store.event_scheduling_slot(req.event_id):
            return schedule_bot(req, store=store)
    except ConflictError as e:
        raise http_error(status.HTTP_409_CONFLICT, e) from e
    except (ConfigurationError, ValidationError, SchedulingError) as e:
        raise http_error(status.HTTP_400_BAD_REQUEST, e) from e


@router.post("/recall-bots/{bot_id}/refresh", response_model=BotRecord)
def refresh_recall_bot(bot_id: str, store: MemoryStore = STORE_DEP) -> BotRecord:
    if not is_recall_configured():
        raise http_error(
            status.HTTP_400_BAD_REQUEST,
            ConfigurationError("Recall.ai is not configured on the server."),
        )
    if store.get_bot_record(bot_id) is None:
        raise not_found("Recall bot not found.")

    try:
        reconcile_bot_record(bot_id, store=store)
    except NotFoundError as e:
        raise http_error(status.HTTP_404_NOT_FOUND, e) from e
    except ConfigurationError as e:
        raise http_error(status.HTTP_400_BAD_REQUEST, e) from e
    except TransportError as e:
        log.warning(
            "recall_bot_refresh_failed",
            extra={"payload": {"bot_id": bot_id, "error": e.message[:300]}},
        )
        raise http_error(status.HTTP_502_BAD_GATEWAY, e) from e

    record = store.get_bot_record(bot_id)
    if record is None:
        raise not_found("Recall bot not found.")
    return record

"""
HTTP роуты для встреч.

CRUD по встречам календаря (транскрипт и посты хранятся в записи встречи).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from apps.api_gateway.deps import not_found, store_dep
from recall_notetaker.contracts.http_api import MeetingCreateRequest, MeetingUpdateRequest
from recall_notetaker.storage.memory_store import MemoryStore
from recall_notetaker.storage.models import Meeting

router = APIRouter()

STORE_DEP = Depends(store_dep)


@router.get("/meetings", response_model=list[Meeting])
def list_meetings(store: MemoryStore = STORE_DEP) -> list[Meeting]:
    return store.list_meetings()


@router.get("/meetings/{meeting_id}", response_model=Meeting)
def get_meeting(meeting_id: str, store: MemoryStore = STORE_DEP) -> Meeting:
    meeting = store.get_meeting(meeting_id)
    if meeting is None:
        raise not_found("Meeting not found.")
    return meeting


@router.post("/meetings", response_model=Meeting, status_code=status.HTTP_201_CREATED)
def create_meeting(req: MeetingCreateRequest, store: MemoryStore = STORE_DEP) -> Meeting:
    return store.create_meeting(req.model_dump(exclude_none=True))


@router.patch("/meetings/{meeting_id}", response_model=Meeting)
def update_meeting(
    meeting_id: str,
    req: MeetingUpdateRequest,
    store: MemoryStore = STORE_DEP,
) -> Meeting:
    meeting = store.update_meeting(meeting_id, req.model_dump(exclude_none=True))
    if meeting is None:
        raise not_found("Meeting not found.")
    return meeting


@router.delete("/meetings/{meeting_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_meeting(meeting_id: str, store: MemoryStore = STORE_DEP) -> Response:
    if not store.delete_meeting(meeting_id):
        raise not_found("Meeting not found.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

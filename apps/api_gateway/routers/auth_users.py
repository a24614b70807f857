"""
HTTP роуты для пользователей и подключённых аккаунтов.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from apps.api_gateway.deps import not_found, store_dep
from recall_notetaker.contracts.http_api import AuthUserCreateRequest, AuthUserUpdateRequest
from recall_notetaker.storage.memory_store import MemoryStore
from recall_notetaker.storage.models import AuthUser

router = APIRouter()

STORE_DEP = Depends(store_dep)


@router.get("/auth-users", response_model=list[AuthUser])
def list_auth_users(store: MemoryStore = STORE_DEP) -> list[AuthUser]:
    return store.list_auth_users()


@router.get("/auth-users/{user_id}", response_model=AuthUser)
def get_auth_user(user_id: str, store: MemoryStore = STORE_DEP) -> AuthUser:
    user = store.get_auth_user(user_id)
    if user is None:
        raise not_found("User not found.")
    return user


@router.post("/auth-users", response_model=AuthUser, status_code=status.HTTP_201_CREATED)
def create_auth_user(req: AuthUserCreateRequest, store: MemoryStore = STORE_DEP) -> AuthUser:
    return store.create_auth_user(req.model_dump(exclude_none=True))


@router.patch("/auth-users/{user_id}", response_model=AuthUser)
def update_auth_user(
    user_id: str,
    req: AuthUserUpdateRequest,
    store: MemoryStore = STORE_DEP,
) -> AuthUser:
    user = store.update_auth_user(user_id, req.model_dump(exclude_none=True))
    if user is None:
        raise not_found("User not found.")
    return user


@router.delete("/auth-users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_auth_user(user_id: str, store: MemoryStore = STORE_DEP) -> Response:
    if not store.delete_auth_user(user_id):
        raise not_found("User not found.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

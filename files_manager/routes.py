"""
HTTP routes for the files manager API.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, Response, status

from files_manager.auth import AuthGuard, Identity
from files_manager.dependencies import (
    get_auth_guard,
    get_current_user,
    get_file_service,
    get_status_service,
    get_user_service,
)
from files_manager.files import FileService
from files_manager.schemas import (
    ConnectResponse,
    ErrorResponse,
    FileMetadataResponse,
    NewUserRequest,
    StatsResponse,
    StatusResponse,
    UploadFileRequest,
    UserResponse,
)
from files_manager.status import StatusService
from files_manager.users import UserService

router = APIRouter()

UNAUTHORIZED = {401: {"model": ErrorResponse}}


@router.get("/status", response_model=StatusResponse, tags=["status"])
def get_status(service: StatusService = Depends(get_status_service)):
    return service.status()


@router.get("/stats", response_model=StatsResponse, tags=["status"])
def get_stats(service: StatusService = Depends(get_status_service)):
    return service.stats()


@router.get("/connect", response_model=ConnectResponse, responses=UNAUTHORIZED, tags=["auth"])
def connect(
    authorization: Optional[str] = Header(None),
    guard: AuthGuard = Depends(get_auth_guard),
):
    """
    Exchange Basic credentials for a session token to send as ``X-Token``.
    """
    return ConnectResponse(token=guard.connect(authorization))


@router.get(
    "/disconnect",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=UNAUTHORIZED,
    tags=["auth"],
)
def disconnect(
    identity: Identity = Depends(get_current_user),
    guard: AuthGuard = Depends(get_auth_guard),
):
    guard.disconnect(identity)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    tags=["users"],
)
def post_new_user(
    payload: Optional[NewUserRequest] = None,
    service: UserService = Depends(get_user_service),
):
    payload = payload or NewUserRequest()
    user = service.register(payload.email, payload.password)
    return UserResponse(**user.identity())


@router.get("/users/me", response_model=UserResponse, responses=UNAUTHORIZED, tags=["users"])
def get_me(
    identity: Identity = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return service.profile(identity)


@router.post(
    "/files",
    response_model=FileMetadataResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, **UNAUTHORIZED},
    tags=["files"],
)
def post_upload(
    payload: Optional[UploadFileRequest] = None,
    identity: Identity = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
):
    """
    Create a folder, or store a file/image whose content is sent base64-encoded in ``data``.
    """
    payload = payload or UploadFileRequest()
    record = service.upload(
        identity.id,
        name=payload.name,
        type=payload.type,
        data=payload.data,
        is_public=payload.isPublic,
        parent_id=payload.parentId,
    )
    return record.as_dict()


@router.get(
    "/files/{file_id}",
    response_model=FileMetadataResponse,
    response_model_exclude_none=True,
    responses={404: {"model": ErrorResponse}, **UNAUTHORIZED},
    tags=["files"],
)
def get_show(
    file_id: str,
    identity: Identity = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
):
    return service.show(identity.id, file_id).as_dict()


@router.get(
    "/files",
    response_model=list[FileMetadataResponse],
    response_model_exclude_none=True,
    responses=UNAUTHORIZED,
    tags=["files"],
)
def get_index(
    parentId: Optional[str] = Query(None, description="Folder id, or 0 for the root"),
    page: Optional[str] = Query(None, description="0-indexed page of 20 items"),
    identity: Identity = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
):
    records = service.index(identity.id, parent_id=parentId, page=page)
    return [record.as_dict() for record in records]

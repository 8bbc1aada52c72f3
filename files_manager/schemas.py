"""
Pydantic schemas for the files manager API.

Request models leave every field optional: required-field checks happen in
the services so that each missing field gets its own error message.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class NewUserRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserResponse(BaseModel):
    id: str
    email: str


class ConnectResponse(BaseModel):
    token: str


class UploadFileRequest(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = Field(None, description="One of folder, file, image")
    data: Optional[str] = Field(None, description="Base64 payload, required unless type is folder")
    isPublic: Optional[bool] = False
    parentId: Optional[Union[str, int]] = Field(None, description="Folder id, or 0 for the root")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "notes.txt",
                "type": "file",
                "data": "SGVsbG8gV2Vic3RhY2shCg==",
                "isPublic": False,
                "parentId": 0,
            }
        }
    )


class FileMetadataResponse(BaseModel):
    id: str
    userId: str
    name: str
    type: str
    isPublic: bool
    parentId: Union[int, str]
    localPath: Optional[str] = None


class StatusResponse(BaseModel):
    redis: bool
    db: bool


class StatsResponse(BaseModel):
    users: int
    files: int


class ErrorResponse(BaseModel):
    error: str

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from uuid import UUID
from models.file import MAX_FILE_SIZE


class FileCreate(BaseModel):
    """Metadata of a file already stored by the storage provider"""
    name: str = Field(..., min_length=1, max_length=255)
    type: str = Field(..., min_length=1, description="MIME type")
    size: int = Field(..., ge=0, le=MAX_FILE_SIZE, description="Size in bytes")
    file_url: str = Field(..., min_length=1)
    thumbnail_url: Optional[str] = None
    parent_id: Optional[UUID] = Field(None, description="Parent folder ID, None for root")
    path: Optional[str] = Field(None, description="Explicit path, derived from the parent when omitted")

    class Config:
        json_schema_extra = {
            "example": {
                "name": "holiday.png",
                "type": "image/png",
                "size": 2048,
                "file_url": "https://ik.imagekit.io/droply/holiday.png",
                "thumbnail_url": "https://ik.imagekit.io/droply/tr:n-ik_ml_thumbnail/holiday.png",
                "parent_id": None
            }
        }


class FileResponse(BaseModel):
    id: UUID
    user_id: str
    name: str
    path: str
    size: int
    type: str
    file_url: str
    thumbnail_url: Optional[str]
    parent_id: Optional[UUID]
    is_folder: bool
    is_starred: bool
    is_trash: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class FileUpdate(BaseModel):
    """Partial update. Only fields present in the request body are applied."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    parent_id: Optional[UUID] = None
    is_starred: Optional[bool] = None
    is_trash: Optional[bool] = None

    class Config:
        json_schema_extra = {
            "example": {
                "name": "renamed.png",
                "parent_id": "550e8400-e29b-41d4-a716-446655440000"
            }
        }


class DeleteResponse(BaseModel):
    deleted: int

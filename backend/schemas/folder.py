from pydantic import BaseModel, Field
from typing import Optional, List
from uuid import UUID


class FolderCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Folder name")
    parent_id: Optional[UUID] = Field(None, description="Parent folder ID for nested folders")

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Documents",
                "parent_id": None
            }
        }


class FolderTreeResponse(BaseModel):
    """Folder tree structure for hierarchical display"""
    id: UUID
    name: str
    path: str
    parent_id: Optional[UUID]
    children: List["FolderTreeResponse"] = []
    files_count: int = 0

    class Config:
        from_attributes = True

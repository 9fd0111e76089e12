from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from database import get_db
from models.file import ListFilter, DeleteMode
from schemas.file import FileCreate, FileResponse, FileUpdate, DeleteResponse
from services.file_service import FileService
from dependencies.auth import get_current_user_id

router = APIRouter(prefix="/files", tags=["files"])


@router.post("/", response_model=FileResponse, status_code=status.HTTP_201_CREATED)
def create_file(
    file_data: FileCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Register a file that the storage provider has already stored.

    - **file_url**: Locator returned by the storage provider
    - **parent_id**: Optional folder ID (None for root)
    """
    file_service = FileService(db)
    return file_service.create_node(
        user_id=user_id,
        name=file_data.name,
        type=file_data.type,
        size=file_data.size,
        file_url=file_data.file_url,
        thumbnail_url=file_data.thumbnail_url,
        parent_id=file_data.parent_id,
        path=file_data.path
    )


@router.get("/", response_model=list[FileResponse])
def list_files(
    parent_id: Optional[UUID] = None,
    filter: ListFilter = ListFilter.ACTIVE,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    List the children of a folder for the current user.

    - **parent_id**: Folder to list (None for root)
    - **filter**: all, starred, trash or active
    - **skip**: Number of records to skip (for pagination)
    - **limit**: Maximum number of records to return
    """
    file_service = FileService(db)
    return file_service.list_children(
        parent_id=parent_id,
        user_id=user_id,
        filter=filter,
        skip=skip,
        limit=limit
    )


@router.get("/trash", response_model=list[FileResponse])
def list_trash(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """List everything the current user moved to the trash."""
    return FileService(db).list_trash(user_id, skip=skip, limit=limit)


@router.delete("/trash", response_model=DeleteResponse)
def empty_trash(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Permanently delete all trashed files and folders."""
    deleted = FileService(db).empty_trash(user_id)
    return {"deleted": deleted}


@router.get("/starred", response_model=list[FileResponse])
def list_starred(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """List starred files and folders that are not in the trash."""
    return FileService(db).list_starred(user_id)


@router.get("/{file_id}", response_model=FileResponse)
def get_file(
    file_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get file or folder metadata by ID."""
    return FileService(db).get_node(file_id, user_id)


@router.get("/{file_id}/breadcrumbs", response_model=list[FileResponse])
def get_breadcrumbs(
    file_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Ancestor folders of a node, root first."""
    return FileService(db).get_breadcrumbs(file_id, user_id)


@router.patch("/{file_id}", response_model=FileResponse)
def update_file(
    file_id: UUID,
    file_data: FileUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Rename, move, star or trash a node. Only fields sent in the body are changed.

    - **parent_id**: Destination folder ID, null for root
    """
    file_service = FileService(db)
    return file_service.update_node(
        node_id=file_id,
        user_id=user_id,
        patch=file_data.model_dump(exclude_unset=True)
    )


@router.patch("/{file_id}/star", response_model=FileResponse)
def toggle_star(
    file_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Star or unstar a node."""
    return FileService(db).toggle_star(file_id, user_id)


@router.patch("/{file_id}/trash", response_model=FileResponse)
def toggle_trash(
    file_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Move a node to the trash or restore it."""
    return FileService(db).toggle_trash(file_id, user_id)


@router.delete("/{file_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_file(
    file_id: UUID,
    mode: DeleteMode = DeleteMode.SOFT,
    recursive: bool = False,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Delete a file or folder.

    - **mode**: soft moves it to the trash, hard removes it permanently
    - **recursive**: Required to hard delete a folder that is not empty
    """
    FileService(db).delete_node(file_id, user_id, mode=mode, recursive=recursive)
    return None

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_db
from schemas.file import FileResponse
from schemas.folder import FolderCreate, FolderTreeResponse
from services.folder_service import FolderService
from dependencies.auth import get_current_user_id

router = APIRouter(prefix="/folders", tags=["folders"])


@router.post("/", response_model=FileResponse, status_code=status.HTTP_201_CREATED)
def create_folder(
    folder_data: FolderCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Create a new folder.

    - **name**: Folder name
    - **parent_id**: Optional parent folder ID (None for root)
    """
    folder_service = FolderService(db)
    return folder_service.create_folder(
        user_id=user_id,
        name=folder_data.name,
        parent_id=folder_data.parent_id
    )


@router.get("/tree", response_model=list[FolderTreeResponse])
def get_folder_tree(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Folder hierarchy of the current user, without trashed folders."""
    return FolderService(db).get_folder_tree(user_id)

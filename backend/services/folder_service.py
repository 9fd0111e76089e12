from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import Optional, List
from uuid import UUID

from models.file import FileNode, FOLDER_TYPE
from services.file_service import FileService


class FolderService(FileService):
    def __init__(self, db: Session):
        super().__init__(db)

    def create_folder(self, user_id: str, name: str, parent_id: Optional[UUID] = None) -> FileNode:
        """
        Create a new folder.

        Args:
            user_id: ID of the user creating the folder
            name: Name of the folder
            parent_id: Optional parent folder ID for nested folders

        Returns:
            Created FileNode with is_folder set
        """
        return self.create_node(
            user_id=user_id,
            name=name,
            type=FOLDER_TYPE,
            size=0,
            file_url="",
            is_folder=True,
            parent_id=parent_id
        )

    def get_folder_tree(self, user_id: str) -> List[dict]:
        """
        Get the user's folder tree, leaving out anything in the trash.

        Returns:
            List of root folder dictionaries with nested children
        """
        with self._store_errors():
            folders = self.db.query(FileNode).filter(
                FileNode.user_id == user_id,
                FileNode.is_folder.is_(True),
                FileNode.is_trash.is_(False)
            ).order_by(FileNode.name.asc(), FileNode.id.asc()).all()

            counts = dict(
                self.db.query(FileNode.parent_id, func.count(FileNode.id)).filter(
                    FileNode.user_id == user_id,
                    FileNode.is_folder.is_(False),
                    FileNode.is_trash.is_(False),
                    FileNode.parent_id.isnot(None)
                ).group_by(FileNode.parent_id).all()
            )

        # Folders below a trashed or missing parent are never reached from the root
        children_by_parent = {}
        for folder in folders:
            children_by_parent.setdefault(folder.parent_id, []).append(folder)

        def build(parent_id: Optional[UUID], depth: int) -> List[dict]:
            if depth > self.max_depth:
                return []
            return [
                {
                    "id": folder.id,
                    "name": folder.name,
                    "path": folder.path,
                    "parent_id": folder.parent_id,
                    "files_count": counts.get(folder.id, 0),
                    "children": build(folder.id, depth + 1),
                }
                for folder in children_by_parent.get(parent_id, [])
            ]

        return build(None, 1)

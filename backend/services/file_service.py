import logging
from collections import deque
from sqlalchemy.orm import Session
from typing import Optional, Iterator, Any
from uuid import UUID

from models.file import FileNode, ListFilter, DeleteMode, MAX_FILE_SIZE, utcnow
from exceptions.exceptions import (
    ValidationException,
    NotFoundException,
    ForbiddenException,
    CycleException,
)
from services.base import BaseService

logger = logging.getLogger(__name__)

MUTABLE_FIELDS = {"name", "parent_id", "is_starred", "is_trash"}


class FileService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)

    def _validate_name(self, name: Optional[str]) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationException("Name must not be empty")
        if "/" in name:
            raise ValidationException("Name must not contain '/'")
        return name

    def _build_path(self, parent: Optional[FileNode], name: str) -> str:
        """Build the logical path of a node from its parent's path"""
        if parent is None:
            return f"/{name}"
        return f"{parent.path.rstrip('/')}/{name}"

    def _get_owned(self, node_id: UUID, user_id: str, for_update: bool = False) -> Optional[FileNode]:
        query = self.db.query(FileNode).filter(
            FileNode.id == node_id,
            FileNode.user_id == user_id
        )
        if for_update:
            query = query.with_for_update()
        return query.first()

    def _require_node(self, node_id: UUID, user_id: str, for_update: bool = False) -> FileNode:
        node = self._get_owned(node_id, user_id, for_update)
        if not node:
            raise NotFoundException("File not found")
        return node

    def _resolve_parent(self, parent_id: Optional[UUID], user_id: str) -> Optional[FileNode]:
        """Return the folder a new node is created in, None for root"""
        if parent_id is None:
            return None

        parent = self._get_owned(parent_id, user_id)
        if not parent:
            raise ValidationException("Parent folder not found or access denied")
        if not parent.is_folder:
            raise ValidationException("Parent must be a folder")
        if self._count_ancestors(parent) + 1 > self.max_depth:
            raise ValidationException(f"Folders cannot be nested more than {self.max_depth} levels deep")
        return parent

    def _count_ancestors(self, node: FileNode) -> int:
        return sum(1 for _ in self._iter_ancestors(node))

    def _subtree_height(self, node: FileNode) -> int:
        """Number of levels below a node, 0 for files and empty folders"""
        height = 0
        visited = {node.id}
        level = [node]
        while level:
            children = self.db.query(FileNode).filter(
                FileNode.parent_id.in_([n.id for n in level]),
                FileNode.user_id == node.user_id
            ).all()
            level = [child for child in children if child.id not in visited]
            visited.update(child.id for child in level)
            if level:
                height += 1
        return height

    def _iter_ancestors(self, node: FileNode) -> Iterator[FileNode]:
        """
        Yield the parent, grandparent, ... of a node up to the root.

        The walk is capped at max_depth steps and tracks visited ids, so a
        corrupted chain in storage ends with a CycleException instead of looping.
        A parent id that no longer resolves is treated as the root.
        """
        seen = {node.id}
        current = node
        steps = 0
        while current.parent_id is not None:
            steps += 1
            if steps > self.max_depth or current.parent_id in seen:
                logger.error("Corrupted ancestor chain above node %s", node.id)
                raise CycleException("Folder hierarchy is corrupted or too deep")

            parent = self.db.query(FileNode).filter(
                FileNode.id == current.parent_id,
                FileNode.user_id == node.user_id
            ).first()
            if parent is None:
                return

            seen.add(parent.id)
            yield parent
            current = parent

    def _is_effectively_trashed(self, node: FileNode) -> bool:
        """A node counts as trashed when it or any ancestor is in the trash"""
        if node.is_trash:
            return True
        return any(ancestor.is_trash for ancestor in self._iter_ancestors(node))

    def _collect_descendants(self, node: FileNode) -> list[FileNode]:
        """Breadth-first list of every node below the given one"""
        descendants = []
        visited = {node.id}
        queue = deque([node])
        while queue:
            current = queue.popleft()
            children = self.db.query(FileNode).filter(
                FileNode.parent_id == current.id,
                FileNode.user_id == current.user_id
            ).all()
            for child in children:
                if child.id in visited:
                    continue
                visited.add(child.id)
                descendants.append(child)
                queue.append(child)
        return descendants

    def _refresh_paths(self, node: FileNode, parent: Optional[FileNode]):
        """Recompute the path of a node and of everything below it"""
        node.path = self._build_path(parent, node.name)

        visited = {node.id}
        queue = deque([node])
        while queue:
            current = queue.popleft()
            children = self.db.query(FileNode).filter(
                FileNode.parent_id == current.id,
                FileNode.user_id == current.user_id
            ).all()
            for child in children:
                if child.id in visited:
                    continue
                visited.add(child.id)
                child.path = self._build_path(current, child.name)
                queue.append(child)

    def _resolve_move_target(self, node: FileNode, parent_id: Optional[UUID]) -> Optional[FileNode]:
        """Validate the destination of a move and return it (None for root)"""
        if parent_id is None:
            return None

        if parent_id == node.id:
            raise CycleException("Cannot move a node into itself")

        parent = self.db.query(FileNode).filter(FileNode.id == parent_id).first()
        if not parent:
            raise ValidationException("Target folder not found")
        if parent.user_id != node.user_id:
            raise ForbiddenException("Target folder belongs to another user")
        if not parent.is_folder:
            raise ValidationException("Target must be a folder")

        ancestors = 0
        for ancestor in self._iter_ancestors(parent):
            if ancestor.id == node.id:
                raise CycleException("Cannot move a folder into its own descendant")
            ancestors += 1

        # The node lands one level below the target, its subtree below that
        if ancestors + 1 + self._subtree_height(node) > self.max_depth:
            raise ValidationException(f"Folders cannot be nested more than {self.max_depth} levels deep")

        return parent

    def create_node(
        self,
        user_id: str,
        name: str,
        type: str,
        size: int = 0,
        file_url: str = "",
        is_folder: bool = False,
        parent_id: Optional[UUID] = None,
        path: Optional[str] = None,
        thumbnail_url: Optional[str] = None,
        is_starred: bool = False
    ) -> FileNode:
        """
        Create a file or folder node.

        Args:
            user_id: Owner of the node, as handed over by the auth provider
            name: Display name
            type: MIME type for files, "folder" for folders
            size: Size in bytes, must be 0 for folders
            file_url: Storage locator for the file bytes
            is_folder: Whether the node is a folder
            parent_id: Optional parent folder ID (None for root)
            path: Optional explicit path, derived from the parent when omitted
            thumbnail_url: Optional preview locator, files only
            is_starred: Initial favourite flag

        Returns:
            Created FileNode
        """
        name = self._validate_name(name)

        if not type or not type.strip():
            raise ValidationException("Type must not be empty")
        if size is None or size < 0 or size > MAX_FILE_SIZE:
            raise ValidationException("Size must be a non-negative integer")
        if is_folder and size != 0:
            raise ValidationException("Folders must have size 0")
        if is_folder and thumbnail_url:
            raise ValidationException("Folders cannot have a thumbnail")
        if not is_folder and not file_url:
            raise ValidationException("Files require a file URL")
        if path is not None and not path.strip():
            raise ValidationException("Path must not be empty")

        with self._store_errors():
            parent = self._resolve_parent(parent_id, user_id)

            node = FileNode(
                user_id=user_id,
                name=name,
                path=path or self._build_path(parent, name),
                size=size,
                type=type,
                file_url=file_url or "",
                thumbnail_url=thumbnail_url,
                parent_id=parent_id,
                is_folder=is_folder,
                is_starred=is_starred,
                is_trash=False
            )
            self.db.add(node)
            self.db.commit()
            self.db.refresh(node)

        logger.info("Created %s %s for user %s", "folder" if is_folder else "file", node.id, user_id)
        return node

    def get_node(self, node_id: UUID, user_id: str) -> FileNode:
        """Get a node by ID. Nodes of other users are reported as not found."""
        with self._store_errors():
            return self._require_node(node_id, user_id)

    def list_children(
        self,
        parent_id: Optional[UUID],
        user_id: str,
        filter: ListFilter = ListFilter.ACTIVE,
        skip: int = 0,
        limit: int = 100
    ) -> list[FileNode]:
        """
        List the direct children of a folder, or the root level when parent_id is None.

        Args:
            parent_id: Folder to list (None for root)
            user_id: Requesting user
            filter: all, starred, trash or active (everything not in the trash)
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            Nodes ordered by creation time, oldest first
        """
        with self._store_errors():
            inherited_trash = False
            query = self.db.query(FileNode).filter(FileNode.user_id == user_id)

            if parent_id is None:
                query = query.filter(FileNode.parent_id.is_(None))
            else:
                parent = self._get_owned(parent_id, user_id)
                if not parent:
                    raise NotFoundException("Parent folder not found")
                if not parent.is_folder:
                    raise ValidationException("Parent must be a folder")
                inherited_trash = self._is_effectively_trashed(parent)
                query = query.filter(FileNode.parent_id == parent_id)

            if filter == ListFilter.TRASH:
                if not inherited_trash:
                    query = query.filter(FileNode.is_trash.is_(True))
            elif filter in (ListFilter.ACTIVE, ListFilter.STARRED):
                # Everything below a trashed folder is trashed for display
                if inherited_trash:
                    return []
                query = query.filter(FileNode.is_trash.is_(False))
                if filter == ListFilter.STARRED:
                    query = query.filter(FileNode.is_starred.is_(True))

            return query.order_by(
                FileNode.created_at.asc(),
                FileNode.id.asc()
            ).offset(skip).limit(limit).all()

    def update_node(self, node_id: UUID, user_id: str, patch: dict[str, Any]) -> FileNode:
        """
        Apply a partial update to a node.

        Args:
            node_id: ID of the node to update
            user_id: ID of the user (for authorization)
            patch: Any of name, parent_id, is_starred, is_trash. An explicit
                parent_id of None moves the node to the root.

        Returns:
            Updated FileNode
        """
        unknown = set(patch) - MUTABLE_FIELDS
        if unknown:
            raise ValidationException(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        with self._store_errors():
            node = self._require_node(node_id, user_id, for_update=True)
            paths_dirty = False

            if "name" in patch:
                name = self._validate_name(patch["name"])
                if name != node.name:
                    node.name = name
                    paths_dirty = True

            if "parent_id" in patch and patch["parent_id"] != node.parent_id:
                self._resolve_move_target(node, patch["parent_id"])
                node.parent_id = patch["parent_id"]
                paths_dirty = True

            for flag in ("is_starred", "is_trash"):
                if flag in patch:
                    if not isinstance(patch[flag], bool):
                        raise ValidationException(f"{flag} must be a boolean")
                    setattr(node, flag, patch[flag])

            if paths_dirty:
                parent = None
                if node.parent_id is not None:
                    parent = self.db.query(FileNode).filter(FileNode.id == node.parent_id).first()
                self._refresh_paths(node, parent)

            node.updated_at = utcnow()
            self.db.commit()
            self.db.refresh(node)

        logger.info("Updated node %s (%s) for user %s", node_id, ", ".join(sorted(patch)), user_id)
        return node

    def toggle_star(self, node_id: UUID, user_id: str) -> FileNode:
        """Flip the starred flag of a node"""
        with self._store_errors():
            node = self._require_node(node_id, user_id, for_update=True)
            node.is_starred = not node.is_starred
            node.updated_at = utcnow()
            self.db.commit()
            self.db.refresh(node)
        return node

    def toggle_trash(self, node_id: UUID, user_id: str) -> FileNode:
        """Move a node to the trash, or restore it when it already is there"""
        with self._store_errors():
            node = self._require_node(node_id, user_id, for_update=True)
            node.is_trash = not node.is_trash
            node.updated_at = utcnow()
            self.db.commit()
            self.db.refresh(node)

        logger.info("%s node %s for user %s", "Trashed" if node.is_trash else "Restored", node_id, user_id)
        return node

    def delete_node(
        self,
        node_id: UUID,
        user_id: str,
        mode: DeleteMode = DeleteMode.SOFT,
        recursive: bool = False
    ) -> int:
        """
        Delete a node.

        Args:
            node_id: ID of the node to delete
            user_id: ID of the user (for authorization)
            mode: soft moves the node to the trash, hard removes the row
            recursive: For hard deletes of folders, also delete everything
                below. Without it a non-empty folder is rejected.

        Returns:
            Number of rows trashed or removed
        """
        with self._store_errors():
            node = self._require_node(node_id, user_id, for_update=True)

            if mode == DeleteMode.SOFT:
                node.is_trash = True
                node.updated_at = utcnow()
                self.db.commit()
                logger.info("Trashed node %s for user %s", node_id, user_id)
                return 1

            doomed = [node]
            if node.is_folder:
                descendants = self._collect_descendants(node)
                if descendants and not recursive:
                    raise ValidationException(
                        f"Cannot delete folder: it contains {len(descendants)} item(s). "
                        "Use recursive=true to delete anyway."
                    )
                doomed.extend(descendants)

            for item in doomed:
                self.db.delete(item)
            self.db.commit()

        logger.info("Deleted %d node(s) rooted at %s for user %s", len(doomed), node_id, user_id)
        return len(doomed)

    def list_trash(self, user_id: str, skip: int = 0, limit: int = 100) -> list[FileNode]:
        """Nodes the user explicitly moved to the trash, anywhere in the tree"""
        with self._store_errors():
            return self.db.query(FileNode).filter(
                FileNode.user_id == user_id,
                FileNode.is_trash.is_(True)
            ).order_by(
                FileNode.created_at.asc(),
                FileNode.id.asc()
            ).offset(skip).limit(limit).all()

    def list_starred(self, user_id: str) -> list[FileNode]:
        """Starred nodes anywhere in the tree that are not in the trash"""
        with self._store_errors():
            candidates = self.db.query(FileNode).filter(
                FileNode.user_id == user_id,
                FileNode.is_starred.is_(True),
                FileNode.is_trash.is_(False)
            ).order_by(
                FileNode.created_at.asc(),
                FileNode.id.asc()
            ).all()
            if not candidates:
                return []

            folders = {
                row.id: row for row in self.db.query(
                    FileNode.id, FileNode.parent_id, FileNode.is_trash
                ).filter(
                    FileNode.user_id == user_id,
                    FileNode.is_folder.is_(True)
                ).all()
            }
            trashed = {}

            def folder_trashed(folder_id: Optional[UUID]) -> bool:
                chain = []
                result = False
                current = folder_id
                while current is not None and current in folders:
                    if current in trashed:
                        result = trashed[current]
                        break
                    if current in chain or len(chain) > self.max_depth:
                        logger.error("Corrupted ancestor chain at folder %s", current)
                        raise CycleException("Folder hierarchy is corrupted or too deep")
                    chain.append(current)
                    if folders[current].is_trash:
                        result = True
                        break
                    current = folders[current].parent_id
                for visited in chain:
                    trashed[visited] = result
                return result

            return [node for node in candidates if not folder_trashed(node.parent_id)]

    def empty_trash(self, user_id: str) -> int:
        """
        Permanently delete every trashed node of the user together with
        everything below it.

        Returns:
            Number of rows removed
        """
        with self._store_errors():
            trashed = self.db.query(FileNode).filter(
                FileNode.user_id == user_id,
                FileNode.is_trash.is_(True)
            ).all()

            doomed = {}
            for node in trashed:
                doomed[node.id] = node
                for descendant in self._collect_descendants(node):
                    doomed[descendant.id] = descendant

            for item in doomed.values():
                self.db.delete(item)
            self.db.commit()

        logger.info("Emptied trash for user %s: %d node(s) removed", user_id, len(doomed))
        return len(doomed)

    def get_breadcrumbs(self, node_id: UUID, user_id: str) -> list[FileNode]:
        """Ancestors of a node, root first"""
        with self._store_errors():
            node = self._require_node(node_id, user_id)
            ancestors = list(self._iter_ancestors(node))
        ancestors.reverse()
        return ancestors

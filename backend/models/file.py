from sqlalchemy import Column, String, BigInteger, Boolean, DateTime, Uuid, Index
from sqlalchemy.sql import func, expression
from datetime import datetime, timezone
import enum
import uuid
from database import Base

FOLDER_TYPE = "folder"

# Upper bound of the BIGINT size column
MAX_FILE_SIZE = 2**63 - 1


def utcnow():
    return datetime.now(timezone.utc)


class ListFilter(str, enum.Enum):
    ALL = "all"
    STARRED = "starred"
    TRASH = "trash"
    ACTIVE = "active"


class DeleteMode(str, enum.Enum):
    SOFT = "soft"
    HARD = "hard"


class FileNode(Base):
    """A file or a folder. Both live in one table so the tree can be walked uniformly."""

    __tablename__ = "files"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    path = Column(String, nullable=False)
    size = Column(BigInteger, nullable=False)
    type = Column(String, nullable=False)
    file_url = Column(String, nullable=False)
    thumbnail_url = Column(String, nullable=True)
    user_id = Column(String, nullable=False, index=True)
    # No foreign key: parent resolution and cycle checks happen in FileService
    parent_id = Column(Uuid(as_uuid=True), nullable=True, index=True)
    is_folder = Column(Boolean, nullable=False, default=False, server_default=expression.false())
    is_starred = Column(Boolean, nullable=False, default=False, server_default=expression.false())
    is_trash = Column(Boolean, nullable=False, default=False, server_default=expression.false())
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    __table_args__ = (
        Index('ix_files_user_parent', 'user_id', 'parent_id'),
    )

    def __repr__(self):
        return f"FileNode(id={self.id}, user_id={self.user_id}, name={self.name}, path={self.path}, is_folder={self.is_folder}, parent_id={self.parent_id}, is_starred={self.is_starred}, is_trash={self.is_trash})"

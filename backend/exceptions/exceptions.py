from fastapi import HTTPException, status


class FileTreeException(HTTPException):
    """Base error for file tree operations, rendered by FastAPI as ``{"detail": ...}``."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(status_code=self.status_code, detail=detail)


class ValidationException(FileTreeException):
    status_code = status.HTTP_400_BAD_REQUEST


class CycleException(ValidationException):
    """Raised when a move would make a node its own ancestor."""

    status_code = status.HTTP_409_CONFLICT


class NotFoundException(FileTreeException):
    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenException(FileTreeException):
    status_code = status.HTTP_403_FORBIDDEN


class TransientStoreException(FileTreeException):
    """Database connectivity or timeout failure. Safe to retry."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

from .file import router as file_router
from .folder import router as folder_router

__all__ = ["file_router", "folder_router"]

from .file import FileNode, ListFilter, DeleteMode, FOLDER_TYPE

__all__ = ["FileNode", "ListFilter", "DeleteMode", "FOLDER_TYPE"]

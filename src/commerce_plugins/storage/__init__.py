"""File storage adapters."""

from .base import (
    FileServiceBase,
    FileUpload,
    StorageError,
    UploadResult,
    UploadStreamDescriptor,
)
from .supabase import SupabaseFileService

__all__ = [
    "FileServiceBase",
    "FileUpload",
    "StorageError",
    "UploadResult",
    "UploadStreamDescriptor",
    "SupabaseFileService",
]

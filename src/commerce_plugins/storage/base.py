"""Abstract base classes and helpers for file storage adapters."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import BinaryIO, Iterable, Iterator, Optional

from pydantic import BaseModel

from ..capabilities import CapabilityMixin


class StorageError(Exception):
    """Raised when the storage backend rejects or fails an operation."""


@dataclass
class FileUpload:
    """A file handed over by the platform for upload.

    Either ``path`` (a file already on local disk) or ``file`` (an open
    binary stream) must be set.
    """
    original_name: str
    content_type: str = "application/octet-stream"
    path: Optional[str] = None
    file: Optional[BinaryIO] = None

    def __post_init__(self):
        if self.path is None and self.file is None:
            raise ValueError(f"No content for {self.original_name}: set path or file")

    @property
    def extension(self) -> str:
        return self.original_name.rsplit(".", 1)[-1] if "." in self.original_name else ""


class UploadResult(BaseModel):
    key: str
    url: str


class UploadStreamDescriptor(BaseModel):
    file_key: str
    url: str
    content_type: str


class FileServiceBase(CapabilityMixin, ABC):
    """Define a minimal interface for platform file storage."""

    OPERATIONS = frozenset({
        "upload",
        "upload_protected",
        "delete",
        "get_upload_stream_descriptor",
        "get_download_stream",
        "get_presigned_download_url",
    })

    @abstractmethod
    def upload(self, file: FileUpload) -> UploadResult:
        """Store a publicly readable file."""

    @abstractmethod
    def upload_protected(self, file: FileUpload) -> UploadResult:
        """Store a private file; the returned URL is time-limited."""

    @abstractmethod
    def delete(self, file_key: str) -> None:
        """Remove a stored object."""

    @abstractmethod
    def get_upload_stream_descriptor(
        self, ext: str, content_type: str, is_private: bool = False
    ) -> UploadStreamDescriptor:
        """Reserve a key for an upload whose bytes arrive later as a stream."""

    @abstractmethod
    def write_stream(self, descriptor: UploadStreamDescriptor, chunks: Iterable[bytes]) -> None:
        """Send the bytes for a previously reserved key."""

    @abstractmethod
    def get_download_stream(self, file_key: str) -> Iterator[bytes]:
        """Yield an object's content in chunks."""

    @abstractmethod
    def get_presigned_download_url(self, file_key: str) -> str:
        """Return a signed URL granting temporary read access."""

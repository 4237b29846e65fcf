"""Supabase Storage implementation of the platform file service.

Talks to the Storage REST API of a Supabase project:
- Public uploads land under ``assets/`` and are served from the public URL
- Protected uploads land under ``private/`` and are handed out as signed URLs
- Streamed uploads reserve a ``public/`` or ``private/`` key up front
"""

import logging
import uuid
from typing import Any, BinaryIO, Dict, Iterable, Iterator, Optional, Union

import httpx

from ..config import SupabaseStorageConfig
from .base import (
    FileServiceBase,
    FileUpload,
    StorageError,
    UploadResult,
    UploadStreamDescriptor,
)

logger = logging.getLogger(__name__)


class SupabaseFileService(FileServiceBase):
    """
    File service backed by a single Supabase Storage bucket.

    Objects are keyed by path inside the bucket; keys are generated here
    from a random UUID and the original file extension.
    """

    def __init__(
        self,
        config: SupabaseStorageConfig,
        client: Optional[httpx.Client] = None,
    ) -> None:
        """
        Initialize the Supabase file service.

        Args:
            config: Bucket, project and credential settings.
            client: HTTP client to use. Defaults to a new httpx client.
        """
        self.config = config
        self.bucket = config.bucket_name
        self.storage_url = config.storage_url
        self.signed_url_expiration = config.signed_url_expiration
        self._api_root = f"{config.project_url.rstrip('/')}/storage/v1"
        self._auth_headers = {
            "Authorization": f"Bearer {config.api_key}",
            "apikey": config.api_key,
        }
        self._client = client or httpx.Client(timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def _object_url(self, *parts: str) -> str:
        return "/".join([self._api_root, "object", *parts])

    def _generate_key(self, prefix: str, ext: str) -> str:
        return f"{prefix}/{uuid.uuid4()}.{ext}" if ext else f"{prefix}/{uuid.uuid4()}"

    def _public_url(self, key: str) -> str:
        return f"{self.storage_url}/{self.bucket}/{key}"

    def _call(self, method: str, url: str, failure: str, **kwargs: Any) -> httpx.Response:
        headers = {**self._auth_headers, **kwargs.pop("headers", {})}
        try:
            response = self._client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{failure}: {type(e).__name__}: {e}")
            raise StorageError(failure) from e
        if response.is_error:
            logger.error(f"{failure}: {response.status_code} - {response.text}")
            raise StorageError(failure)
        return response

    def _put_object(self, key: str, content: Union[bytes, BinaryIO, Iterable[bytes]], content_type: str) -> None:
        self._call(
            "POST",
            self._object_url(self.bucket, key),
            "Error uploading file",
            content=content,
            headers={"Content-Type": content_type, "x-upsert": "false"},
        )
        logger.info(f"Uploaded {key} to bucket {self.bucket}")

    def _upload(self, prefix: str, file: FileUpload) -> str:
        key = self._generate_key(prefix, file.extension)
        if file.file is not None:
            self._put_object(key, file.file, file.content_type)
        else:
            with open(file.path, "rb") as fh:
                self._put_object(key, fh, file.content_type)
        return key

    def upload(self, file: FileUpload) -> UploadResult:
        key = self._upload("assets", file)
        return UploadResult(key=key, url=self._public_url(key))

    def upload_protected(self, file: FileUpload) -> UploadResult:
        key = self._upload("private", file)
        return UploadResult(key=key, url=self.get_presigned_download_url(key))

    def delete(self, file_key: str) -> None:
        self._call(
            "DELETE",
            self._object_url(self.bucket),
            "Error deleting file",
            json={"prefixes": [file_key]},
        )
        logger.info(f"Deleted {file_key} from bucket {self.bucket}")

    def get_upload_stream_descriptor(
        self, ext: str, content_type: str, is_private: bool = False
    ) -> UploadStreamDescriptor:
        key = self._generate_key("private" if is_private else "public", ext)
        return UploadStreamDescriptor(
            file_key=key,
            url=self._public_url(key),
            content_type=content_type,
        )

    def write_stream(self, descriptor: UploadStreamDescriptor, chunks: Iterable[bytes]) -> None:
        # httpx sends a plain iterable with chunked transfer encoding
        self._put_object(descriptor.file_key, iter(chunks), descriptor.content_type)

    def get_download_stream(self, file_key: str) -> Iterator[bytes]:
        """
        Open a download and return an iterator over its content.

        The request is sent before returning so a missing object fails here
        rather than on first iteration.
        """
        request = self._client.build_request(
            "GET",
            self._object_url("authenticated", self.bucket, file_key),
            headers=self._auth_headers,
        )
        try:
            response = self._client.send(request, stream=True)
        except httpx.HTTPError as e:
            logger.error(f"Error getting download stream for {file_key}: {e}")
            raise StorageError("Error getting download stream") from e
        if response.is_error:
            response.close()
            logger.error(f"Error getting download stream for {file_key}: {response.status_code}")
            raise StorageError("Error getting download stream")
        return self._iter_and_close(response)

    @staticmethod
    def _iter_and_close(response: httpx.Response) -> Iterator[bytes]:
        try:
            yield from response.iter_bytes()
        finally:
            response.close()

    def get_presigned_download_url(self, file_key: str) -> str:
        response = self._call(
            "POST",
            self._object_url("sign", self.bucket, file_key),
            "Error getting presigned url",
            json={"expiresIn": self.signed_url_expiration},
        )
        data: Dict[str, Any] = response.json()
        signed_path = data.get("signedURL") or data.get("signedUrl")
        if not signed_path:
            logger.error(f"Error getting presigned url for {file_key}: no signedURL in response")
            raise StorageError("Error getting presigned url")
        return f"{self._api_root}{signed_path}"

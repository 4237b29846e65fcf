"""Tests for SupabaseFileService."""

import io
import json
import pytest

import httpx

from commerce_plugins.storage import (
    FileUpload,
    StorageError,
    SupabaseFileService,
    UploadStreamDescriptor,
)

from conftest import RecordingTransport

API_ROOT = "https://proj.supabase.co/storage/v1"
LOCAL_PUBLIC = "http://127.0.0.1:54321/storage/v1/object/public"


def make_service(config, handler):
    transport = RecordingTransport(handler)
    return SupabaseFileService(config, client=transport.client()), transport


def storage_handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path.startswith("/storage/v1/object/sign/"):
        key = path[len("/storage/v1/object/sign/"):]
        return httpx.Response(200, json={"signedURL": f"/object/sign/{key}?token=abc"})
    if path.startswith("/storage/v1/object/authenticated/"):
        return httpx.Response(200, content=b"file-bytes")
    if request.method == "POST":
        return httpx.Response(200, json={"Key": path[len("/storage/v1/object/"):], "Id": "1"})
    if request.method == "DELETE":
        return httpx.Response(200, json=[{"name": "x"}])
    return httpx.Response(404)


class TestFileUpload:
    """Tests for the FileUpload dataclass."""

    def test_extension(self):
        assert FileUpload("photo.large.jpg", file=io.BytesIO()).extension == "jpg"
        assert FileUpload("README", file=io.BytesIO()).extension == ""

    def test_requires_content(self):
        with pytest.raises(ValueError):
            FileUpload("photo.jpg")


class TestUpload:
    """Tests for public and protected uploads."""

    def test_upload_from_stream(self, storage_config):
        service, transport = make_service(storage_config, storage_handler)

        result = service.upload(FileUpload("photo.jpg", "image/jpeg", file=io.BytesIO(b"jpeg-data")))

        assert result.key.startswith("assets/")
        assert result.key.endswith(".jpg")
        assert result.url == f"{LOCAL_PUBLIC}/media/{result.key}"

        request = transport.requests[0]
        assert request.method == "POST"
        assert str(request.url) == f"{API_ROOT}/object/media/{result.key}"
        assert request.headers["Content-Type"] == "image/jpeg"
        assert request.headers["Authorization"] == "Bearer service_key"
        assert request.headers["apikey"] == "service_key"
        assert request.content == b"jpeg-data"

    def test_upload_from_path(self, storage_config, tmp_path):
        source = tmp_path / "doc.pdf"
        source.write_bytes(b"%PDF-1.4")
        service, transport = make_service(storage_config, storage_handler)

        result = service.upload(FileUpload("doc.pdf", "application/pdf", path=str(source)))

        assert result.key.endswith(".pdf")
        assert transport.requests[0].content == b"%PDF-1.4"

    def test_keys_are_unique(self, storage_config):
        service, _ = make_service(storage_config, storage_handler)
        first = service.upload(FileUpload("a.png", file=io.BytesIO(b"1")))
        second = service.upload(FileUpload("a.png", file=io.BytesIO(b"1")))
        assert first.key != second.key

    def test_production_public_url(self, storage_config):
        config = storage_config.model_copy(update={"production": True})
        service, _ = make_service(config, storage_handler)
        result = service.upload(FileUpload("a.png", file=io.BytesIO(b"1")))
        assert result.url == f"https://proj.supabase.co/storage/v1/object/public/media/{result.key}"

    def test_upload_protected_returns_signed_url(self, storage_config):
        service, transport = make_service(storage_config, storage_handler)

        result = service.upload_protected(FileUpload("id.png", "image/png", file=io.BytesIO(b"png")))

        assert result.key.startswith("private/")
        assert result.url == f"{API_ROOT}/object/sign/media/{result.key}?token=abc"
        sign_request = transport.requests[1]
        assert json.loads(sign_request.content) == {"expiresIn": 120}

    def test_upload_failure_raises(self, storage_config):
        service, _ = make_service(storage_config, lambda r: httpx.Response(400, json={"error": "Duplicate"}))
        with pytest.raises(StorageError) as exc_info:
            service.upload(FileUpload("a.png", file=io.BytesIO(b"1")))
        assert str(exc_info.value) == "Error uploading file"

    def test_connection_failure_raises(self, storage_config):
        def fail(request):
            raise httpx.ConnectError("refused", request=request)

        service, _ = make_service(storage_config, fail)
        with pytest.raises(StorageError):
            service.upload(FileUpload("a.png", file=io.BytesIO(b"1")))


class TestDelete:
    """Tests for delete."""

    def test_deletes_requested_key(self, storage_config):
        service, transport = make_service(storage_config, storage_handler)

        service.delete("assets/abc.jpg")

        request = transport.requests[0]
        assert request.method == "DELETE"
        assert str(request.url) == f"{API_ROOT}/object/media"
        assert json.loads(request.content) == {"prefixes": ["assets/abc.jpg"]}

    def test_delete_failure_raises(self, storage_config):
        service, _ = make_service(storage_config, lambda r: httpx.Response(500))
        with pytest.raises(StorageError) as exc_info:
            service.delete("assets/abc.jpg")
        assert str(exc_info.value) == "Error deleting file"


class TestStreams:
    """Tests for streamed uploads and downloads."""

    def test_upload_stream_descriptor(self, storage_config):
        service, transport = make_service(storage_config, storage_handler)

        public = service.get_upload_stream_descriptor("csv", "text/csv")
        private = service.get_upload_stream_descriptor("csv", "text/csv", is_private=True)

        assert public.file_key.startswith("public/") and public.file_key.endswith(".csv")
        assert private.file_key.startswith("private/")
        assert public.url == f"{LOCAL_PUBLIC}/media/{public.file_key}"
        assert transport.requests == []

    def test_write_stream(self, storage_config):
        service, transport = make_service(storage_config, storage_handler)
        descriptor = UploadStreamDescriptor(file_key="public/x.csv", url="u", content_type="text/csv")

        service.write_stream(descriptor, [b"a,b\n", b"1,2\n"])

        request = transport.requests[0]
        assert str(request.url) == f"{API_ROOT}/object/media/public/x.csv"
        assert request.content == b"a,b\n1,2\n"

    def test_download_stream(self, storage_config):
        service, transport = make_service(storage_config, storage_handler)

        chunks = service.get_download_stream("assets/abc.jpg")

        assert b"".join(chunks) == b"file-bytes"
        assert str(transport.requests[0].url) == f"{API_ROOT}/object/authenticated/media/assets/abc.jpg"

    def test_download_missing_object_raises_immediately(self, storage_config):
        service, _ = make_service(storage_config, lambda r: httpx.Response(404))
        with pytest.raises(StorageError) as exc_info:
            service.get_download_stream("assets/missing.jpg")
        assert str(exc_info.value) == "Error getting download stream"


class TestPresignedUrl:
    """Tests for get_presigned_download_url."""

    def test_returns_absolute_signed_url(self, storage_config):
        service, _ = make_service(storage_config, storage_handler)
        url = service.get_presigned_download_url("private/a.png")
        assert url == f"{API_ROOT}/object/sign/media/private/a.png?token=abc"

    def test_failure_raises(self, storage_config):
        service, _ = make_service(storage_config, lambda r: httpx.Response(400))
        with pytest.raises(StorageError) as exc_info:
            service.get_presigned_download_url("private/a.png")
        assert str(exc_info.value) == "Error getting presigned url"

    def test_response_without_url_raises(self, storage_config):
        service, _ = make_service(storage_config, lambda r: httpx.Response(200, json={}))
        with pytest.raises(StorageError):
            service.get_presigned_download_url("private/a.png")


class TestCapabilities:
    """Tests for capability introspection."""

    def test_all_operations_supported(self):
        for operation in ("upload", "upload_protected", "delete", "get_presigned_download_url"):
            assert SupabaseFileService.supports(operation)

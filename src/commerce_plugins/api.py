"""Reference API for exercising the adapters outside the host platform."""

import logging
from functools import lru_cache
from typing import Any, Dict, Type

from fastapi import Depends, FastAPI, File, Form, Request, Response, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from .auth import limiter, require_api_key
from .capabilities import CapabilityMixin
from .config import PaymongoConfig, SupabaseStorageConfig
from .processors import (
    OperationNotSupportedError,
    PaymentProcessorError,
    PaymongoProcessor,
)
from .reconciliation import OrderExpectation
from .storage import FileServiceBase, FileUpload, StorageError, SupabaseFileService, UploadResult

logger = logging.getLogger(__name__)

app = FastAPI(title="Commerce Plugins - Reference API")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


@lru_cache(maxsize=1)
def get_payment_processor() -> PaymongoProcessor:
    return PaymongoProcessor(PaymongoConfig.from_options())


@lru_cache(maxsize=1)
def get_file_service() -> FileServiceBase:
    return SupabaseFileService(SupabaseStorageConfig.from_options())


class RefundBody(BaseModel):
    amount: int


@app.exception_handler(PaymentProcessorError)
async def payment_processor_error_handler(request: Request, exc: PaymentProcessorError):
    status_code = 501 if isinstance(exc, OperationNotSupportedError) else 502
    return JSONResponse(status_code=status_code, content=exc.to_dict())


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    return JSONResponse(status_code=502, content={"error": str(exc)})


def _describe(adapter: Type[CapabilityMixin]) -> Dict[str, Any]:
    return {
        "supported": sorted(adapter.supported_operations()),
        "unsupported": sorted(adapter.OPERATIONS - adapter.supported_operations()),
    }


@app.get("/capabilities", dependencies=[Depends(require_api_key)])
def capabilities():
    return {
        PaymongoProcessor.identifier: _describe(PaymongoProcessor),
        "storage": _describe(SupabaseFileService),
    }


@app.get("/payments/{payment_intent_id}/status", dependencies=[Depends(require_api_key)])
def payment_status(
    payment_intent_id: str,
    processor: PaymongoProcessor = Depends(get_payment_processor),
):
    status = processor.get_payment_status({"payment_intent_id": payment_intent_id})
    return {"payment_intent_id": payment_intent_id, "status": status.value}


@app.post("/payments/{payment_intent_id}/reconcile", dependencies=[Depends(require_api_key)])
def reconcile_payment(
    payment_intent_id: str,
    expectation: OrderExpectation,
    processor: PaymongoProcessor = Depends(get_payment_processor),
):
    result = processor.reconcile_payment(payment_intent_id, expectation)
    return result.model_dump(mode="json")


@app.post("/payments/{payment_intent_id}/refund", dependencies=[Depends(require_api_key)])
def refund_payment(
    payment_intent_id: str,
    body: RefundBody,
    processor: PaymongoProcessor = Depends(get_payment_processor),
):
    return processor.refund_payment({"payment_intent_id": payment_intent_id}, body.amount)


@app.post("/files", response_model=UploadResult, dependencies=[Depends(require_api_key)])
def upload_file(
    file: UploadFile = File(...),
    protected: bool = Form(False),
    service: FileServiceBase = Depends(get_file_service),
):
    upload = FileUpload(
        original_name=file.filename or "upload",
        content_type=file.content_type or "application/octet-stream",
        file=file.file,
    )
    if protected:
        return service.upload_protected(upload)
    return service.upload(upload)


@app.delete("/files/{file_key:path}", status_code=204, dependencies=[Depends(require_api_key)])
def delete_file(file_key: str, service: FileServiceBase = Depends(get_file_service)):
    service.delete(file_key)
    return Response(status_code=204)


@app.get("/files/{file_key:path}/presigned-url", dependencies=[Depends(require_api_key)])
def presigned_url(file_key: str, service: FileServiceBase = Depends(get_file_service)):
    return {"url": service.get_presigned_download_url(file_key)}

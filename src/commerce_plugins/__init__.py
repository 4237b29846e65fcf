# commerce_plugins package
__version__ = "0.1.0"

from .config import PaymongoConfig, SupabaseStorageConfig
from .processors import (
    OperationNotSupportedError,
    PaymentProcessorBase,
    PaymentProcessorError,
    PaymongoProcessor,
)
from .storage import FileServiceBase, FileUpload, StorageError, SupabaseFileService

# Reconciliation exports
from .reconciliation import (
    DiscrepancyType,
    OrderExpectation,
    PaymentIntentSnapshot,
    PaymentSessionStatus,
    classify,
    to_session_status,
)

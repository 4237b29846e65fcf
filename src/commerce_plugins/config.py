"""Explicit configuration for the payment and storage adapters.

Plugin options arrive from the host platform as a plain dict using camelCase
keys (``apiKey``, ``baseURL``, ...). ``from_options`` resolves each value from
the options first, then the environment, then the default.
"""

import os
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PAYMONGO_API_URL = "https://api.paymongo.com/v1"
DEFAULT_STORE_URL = "http://localhost:3000"
DEFAULT_PAYMENT_METHOD_TYPES = ["card", "gcash", "paymaya", "dob", "dob_ubp"]
DEFAULT_LOCAL_STORAGE_URL = "http://127.0.0.1:54321/storage/v1/object/public"
DEFAULT_RATE_LIMIT = "60/minute"


def _resolve(options: Dict[str, Any], key: str, env_var: str, default: Any = None) -> Any:
    value = options.get(key)
    if value:
        return value
    return os.getenv(env_var) or default


class PaymongoConfig(BaseModel):
    """Settings for :class:`~commerce_plugins.processors.paymongo.PaymongoProcessor`."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    api_key: str = Field(..., alias="apiKey", description="PayMongo secret key")
    store_url: str = Field(
        default=DEFAULT_STORE_URL,
        alias="baseURL",
        description="Storefront origin used for checkout cancel/success redirects",
    )
    api_url: str = Field(default=DEFAULT_PAYMONGO_API_URL, alias="apiURL")
    payment_method_types: List[str] = Field(
        default_factory=lambda: list(DEFAULT_PAYMENT_METHOD_TYPES)
    )
    timeout: float = Field(default=30.0, gt=0)

    @classmethod
    def from_options(cls, options: Optional[Dict[str, Any]] = None) -> "PaymongoConfig":
        """Build a config from plugin options with environment fallbacks.

        Raises:
            ValueError: If no API key is provided or found.
        """
        options = options or {}
        api_key = _resolve(options, "apiKey", "PAYMONGO_API_KEY")
        if not api_key:
            raise ValueError(
                "PAYMONGO_API_KEY must be provided either as the apiKey option "
                "or environment variable"
            )
        values: Dict[str, Any] = {
            "api_key": api_key,
            "store_url": _resolve(options, "baseURL", "STORE_CORS", DEFAULT_STORE_URL),
            "api_url": _resolve(options, "apiURL", "PAYMONGO_API_URL", DEFAULT_PAYMONGO_API_URL),
        }
        if options.get("paymentMethodTypes"):
            values["payment_method_types"] = list(options["paymentMethodTypes"])
        if options.get("timeout"):
            values["timeout"] = options["timeout"]
        return cls(**values)


class SupabaseStorageConfig(BaseModel):
    """Settings for :class:`~commerce_plugins.storage.supabase.SupabaseFileService`."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    bucket_name: str = Field(..., alias="bucketName")
    project_url: str = Field(..., alias="projectURL", description="Supabase project root URL")
    api_key: str = Field(..., alias="apiKey", description="Supabase service key")
    reference_id: str = Field(
        default="",
        alias="referenceID",
        description="Project reference, used to build production public URLs",
    )
    signed_url_expiration: int = Field(default=120, gt=0, description="Seconds")
    production: bool = False
    local_storage_url: str = DEFAULT_LOCAL_STORAGE_URL
    timeout: float = Field(default=30.0, gt=0)

    @property
    def storage_url(self) -> str:
        """Root URL for publicly readable objects."""
        if self.production:
            return f"https://{self.reference_id}.supabase.co/storage/v1/object/public"
        return self.local_storage_url

    @classmethod
    def from_options(cls, options: Optional[Dict[str, Any]] = None) -> "SupabaseStorageConfig":
        """Build a config from plugin options with environment fallbacks.

        Raises:
            ValueError: If the bucket, project URL or service key is missing.
        """
        options = options or {}
        required = {
            "bucket_name": ("bucketName", "BUCKET_NAME"),
            "project_url": ("projectURL", "SUPABASE_URL"),
            "api_key": ("apiKey", "SUPABASE_SERVICE_KEY"),
        }
        values: Dict[str, Any] = {}
        for field_name, (option, env_var) in required.items():
            value = _resolve(options, option, env_var)
            if not value:
                raise ValueError(
                    f"{env_var} must be provided either as the {option} option "
                    "or environment variable"
                )
            values[field_name] = value

        values["reference_id"] = _resolve(options, "referenceID", "STORAGE_BUCKET_REF", "")
        values["production"] = os.getenv("ENVIRONMENT", "").lower() == "production"
        if options.get("signedUrlExpiration"):
            values["signed_url_expiration"] = options["signedUrlExpiration"]
        if options.get("localStorageURL"):
            values["local_storage_url"] = options["localStorageURL"]
        return cls(**values)


class ApiSettings(BaseModel):
    """Settings for the reference API, read from the environment on demand."""

    model_config = ConfigDict(frozen=True)

    api_key: Optional[str] = Field(default=None, description="Bearer key clients must present")
    rate_limit: str = Field(default=DEFAULT_RATE_LIMIT, description="slowapi limit string per client")

    @classmethod
    def from_env(cls) -> "ApiSettings":
        return cls(
            api_key=os.getenv("ADAPTER_API_KEY") or None,
            rate_limit=os.getenv("ADAPTER_RATE_LIMIT") or DEFAULT_RATE_LIMIT,
        )

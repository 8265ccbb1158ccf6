from mage_sdk.client import MageAsyncClient, MageClient
from mage_sdk.config import MageSettings
from mage_sdk.errors import (
    MageAPIError,
    MageConfigurationError,
    MageDecodeError,
    MageError,
    MageFileError,
    MageHTTPStatusError,
    MageSerializationError,
    MageTimeoutError,
    MageTransportError,
)
from mage_sdk.logging import configure_logging
from mage_sdk.signer import compute_signature, sign_headers
from mage_sdk.types import Credential, EndpointGroup, MageResponse

__all__ = [
    "MageClient",
    "MageAsyncClient",
    "MageSettings",
    "Credential",
    "EndpointGroup",
    "MageResponse",
    "sign_headers",
    "compute_signature",
    "configure_logging",
    "MageError",
    "MageConfigurationError",
    "MageSerializationError",
    "MageFileError",
    "MageTransportError",
    "MageTimeoutError",
    "MageHTTPStatusError",
    "MageDecodeError",
    "MageAPIError",
]

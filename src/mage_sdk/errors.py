from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mage_sdk.types import MageResponse


class MageError(Exception):
    """Base class for every error raised by the SDK."""


class MageConfigurationError(MageError):
    pass


class MageSerializationError(MageError):
    pass


class MageFileError(MageError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"cannot read {path}: {reason}")
        self.path = path


class MageTransportError(MageError):
    def __init__(self, endpoint: str, reason: str) -> None:
        super().__init__(f"{endpoint}: {reason}")
        self.endpoint = endpoint


class MageTimeoutError(MageTransportError):
    pass


class MageHTTPStatusError(MageError):
    def __init__(
        self,
        endpoint: str,
        status_code: int,
        body: str,
        *,
        response: "MageResponse | None" = None,
    ) -> None:
        reason = f"unexpected HTTP status {status_code}"
        if response is not None:
            reason = f"{reason} (code {response.code}: {response.message})"
        super().__init__(f"{endpoint}: {reason}")
        self.endpoint = endpoint
        self.status_code = status_code
        self.body = body
        self.response = response


class MageDecodeError(MageError):
    pass


class MageAPIError(MageError):
    def __init__(self, *, code: int, message: str, response: "MageResponse") -> None:
        super().__init__(f"API error {code}: {message}")
        self.code = code
        self.message = message
        self.response = response

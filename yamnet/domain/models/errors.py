"""Error Hierarchy: typed exceptions for all yamnet failure modes.

The request-execution engine never raises these to callers; they either cross
the Transport / Serializer boundaries (and are classified into an ErrorInfo),
or are raised by ResultEnvelope.unwrap() when a caller asks for the payload of
a faulted operation.
"""

from typing import Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .envelope import ErrorInfo, ErrorKind


class YamNetError(Exception):
    """Base exception for all yamnet errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ApiError(YamNetError):
    """A captured operation failure surfaced by ResultEnvelope.unwrap()."""

    def __init__(self, error_info: "ErrorInfo"):
        super().__init__(error_info.describe())
        self.error_info = error_info

    @property
    def kind(self) -> "ErrorKind":
        return self.error_info.kind

    @property
    def status_code(self) -> Optional[int]:
        return self.error_info.status_code


# ─── Transport boundary ─────────────────────────────────────────

class NetworkFault(YamNetError):
    """A network-level failure while exchanging a request (no HTTP response)."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class NameResolutionFault(NetworkFault):
    """The host name of the endpoint could not be resolved (offline)."""


# ─── Serializer boundary ────────────────────────────────────────

class SerializationError(YamNetError):
    """An object could not be converted to wire bytes."""


class DeserializationError(YamNetError):
    """Wire bytes could not be converted into the requested type."""

    def __init__(self, message: str, target_type: Any = None):
        super().__init__(message)
        self.target_type = target_type


# ─── Configuration ──────────────────────────────────────────────

class ConfigurationError(YamNetError):
    """Required configuration (e.g. the access token) is missing or invalid."""

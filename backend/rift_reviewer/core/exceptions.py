"""Service-level exception taxonomy.

Every exception carries an ``ErrorCode`` so that batch operations can report
failures as structured results and routers can map them to HTTP responses
without inspecting message text.
"""

from typing import Any, Dict, Optional

from .enums import ErrorCode, StoreErrorKind


class ServiceException(Exception):
    """Base exception for service-layer failures."""

    code: ErrorCode = ErrorCode.STORE_FAILURE
    retriable: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for API error bodies and structured results."""
        return {
            "code": self.code.value,
            "detail": self.message,
            "retriable": self.retriable,
        }


class MatchNotFoundError(ServiceException):
    """Upstream reported 404 for a match, timeline or account. Terminal."""

    code = ErrorCode.NOT_FOUND


class PlayerNotFoundError(ServiceException):
    """No account or no stored aggregate exists for the player."""

    code = ErrorCode.NOT_FOUND


class InvalidUpstreamPayloadError(ServiceException):
    """The authoritative source returned a payload that fails shape validation."""

    code = ErrorCode.INVALID_UPSTREAM_PAYLOAD


class InvalidMatchDataError(ServiceException):
    """Malformed match blob handed to the ingestion pipeline."""

    code = ErrorCode.INVALID_MATCH_DATA


class UpstreamUnavailableError(ServiceException):
    """Upstream timed out, returned 5xx, or refused the request."""

    code = ErrorCode.UPSTREAM_UNAVAILABLE
    retriable = True

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code


class AggregationError(ServiceException):
    """Rollup recompute failed."""

    code = ErrorCode.AGGREGATION_FAILURE
    retriable = True


class InsightGenerationError(ServiceException):
    """The insight generator failed or returned an unusable answer."""

    code = ErrorCode.INSIGHT_FAILURE


class StoreError(ServiceException):
    """Storage-layer failure tagged with an explicit kind."""

    def __init__(
        self,
        kind: StoreErrorKind,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.kind = kind

    @property
    def code(self) -> ErrorCode:  # type: ignore[override]
        if self.kind is StoreErrorKind.DUPLICATE_KEY:
            return ErrorCode.DUPLICATE_WRITE
        if self.kind is StoreErrorKind.NOT_FOUND:
            return ErrorCode.NOT_FOUND
        return ErrorCode.STORE_FAILURE

    @property
    def retriable(self) -> bool:  # type: ignore[override]
        return self.kind is StoreErrorKind.UNAVAILABLE

    @property
    def is_duplicate(self) -> bool:
        return self.kind is StoreErrorKind.DUPLICATE_KEY

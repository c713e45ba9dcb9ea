"""Remote API boundary."""

from .client import ApiOutcome, ApiResult, ConsoleApiClient

__all__ = ["ApiOutcome", "ApiResult", "ConsoleApiClient"]

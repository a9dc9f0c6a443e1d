"""Error taxonomy for the roast pipeline.

Each error carries the HTTP status it maps to. Anything that is not a
``RoastError`` is treated as unknown and surfaced as a 500.
"""

from typing import Optional

FALLBACK_MESSAGE = "Failed to roast wallet"


class RoastError(Exception):
    status_code: int = 500
    default_message: str = FALLBACK_MESSAGE

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(RoastError):
    status_code = 400
    default_message = "Wallet address required"


class FetchError(RoastError):
    default_message = "Failed to fetch wallet transactions"


class EmptyHistoryError(RoastError):
    default_message = "No transaction history found for this wallet"


class ConfigurationError(RoastError):
    default_message = "Wallet-Roast is not configured"


def error_message(exc: BaseException) -> str:
    """Message shown to the client for any exception raised while roasting."""
    if isinstance(exc, RoastError):
        return exc.message
    return str(exc) or FALLBACK_MESSAGE


def error_status(exc: BaseException) -> int:
    if isinstance(exc, RoastError):
        return exc.status_code
    return 500

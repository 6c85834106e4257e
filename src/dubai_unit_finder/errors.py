from __future__ import annotations

from typing import Optional


class ExtractionError(Exception):
    """Terminal failure of one extraction pipeline.

    The message is human readable and ends up in `ListingResult.error`.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnsupportedUrl(ExtractionError):
    def __init__(self, message: str = "unsupported URL"):
        super().__init__(message)


class NetworkError(ExtractionError):
    pass


class UpstreamHttpError(NetworkError):
    def __init__(self, status: int, message: Optional[str] = None):
        super().__init__(message or f"Upstream responded with status {status}")
        self.status = status


class BotBlockDetected(ExtractionError):
    pass


class MissingStructuredData(ExtractionError):
    pass


class MissingRegulatoryNumber(ExtractionError):
    def __init__(self, message: str = "No RERA permit number found in the listing"):
        super().__init__(message)


class EnrichmentFailure(Exception):
    """Registry lookup error. Never leaves the registry resolver."""

"""Error hierarchy for workstation setup."""
from pathlib import Path
from typing import Any, Dict, Optional

import structlog


class WorkstationError(Exception):
    """Base error class for workstation setup."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigError(WorkstationError):
    """Configuration file missing, unreadable or malformed."""


class FetchError(WorkstationError):
    """Artifact could not be downloaded."""

    def __init__(self, message: str, url: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details={"url": url, **(details or {})})
        self.url = url


class HttpTransportError(FetchError):
    """Connection, protocol or timeout failure while talking to the server."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to download {url}: {reason}", url, {"reason": reason})


class BadStatusError(FetchError):
    """Server answered with a non-2xx status."""

    def __init__(self, url: str, status: int, reason: Optional[str] = None):
        message = f"Failed to download {url}: HTTP {status}"
        if reason:
            message = f"{message} {reason}"
        super().__init__(message, url, {"status": status})
        self.status = status


class ExtractError(WorkstationError):
    """Entry could not be pulled out of an archive."""


class UnsupportedFormatError(ExtractError):
    def __init__(self, source: str):
        super().__init__(f"Unsupported archive format: {source}", {"source": source})


class EntryNotFoundError(ExtractError):
    def __init__(self, entry_name: str):
        super().__init__(f"Entry {entry_name} not found in archive", {"entry": entry_name})
        self.entry_name = entry_name


class CorruptArchiveError(ExtractError):
    def __init__(self, kind: str, reason: str):
        super().__init__(f"Corrupt {kind} archive: {reason}", {"kind": kind})


class InstallError(WorkstationError):
    """Artifact could not be written to its install location."""


class PathResolutionError(InstallError):
    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot resolve {path}: {reason}", {"path": path})


class InstallIOError(InstallError):
    def __init__(self, path: Path, reason: str):
        super().__init__(f"Cannot write {path}: {reason}", {"path": str(path)})
        self.path = path


class PackageError(WorkstationError):
    """Any failure of a single package's pipeline, attributed to that package."""

    def __init__(self, name: str, cause: Exception):
        super().__init__(
            f"Installing {name}: {cause}",
            {"package": name, "error_type": cause.__class__.__name__},
        )
        self.name = name
        self.cause = cause


def log_error(
    logger: structlog.stdlib.BoundLogger, error: Exception, event: str = "error", **context: Any
) -> None:
    """Log an error with context."""
    error_info: Dict[str, Any] = {
        "error_type": error.__class__.__name__,
        "error_message": str(error),
    }
    if isinstance(error, WorkstationError) and error.details:
        error_info["details"] = error.details
    logger.error(event, **error_info, **context)

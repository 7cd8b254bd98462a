"""Exception types raised by the core layer."""

from typing import Dict, Optional


class AegisError(Exception):
    """Base class for application errors shown to the advisor."""


class WizardValidationError(AegisError):
    """Raised when a wizard step receives invalid input."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        msg = "; ".join(f"{k}: {v}" for k, v in self.errors.items())
        super().__init__(msg or "invalid input")


class BackupError(AegisError):
    """Raised when a backup file cannot be read or has the wrong shape."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class ExportError(AegisError):
    """Raised when a CSV/PDF export has nothing to write or bad arguments."""

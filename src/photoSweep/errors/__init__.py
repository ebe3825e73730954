"""Custom exception hierarchy for photoSweep."""

from __future__ import annotations


class PhotoSweepError(Exception):
    """Base class for all custom errors raised by photoSweep."""


# --- 3-layer hierarchy ---

class DomainError(PhotoSweepError):
    """Base class for domain-level errors."""


class InfrastructureError(PhotoSweepError):
    """Base class for infrastructure-level errors."""


class ApplicationError(PhotoSweepError):
    """Base class for application-level errors."""


# --- Domain errors ---

class InvalidAssetError(DomainError):
    """Raised when an asset carries an empty or malformed identifier."""


class AssetUnavailableError(DomainError):
    """Raised when the source collection has no readable bytes for an asset."""


class TrashEntryNotFoundError(DomainError):
    """Raised when restoring an asset that has no live trash entry."""


# --- Infrastructure errors ---

class PermissionDeniedError(InfrastructureError):
    """Raised when the source collection refuses read or write access."""


class StorageIOError(InfrastructureError):
    """Raised when a copy, delete or persistence write fails."""


class DocumentCorruptedError(InfrastructureError):
    """Raised when a persisted JSON document cannot be parsed or validated."""


# --- Application errors ---

class IngestionError(ApplicationError):
    """Raised when a catalog page could not be fetched from the source."""


class LedgerBusyError(ApplicationError):
    """Raised when a ledger mutation is requested while another is running."""


class SessionNotStartedError(ApplicationError):
    """Raised when the triage session is used before :meth:`start`."""


# --- Settings errors ---

class SettingsError(PhotoSweepError):
    """Base class for settings related failures."""


class SettingsLoadError(SettingsError):
    """Raised when the settings file cannot be parsed or loaded."""


class SettingsValidationError(SettingsError):
    """Raised when settings data fails schema validation."""

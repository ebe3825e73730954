"""Default configuration values for photoSweep."""

from __future__ import annotations

from typing import Final

# Number of assets requested from the source collection per catalog page.
PAGE_SIZE: Final[int] = 50

# When this many or fewer unviewed assets remain in the catalog the next
# page is requested, so the user never waits on a swipe.
PRELOAD_THRESHOLD: Final[int] = 20

# Private storage layout below the application data directory.  The trash
# folder holds one copy per soft-deleted asset; the two JSON documents are
# rewritten in full on every mutation.
TRASH_DIR_NAME: Final[str] = "trash"
LEDGER_FILE_NAME: Final[str] = "trash_metadata.json"
LIKED_FILE_NAME: Final[str] = "liked.json"
SETTINGS_FILE_NAME: Final[str] = "settings.json"
APP_DIR_NAME: Final[str] = "photoSweep"

LEDGER_SCHEMA_ID: Final[str] = "photoSweep/trash@1"
LIKED_SCHEMA_ID: Final[str] = "photoSweep/liked@1"
SETTINGS_SCHEMA_ID: Final[str] = "photoSweep/settings@1"

# Suffixes used while writing files so a crash never leaves a half-written
# document or trash copy under its final name.
TEMP_SUFFIX: Final[str] = ".tmp"
PARTIAL_COPY_SUFFIX: Final[str] = ".part"
CORRUPT_SUFFIX: Final[str] = ".corrupt"

COPY_CHUNK_SIZE: Final[int] = 1024 * 1024

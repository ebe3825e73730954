"""Wiring helpers that assemble a triage session from its collaborators."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, TYPE_CHECKING

from .application.services.asset_catalog import AssetCatalog
from .application.services.scheduler import CooperativeScheduler, Scheduler
from .application.services.triage_session import TriageSession
from .application.services.undo_stack import UndoStack
from .domain.sources import IAssetSource
from .errors.handler import ErrorHandler
from .events import EventBus
from .infrastructure.folder_source import FolderAssetSource
from .library.liked_set import LikedSet
from .library.trash_ledger import TrashLedger
from .utils.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover - only for type checking
    from .settings.manager import SettingsManager


def _create_settings_manager() -> "SettingsManager":
    from .settings.manager import SettingsManager

    manager = SettingsManager()
    manager.load()
    return manager


@dataclass
class AppContext:
    """Container for the objects one triage session shares."""

    source: IAssetSource
    data_dir: Path
    settings: Optional["SettingsManager"] = None
    scheduler: Scheduler = field(default_factory=CooperativeScheduler)
    event_bus: EventBus = field(default_factory=EventBus)
    seed: Optional[int] = None
    session: TriageSession = field(init=False)
    error_handler: ErrorHandler = field(init=False)

    def __post_init__(self) -> None:
        self.data_dir = Path(self.data_dir)
        self.error_handler = ErrorHandler(get_logger(), self.event_bus)

        page_size = self._setting("catalog.page_size")
        preload = self._setting("catalog.preload_threshold")
        background = self._setting("catalog.background_ingestion")
        seed = self.seed if self.seed is not None else self._setting("catalog.seed")

        ledger = TrashLedger(self.data_dir, self.source, event_bus=self.event_bus)
        liked = LikedSet(self.data_dir, event_bus=self.event_bus)
        catalog = AssetCatalog(
            self.source,
            self.scheduler,
            page_size=page_size,
            preload_threshold=preload,
            background_ingestion=background,
            rng=random.Random(seed),
            event_bus=self.event_bus,
        )
        self.session = TriageSession(
            self.source,
            ledger,
            liked,
            catalog,
            UndoStack(catalog),
            event_bus=self.event_bus,
            error_handler=self.error_handler,
        )

    def _setting(self, key: str):
        from .settings.schema import DEFAULT_SETTINGS

        if self.settings is not None:
            value = self.settings.get(key)
            if value is not None:
                return value
        section, _, name = key.partition(".")
        return DEFAULT_SETTINGS[section][name]


def build_context(
    source_dir: Path,
    data_dir: Optional[Path] = None,
    *,
    settings: Optional["SettingsManager"] = None,
    seed: Optional[int] = None,
) -> AppContext:
    """Create an :class:`AppContext` for a folder of photos.

    Without an explicit *data_dir* the settings' ``data_dir`` (or the
    platform configuration folder) holds the trash and liked documents.
    The data directory is excluded from the scan so trash copies never show
    up as fresh assets.
    """

    if data_dir is None:
        settings = settings or _create_settings_manager()
        data_dir = settings.data_dir()
    data_dir = Path(data_dir)
    source = FolderAssetSource(Path(source_dir), exclude=[data_dir])
    return AppContext(source=source, data_dir=data_dir, settings=settings, seed=seed)

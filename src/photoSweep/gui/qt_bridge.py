"""Qt adapters: run catalog paging on the Qt event loop and re-emit events as signals."""

from __future__ import annotations

from typing import List

from PySide6.QtCore import QObject, QTimer, Signal

from ..errors.handler import ErrorOccurredEvent
from ..events import (
    AssetRestoredEvent,
    AssetTrashedEvent,
    CatalogCompletedEvent,
    CatalogPageLoadedEvent,
    DecisionRecordedEvent,
    DecisionUndoneEvent,
    EventBus,
    LikedToggledEvent,
    Subscription,
    TrashPurgedEvent,
    TrashRestoredAllEvent,
)
from ..application.services.scheduler import Task


class QtScheduler:
    """Queue tasks on the Qt event loop of the calling thread.

    ``QTimer.singleShot(0, ...)`` runs the callback once control returns to
    the event loop, so each catalog page is processed between user events.
    """

    def call_soon(self, callback: Task) -> None:
        QTimer.singleShot(0, callback)


class SessionSignals(QObject):
    """Bridge :class:`EventBus` notifications into Qt signals for the UI."""

    statsChanged = Signal()
    catalogProgress = Signal(int, int)
    catalogFinished = Signal(int)
    errorRaised = Signal(str)

    def __init__(self, event_bus: EventBus, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._bus = event_bus
        self._subscriptions: List[Subscription] = []
        for event_type in (
            AssetTrashedEvent,
            AssetRestoredEvent,
            TrashRestoredAllEvent,
            TrashPurgedEvent,
            DecisionRecordedEvent,
            DecisionUndoneEvent,
            LikedToggledEvent,
        ):
            self._subscriptions.append(
                event_bus.subscribe(event_type, lambda _event: self.statsChanged.emit())
            )
        self._subscriptions.append(event_bus.subscribe(CatalogPageLoadedEvent, self._on_page))
        self._subscriptions.append(event_bus.subscribe(CatalogCompletedEvent, self._on_completed))
        self._subscriptions.append(event_bus.subscribe(ErrorOccurredEvent, self._on_error))

    def detach(self) -> None:
        for subscription in self._subscriptions:
            self._bus.unsubscribe(subscription)
        self._subscriptions.clear()

    def _on_page(self, event: CatalogPageLoadedEvent) -> None:
        self.catalogProgress.emit(event.loaded_count, event.total_known)
        self.statsChanged.emit()

    def _on_completed(self, event: CatalogCompletedEvent) -> None:
        self.catalogFinished.emit(event.ordered_count)
        self.statsChanged.emit()

    def _on_error(self, event: ErrorOccurredEvent) -> None:
        self.errorRaised.emit(str(event.error))

from .asset_catalog import AssetCatalog, LoadHandle
from .scheduler import CooperativeScheduler, Scheduler
from .triage_session import TriageSession
from .undo_stack import UndoStack

__all__ = [
    "AssetCatalog",
    "CooperativeScheduler",
    "LoadHandle",
    "Scheduler",
    "TriageSession",
    "UndoStack",
]

from .liked_set import LikedSet
from .trash_ledger import TrashLedger

__all__ = ["LikedSet", "TrashLedger"]

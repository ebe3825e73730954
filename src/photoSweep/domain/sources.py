from abc import ABC, abstractmethod
from typing import BinaryIO, List, Sequence

from .models import Asset, DeleteOutcome


class IAssetSource(ABC):
    """The platform asset store the triage core reads from."""

    @abstractmethod
    def ensure_access(self) -> None:
        """Raise ``PermissionDeniedError`` if the collection cannot be used."""
        pass

    @abstractmethod
    def count(self) -> int:
        """Total number of assets currently in the collection."""
        pass

    @abstractmethod
    def page(self, offset: int, limit: int) -> List[Asset]:
        """Return up to *limit* assets starting at *offset*.

        Ordering must be stable (creation time) so consecutive pages neither
        skip nor repeat items while the collection is unchanged.
        """
        pass

    @abstractmethod
    def open_bytes(self, asset_id: str) -> BinaryIO:
        """Open a binary stream over the asset's content.

        Raises ``AssetUnavailableError`` when the bytes cannot be read.
        """
        pass

    @abstractmethod
    def delete_batch(self, asset_ids: Sequence[str]) -> DeleteOutcome:
        """Permanently remove the given originals; may partially fail."""
        pass

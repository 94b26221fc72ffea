"""Abstract base class for job source adapters."""

from abc import ABC, abstractmethod

from src.core.schemas import JobResult, SearchOptions


class SourceAdapter(ABC):
    """Base class that every job source adapter must implement."""

    @property
    @abstractmethod
    def source_id(self) -> str:
        """Unique identifier for this source (e.g. 'greenhouse')."""

    @abstractmethod
    def enabled_for(self, options: SearchOptions) -> bool:
        """Whether this source takes part in a search with ``options``."""

    @abstractmethod
    async def search(self, query: str, options: SearchOptions) -> list[JobResult]:
        """Fetch listings for ``query`` normalized to JobResult."""

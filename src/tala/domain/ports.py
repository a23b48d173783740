"""
Ports (interfaces) for card state persistence.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable

from .models import CardState

StatesListener = Callable[[dict[str, CardState]], None]


class CardStateRepository(ABC):
    """
    Port for reading and writing per-card memory state.

    Implementations:
        - JsonCardStateRepository: Persists states to a versioned JSON file.
        - InMemoryCardStateRepository: Keeps states in process memory only.

    Writes overwrite the previous value for an id; there is no merging.
    Usable as a context manager; leaving the block calls close().
    """

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        """Release listeners and any resources held by the store."""
        pass

    @abstractmethod
    def get(self, card_id: str) -> CardState | None:
        """Return the stored state for a card, or None if the card is new."""
        pass

    @abstractmethod
    def upsert(self, card_id: str, state: CardState) -> None:
        pass

    @abstractmethod
    def remove(self, card_id: str) -> None:
        pass

    @abstractmethod
    def remove_all(self) -> None:
        pass

    @abstractmethod
    def snapshot(self) -> dict[str, CardState]:
        """Return a copy of every stored state, keyed by card id."""
        pass

    @abstractmethod
    def subscribe(self, listener: StatesListener) -> Callable[[], None]:
        """
        Register a listener called with a fresh snapshot after every mutation.

        Returns:
            A callable that removes the listener again.
        """
        pass

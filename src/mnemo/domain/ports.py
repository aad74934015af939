"""
Ports (interfaces) for state persistence.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from .models import AppState


class StateRepository(ABC):
    """
    Port for whole-blob load/save of the application state.

    Implementations:
        - JsonStateRepository: A single JSON file on local disk.

    There are no partial or field-level updates; callers always
    read-modify-write the entire state.
    """

    @abstractmethod
    def load(self) -> AppState:
        """
        Load the persisted state.

        Returns:
            The revived AppState, or an empty default when nothing is stored yet.

        Raises:
            PersistenceError: On I/O failure or malformed content.
        """
        pass

    @abstractmethod
    def save(self, state: AppState) -> None:
        """
        Persist the entire state.

        Raises:
            PersistenceError: On I/O failure. The caller's in-memory state is untouched.
        """
        pass

    @abstractmethod
    def backup(self, destination: Path | None = None) -> Path:
        """Copy the current stored state aside and return the copy's path."""
        pass

    @abstractmethod
    def restore(self, source: Path) -> None:
        """Replace the stored state with a previously taken backup."""
        pass

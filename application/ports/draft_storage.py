"""
Draft storage port (interface).

A durable, client-local key/value slot store used by draft recovery.
Each ``set`` is a single atomic replace of one key.
"""

from typing import Optional, Protocol


class DraftStorage(Protocol):
    """Key/value storage for serialized wizard drafts."""

    def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Returns:
            The stored string, or None if absent
        """
        ...

    def set(self, key: str, value: str) -> None:
        """Replace the value stored under a key."""
        ...

    def remove(self, key: str) -> None:
        """Delete a key; missing keys are ignored."""
        ...

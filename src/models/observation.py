# src/models/observation.py

"""Price observation and history entry models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Observation:
    """An (identity, price) pair eligible for reporting.

    The observation time is stamped by the remote store on receipt.
    """

    identity: str
    price: int

    def to_payload(self) -> dict[str, object]:
        """Serialise to the ``/record`` request body."""
        return {"id": self.identity, "price": self.price}


@dataclass(frozen=True)
class HistoryEntry:
    """A single stored price point returned by the remote store."""

    timestamp: datetime
    price: int

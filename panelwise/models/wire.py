"""WireRecord — one stored connection between two elements."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class WireKind(str, Enum):
    """How the connection was authored."""

    BATCH = "BATCH"
    CHAIN = "CHAIN"


class WireStatus(str, Enum):
    ACTIVE = "ACTIVE"
    DISABLED = "DISABLED"


class WireRecord(BaseModel):
    """A connection record.

    Stored with a direction (``from`` / ``to``) but treated as undirected
    by every topology computation.  ``chain_id`` groups records authored in
    one batch or click-chain operation; it is unrelated to electrical
    circuits.
    """

    model_config = ConfigDict(frozen=True)

    from_id: str
    to_id: str
    from_handle: str = ""
    to_handle: str = ""
    from_type: str = ""
    to_type: str = ""
    chain_id: str = ""
    created_at: datetime | None = None
    kind: WireKind = WireKind.BATCH
    status: WireStatus = WireStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status is WireStatus.ACTIVE

    @property
    def endpoints(self) -> frozenset[str]:
        """The unordered endpoint pair."""
        return frozenset((self.from_id, self.to_id))

    def other_end(self, element_id: str) -> str | None:
        if element_id == self.from_id:
            return self.to_id
        if element_id == self.to_id:
            return self.from_id
        return None

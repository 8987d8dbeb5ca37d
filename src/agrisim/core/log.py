from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional, Dict, Any

from .ids import Coord, ItemId


@dataclass
class AuditEntry:
    type: str
    tick: int
    coord: Optional[Coord] = None
    item_id: Optional[ItemId] = None
    delta: float = 0.0
    reason: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


class AuditLog:
    def __init__(self, max_entries: Optional[int] = None):
        # Oldest entries drop off once max_entries is reached.
        self.entries: Deque[AuditEntry] = deque(maxlen=max_entries)

    def add_entry(
        self,
        type: str,
        tick: int,
        coord: Optional[Coord] = None,
        item_id: Optional[ItemId] = None,
        delta: float = 0.0,
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        entry = AuditEntry(
            type=type,
            tick=tick,
            coord=coord,
            item_id=item_id,
            delta=delta,
            reason=reason,
            details=details or {},
        )
        self.entries.append(entry)

    def of_type(self, prefix: str) -> List[AuditEntry]:
        return [e for e in self.entries if e.type.startswith(prefix)]

    def __len__(self) -> int:
        return len(self.entries)

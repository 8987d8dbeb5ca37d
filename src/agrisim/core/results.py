from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Failure(Enum):
    INSUFFICIENT_RESOURCE = "insufficient_resource"  # missing seed, feed, material or tool
    INVALID_STATE = "invalid_state"  # occupied, already built, not harvestable
    INVALID_TERRAIN = "invalid_terrain"
    ADJACENCY_UNMET = "adjacency_unmet"
    NOT_UNLOCKED = "not_unlocked"


@dataclass(frozen=True)
class CommandResult:
    """
    Outcome of a player command. Truthy on success, so callers that only
    care about pass/fail can keep treating it as a bool.
    """
    ok: bool
    failure: Optional[Failure] = None
    message: str = ""

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, message: str = "") -> "CommandResult":
        return cls(ok=True, message=message)

    @classmethod
    def fail(cls, failure: Failure, message: str = "") -> "CommandResult":
        return cls(ok=False, failure=failure, message=message)

    def to_dict(self):
        return {
            "ok": self.ok,
            "failure": self.failure.value if self.failure else None,
            "message": self.message,
        }

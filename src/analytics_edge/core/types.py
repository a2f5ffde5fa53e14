from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PrivacyStatus(str, Enum):
    OPTED_IN = "optedin"
    OPTED_OUT = "optedout"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: object) -> PrivacyStatus:
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                pass
        return cls.UNKNOWN


class AppState(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    BACKGROUND = "background"


@dataclass(frozen=True, slots=True)
class AppStateLookup:
    """
    Outcome of the bounded foreground/background query.
    found=False means the owner did not answer in time.
    """

    found: bool
    state: AppState | None = None

    @classmethod
    def unknown(cls) -> AppStateLookup:
        return cls(found=False)

# frontend/diagnostics.py
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List

logger = logging.getLogger(__name__)


class Level(Enum):
    ERROR = "Error"
    WARNING = "Warning"


@dataclass(frozen=True)
class Diagnostic:
    level: Level
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"level": self.level.value, "message": self.message}


class Diagnostics:
    """Ordered, append-only collector for the messages of one compile.

    Each compile gets its own instance, so independent compiles never see
    each other's messages.
    """

    def __init__(self):
        self._items: List[Diagnostic] = []

    def error(self, message: str) -> Diagnostic:
        return self.push(Diagnostic(Level.ERROR, message))

    def warning(self, message: str) -> Diagnostic:
        return self.push(Diagnostic(Level.WARNING, message))

    def push(self, diagnostic: Diagnostic) -> Diagnostic:
        logger.debug("%s: %s", diagnostic.level.value, diagnostic.message)
        self._items.append(diagnostic)
        return diagnostic

    def clear(self):
        self._items.clear()

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self._items if d.level is Level.ERROR]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self._items if d.level is Level.WARNING]

    @property
    def has_errors(self) -> bool:
        return any(d.level is Level.ERROR for d in self._items)

    def to_list(self) -> List[Dict[str, str]]:
        return [d.to_dict() for d in self._items]

    def to_json(self) -> str:
        return json.dumps(self.to_list())

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._items)

    def __len__(self):
        return len(self._items)

    def __getitem__(self, index):
        return self._items[index]

    def __repr__(self):
        return f"Diagnostics({self._items!r})"

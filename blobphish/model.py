"""The capability shared by everything the session runner can drive."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple, Union

from rich.text import Text


class Action(enum.IntEnum):
    CONTINUE = 0
    SKIP = 1
    EXIT = 2


@dataclass(frozen=True)
class Decision:
    """Operator's confirmed choice on a step prompt."""

    action: Action


class Signal(enum.Enum):
    QUIT = "quit"
    LAUNCH = "launch"


QUIT = Signal.QUIT
LAUNCH = Signal.LAUNCH

Effect = Union[Decision, Signal]


class Model(Protocol):
    def transition(self, key: str) -> Tuple["Model", Optional[Effect]]:
        ...

    def render(self) -> Text:
        ...

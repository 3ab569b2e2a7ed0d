"""Register storage for yanked and deleted text."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict

UNNAMED = '"'


class RegisterKind(str, Enum):
    CHARWISE = "charwise"
    LINEWISE = "linewise"


@dataclass(frozen=True, slots=True)
class RegisterValue:
    text: str
    kind: RegisterKind = RegisterKind.CHARWISE

    @property
    def linewise(self) -> bool:
        return self.kind is RegisterKind.LINEWISE


class RegisterBank:
    """Tracks the unnamed register plus any named ones."""

    def __init__(self) -> None:
        self._registers: Dict[str, RegisterValue] = {UNNAMED: RegisterValue(text="")}

    def get(self, name: str = UNNAMED) -> RegisterValue:
        return self._registers.get(name, RegisterValue(text=""))

    def set(self, name: str, value: RegisterValue) -> None:
        self._registers[name] = value
        if name != UNNAMED:
            self._registers[UNNAMED] = value

    def yank_to(
        self,
        name: str,
        text: str,
        *,
        kind: RegisterKind = RegisterKind.CHARWISE,
    ) -> RegisterValue:
        value = RegisterValue(text=text, kind=kind)
        self.set(name, value)
        return value

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Button:
    label: str
    token: str


@dataclass(frozen=True)
class View:
    text: str
    rows: tuple[tuple[Button, ...], ...] = ()

    def tokens(self) -> list[str]:
        return [button.token for row in self.rows for button in row]


@dataclass(frozen=True)
class Acknowledgment:
    text: str | None = None
    prominent: bool = False

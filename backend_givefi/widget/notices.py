"""User-facing notices: one per outcome, shown as toasts by the front end."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT = "default"
DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Notice:
    title: str
    description: str
    variant: str = DEFAULT
    link: str | None = None

    @property
    def is_error(self) -> bool:
        return self.variant == DESTRUCTIVE


def error_notice(title: str, description: str) -> Notice:
    return Notice(title=title, description=description, variant=DESTRUCTIVE)

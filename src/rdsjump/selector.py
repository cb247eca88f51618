"""Instance selection: resolve 0, 1, or N candidates to exactly one instance."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

import click

from rdsjump.errors import NoInstancesFound, SelectionCancelled
from rdsjump.models import InstanceRecord

Searcher = Callable[[str, int], bool]

PAGE_SIZE = 20


@dataclass
class PickerItem:
    label: str
    details: dict[str, str] = field(default_factory=dict)


class Picker(Protocol):
    def pick(self, items: Sequence[PickerItem], searcher: Searcher) -> int | None:
        """Return the chosen index into ``items``, or None when cancelled."""
        ...


def _normalize(value: str) -> str:
    return value.lower().replace(" ", "")


def make_searcher(candidates: Sequence[InstanceRecord]) -> Searcher:
    def matches(text: str, index: int) -> bool:
        return _normalize(text) in _normalize(candidates[index].name)

    return matches


def select_instance(candidates: Sequence[InstanceRecord], picker: Picker) -> InstanceRecord:
    if not candidates:
        raise NoInstancesFound("no instances found").help(
            "check the filter and the regions in `rdsjump config show`"
        )
    if len(candidates) == 1:
        return candidates[0]

    items = [
        PickerItem(
            label=c.name,
            details={"Name": c.name, "Address": c.address, "Engine": c.engine},
        )
        for c in candidates
    ]
    index = picker.pick(items, make_searcher(candidates))
    if index is None:
        raise SelectionCancelled("instance selection cancelled")
    return candidates[index]


class ClickPicker:
    """Numbered menu on the terminal; text input narrows the list."""

    def __init__(self, label: str = "Select a RDS instance") -> None:
        self._label = label

    def _show(self, items: Sequence[PickerItem], visible: list[int]) -> None:
        for n, index in enumerate(visible[:PAGE_SIZE], start=1):
            item = items[index]
            engine = item.details.get("Engine", "")
            click.echo(f"  {n:>2}) {item.label}  " + click.style(engine, dim=True), err=True)
        if len(visible) > PAGE_SIZE:
            click.echo(f"  ... {len(visible) - PAGE_SIZE} more, type to search", err=True)

    def pick(self, items: Sequence[PickerItem], searcher: Searcher) -> int | None:
        visible = list(range(len(items)))
        while True:
            self._show(items, visible)
            try:
                answer = click.prompt(
                    f"{self._label} (number, search text, q to quit)",
                    default="",
                    show_default=False,
                    err=True,
                ).strip()
            except click.Abort:
                return None

            if answer == "q":
                return None
            if answer.isdigit() and 1 <= int(answer) <= min(len(visible), PAGE_SIZE):
                chosen = visible[int(answer) - 1]
                address = items[chosen].details.get("Address", items[chosen].label)
                click.echo(f"▶ {items[chosen].label} ({address})", err=True)
                return chosen

            narrowed = [i for i in range(len(items)) if searcher(answer, i)]
            if not narrowed:
                click.echo(f"No instance matches '{answer}'.", err=True)
                continue
            if len(narrowed) == 1:
                click.echo(f"▶ {items[narrowed[0]].label}", err=True)
                return narrowed[0]
            visible = narrowed

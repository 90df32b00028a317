"""Per-row action menus as plain data.

Actions are declared once per grid as a list of :class:`ActionItem` and
:class:`ActionGroup` entries and resolved against a concrete row when its
menu opens.  There is no global registry.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from reflex_datatable.models import GridRow

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ActionItem(Generic[T]):
    """A single menu entry.

    ``disabled`` is either a constant or a predicate evaluated against the
    row's record.
    """

    label: str
    on_click: Callable[[T], Any]
    icon: str | None = None
    disabled: bool | Callable[[T], bool] = False


@dataclass(frozen=True)
class ActionGroup(Generic[T]):
    items: Sequence[ActionItem[T]] = field(default_factory=tuple)
    group_label: str | None = None


@dataclass(frozen=True)
class ActionSeparator:
    """Divider between groups; ``label`` carries the group label, if any."""

    label: str | None = None
    divider: bool = True


@dataclass(frozen=True)
class ResolvedAction:
    label: str
    enabled: bool
    icon: str | None
    _handler: Callable[[Any], Any] = field(repr=False, compare=False)
    _record: Any = field(repr=False, compare=False)

    def invoke(self) -> Any:
        """Call the handler with the row's record.  Disabled entries do nothing."""
        if not self.enabled:
            logger.debug("[RowActions] ignored disabled action %r", self.label)
            return None
        return self._handler(self._record)


MenuEntry = ResolvedAction | ActionSeparator


def _resolve_item(item: ActionItem[Any], record: Any) -> ResolvedAction:
    disabled = item.disabled(record) if callable(item.disabled) else item.disabled
    return ResolvedAction(
        label=item.label,
        enabled=not disabled,
        icon=item.icon,
        _handler=item.on_click,
        _record=record,
    )


def resolve_row_actions(
    row: GridRow | Any,
    actions: Sequence[ActionItem[Any] | ActionGroup[Any]],
) -> list[MenuEntry]:
    """Flatten *actions* for *row*, evaluating enablement per entry.

    Every group after the first is preceded by a divider; a group label
    is carried on that separator (or on a label-only separator for the
    first group).
    """
    record = row.record if isinstance(row, GridRow) else row
    entries: list[MenuEntry] = []
    for position, action in enumerate(actions):
        if isinstance(action, ActionGroup):
            if position > 0 or action.group_label:
                entries.append(ActionSeparator(label=action.group_label, divider=position > 0))
            entries.extend(_resolve_item(item, record) for item in action.items)
        else:
            entries.append(_resolve_item(action, record))
    return entries

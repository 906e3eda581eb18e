"""
Runtime event emulator models

The interactive behavior itself runs in the browser (assets/js/rodix-emulator.js).
This module holds the parts that are data or pure state machines:

- EmulatorConfig: naming conventions shipped to the client as RODIX_CONFIG
- ButtonRule / BUTTON_RULES: ordered (predicate, action) classification table
- SliderState: drag/keyboard/readout state with step quantization
- SelectBoxGroup: custom dropdown open/closed state with mutual exclusion

The client library implements the same rules; the tests run both against
the same tables.
"""

import math
from decimal import Decimal
from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


class ButtonAction(Enum):
    """Interaction inferred for a plain button click"""
    TAB_SWITCH = "tab-switch"
    SHOW_MESSAGE = "show-message"
    ADD = "add"
    DELETE = "delete"
    REVERT = "revert"
    NONE = "none"


@dataclass(frozen=True)
class ButtonContext:
    """
    What the classifier can see about a clicked button

    Attributes:
        button_id: Element id ("" when absent)
        label: Visible text of the button
        in_tab_group: True if the parent element carries the tab-group marker
    """
    button_id: str = ""
    label: str = ""
    in_tab_group: bool = False


@dataclass(frozen=True)
class ButtonRule:
    """
    One (predicate, action) pair of the button classification table

    A rule either matches on the tab-group marker of the parent, or on any
    of its keywords appearing (case-insensitively) in the id or the label.
    """
    action: ButtonAction
    keywords: Tuple[str, ...] = ()
    tab_group: bool = False

    def matches(self, context: ButtonContext) -> bool:
        if self.tab_group:
            return context.in_tab_group
        haystacks = (context.button_id.lower(), context.label.lower())
        return any(keyword in text for keyword in self.keywords for text in haystacks)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'action': self.action.value,
            'keywords': list(self.keywords),
            'tabGroup': self.tab_group,
        }


# First match wins, in this order.
BUTTON_RULES: Tuple[ButtonRule, ...] = (
    ButtonRule(ButtonAction.TAB_SWITCH, tab_group=True),
    ButtonRule(ButtonAction.SHOW_MESSAGE, keywords=('message', 'msg')),
    ButtonRule(ButtonAction.ADD, keywords=('add',)),
    ButtonRule(ButtonAction.DELETE, keywords=('delete', 'remove')),
    ButtonRule(ButtonAction.REVERT, keywords=('revert', 'reset')),
)


@dataclass
class EmulatorConfig:
    """
    Naming conventions the client library keys its behavior on

    Serialized with to_dict() and injected ahead of the library as
    window.RODIX_CONFIG.
    """
    tab_group_class: str = "tab-group"
    tab_id_prefix: str = "tab"
    panel_id_prefix: str = "panel"
    active_class: str = "active"
    checked_class: str = "checked"
    open_class: str = "open"
    disabled_class: str = "disabled"
    button_id_prefix: str = "btn"
    input_id_prefix: str = "input"
    select_id_prefix: str = "select"
    table_id_prefix: str = "table"
    revert_min_rows: int = 1
    readout_id_suffix: str = "Value"
    select_event: str = "rodix-select"
    content_selector: str = ".preview-content"
    button_rules: Tuple[ButtonRule, ...] = BUTTON_RULES

    def to_dict(self) -> Dict[str, Any]:
        return {
            'tabGroupClass': self.tab_group_class,
            'tabIdPrefix': self.tab_id_prefix,
            'panelIdPrefix': self.panel_id_prefix,
            'activeClass': self.active_class,
            'checkedClass': self.checked_class,
            'openClass': self.open_class,
            'disabledClass': self.disabled_class,
            'buttonIdPrefix': self.button_id_prefix,
            'inputIdPrefix': self.input_id_prefix,
            'selectIdPrefix': self.select_id_prefix,
            'tableIdPrefix': self.table_id_prefix,
            'revertMinRows': self.revert_min_rows,
            'readoutIdSuffix': self.readout_id_suffix,
            'selectEvent': self.select_event,
            'contentSelector': self.content_selector,
            'buttonRules': [rule.to_dict() for rule in self.button_rules],
        }


def decimals_count(number: float) -> int:
    """
    Decimal places in the shortest repr of number, exponent form included

    Example:
        >>> decimals_count(0.25), decimals_count(1e-07), decimals_count(5)
        (2, 7, 0)
    """
    exponent = Decimal(repr(float(number))).normalize().as_tuple().exponent
    return max(0, -exponent)


@dataclass
class SliderState:
    """
    Per-instance slider state

    Invariant: after quantize(), minimum <= value <= maximum and
    (value - minimum) is a whole multiple of step. Ties round to the even
    multiple (Python's round()).

    Attributes:
        minimum: Lower bound
        maximum: Upper bound (raised to minimum when below it)
        step: Grid spacing (non-positive values fall back to 1)
        value: Current value
        dragging: True between pointer-down on the handle and pointer-up
    """
    minimum: float = 0
    maximum: float = 100
    step: float = 1
    value: float = 0
    dragging: bool = False

    def __post_init__(self) -> None:
        if self.step <= 0:
            self.step = 1
        if self.maximum < self.minimum:
            self.maximum = self.minimum
        self.value = self.quantize(self.value)

    def _precision(self) -> int:
        """Decimal places that hold every grid point (min + k * step)"""
        return max(decimals_count(self.step), decimals_count(self.minimum))

    def quantize(self, raw: float) -> float:
        """Round raw to the nearest step on the grid, clamped to the range"""
        max_steps = math.floor((self.maximum - self.minimum) / self.step + 1e-9)
        steps = round((raw - self.minimum) / self.step)
        steps = min(max(steps, 0), max_steps)
        return round(self.minimum + steps * self.step, self._precision())

    def clamp(self, raw: float) -> float:
        return min(max(raw, self.minimum), self.maximum)

    def fraction(self) -> float:
        """Handle position / fill width as a 0..1 fraction of the rail"""
        span = self.maximum - self.minimum
        if span == 0:
            return 0.0
        return (self.value - self.minimum) / span

    def value_fromPosition(self, x: float, width: float) -> float:
        """Map a horizontal offset on a rail of the given width to a value"""
        if width <= 0:
            return self.value
        ratio = min(max(x / width, 0.0), 1.0)
        return self.quantize(self.minimum + ratio * (self.maximum - self.minimum))

    def drag_start(self) -> None:
        self.dragging = True

    def drag_move(self, x: float, width: float) -> float:
        if self.dragging:
            self.value = self.value_fromPosition(x, width)
        return self.value

    def drag_end(self) -> None:
        self.dragging = False

    def rail_click(self, x: float, width: float) -> float:
        """Jump straight to the clicked position"""
        self.value = self.value_fromPosition(x, width)
        return self.value

    def key_press(self, key: str) -> float:
        """Arrow keys move one step, Home/End jump to an extreme"""
        if key in ('ArrowRight', 'ArrowUp'):
            self.value = self.quantize(self.value + self.step)
        elif key in ('ArrowLeft', 'ArrowDown'):
            self.value = self.quantize(self.value - self.step)
        elif key == 'Home':
            self.value = self.quantize(self.minimum)
        elif key == 'End':
            self.value = self.quantize(self.maximum)
        return self.value

    def readout_input(self, text: str) -> float:
        """Live update from the numeric readout (clamped, not yet quantized)"""
        try:
            self.value = self.clamp(float(text))
        except ValueError:
            pass
        return self.value

    def readout_commit(self) -> float:
        """Blur or Enter on the readout snaps back onto the grid"""
        self.value = self.quantize(self.value)
        return self.value


@dataclass
class SelectBox:
    """One custom dropdown instance"""
    name: str
    options: List[Tuple[str, str]] = field(default_factory=list)
    open: bool = False
    value: Optional[str] = None
    label: str = ""


class SelectBoxGroup:
    """
    Open/closed state of every custom dropdown on a page

    Opening one dropdown closes all others first, so at most one is open.
    An open dropdown closes on any click outside its subtree.
    """

    def __init__(self) -> None:
        self.boxes: Dict[str, SelectBox] = {}

    def add(self, name: str, options: Optional[List[Tuple[str, str]]] = None) -> SelectBox:
        box = SelectBox(name=name, options=list(options or []))
        if box.options:
            box.value, box.label = box.options[0]
        self.boxes[name] = box
        return box

    def open(self, name: str) -> None:
        for other in self.boxes.values():
            other.open = False
        self.boxes[name].open = True

    def close(self, name: str) -> None:
        self.boxes[name].open = False

    def toggle(self, name: str) -> None:
        if self.boxes[name].open:
            self.close(name)
        else:
            self.open(name)

    def outside_click(self) -> None:
        for box in self.boxes.values():
            box.open = False

    def select(self, name: str, value: str) -> List[str]:
        """
        Choose an option: update label and value, close the dropdown

        Returns:
            Events emitted, in order: the generic selection event and the
            DOM change event.
        """
        box = self.boxes[name]
        for option_value, option_label in box.options:
            if option_value == value:
                box.value = option_value
                box.label = option_label
                break
        else:
            raise KeyError(f"Dropdown '{name}' has no option '{value}'")
        box.open = False
        return ['select', 'change']

    def open_names(self) -> List[str]:
        return [name for name, box in self.boxes.items() if box.open]

"""
Component rule and attribute rewrite models

Defines the static RodiX component table (custom tag -> standard tag) and the
attribute spelling table used by every rewrite pass. Both tables are loaded
once at import and never mutated.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Dict, Optional, Tuple


class StructuralKind(Enum):
    """
    How a custom component maps onto standard markup

    DIRECT components are a plain tag rename; every other kind needs a
    structural rule in the tag rewriter.
    """
    DIRECT = "direct"                 # <XDiv> -> <div>
    CLICKABLE = "clickable"           # <XButton text=".."> -> <button>..</button>
    WRAPPED_INPUT = "wrapped-input"   # <XCheckBox> -> <label><input>..</label>
    RANGE_INPUT = "range-input"       # <XSlider> -> <input type="range">
    TEXT_INPUT = "text-input"         # <XInput> -> <input> + visibility class
    OPTION_LIST = "option-list"       # <XSelectBox> -> <select>
    OPTION = "option"                 # <XOption label=".."> -> <option>..</option>


@dataclass(frozen=True)
class ComponentRule:
    """
    Mapping of one custom tag to its standard markup shape

    Attributes:
        source_tag: Custom tag name, lowercase as the HTML parser reports it
        target_tag: Standard tag name emitted in its place
        kind: Structural rule applied by the tag rewriter
        input_type: Native input type for wrapped/range inputs
    """
    source_tag: str
    target_tag: str
    kind: StructuralKind
    input_type: Optional[str] = None

    @property
    def special_is(self) -> bool:
        """True if the rule is resolved before the generic rename pass"""
        return self.kind is not StructuralKind.DIRECT


COMPONENT_RULES: Tuple[ComponentRule, ...] = (
    # Basic components
    ComponentRule('xtable', 'table', StructuralKind.DIRECT),
    ComponentRule('xrow', 'tr', StructuralKind.DIRECT),
    ComponentRule('xcell', 'td', StructuralKind.DIRECT),
    ComponentRule('xinput', 'input', StructuralKind.TEXT_INPUT),
    ComponentRule('xbutton', 'button', StructuralKind.CLICKABLE),
    ComponentRule('xlabel', 'label', StructuralKind.DIRECT),
    ComponentRule('xspan', 'span', StructuralKind.DIRECT),
    ComponentRule('xdiv', 'div', StructuralKind.DIRECT),
    ComponentRule('ximage', 'img', StructuralKind.DIRECT),

    # Form components
    ComponentRule('xradio', 'input', StructuralKind.WRAPPED_INPUT, input_type='radio'),
    ComponentRule('xcheckbox', 'input', StructuralKind.WRAPPED_INPUT, input_type='checkbox'),
    ComponentRule('xslider', 'input', StructuralKind.RANGE_INPUT, input_type='range'),
    ComponentRule('xselectbox', 'select', StructuralKind.OPTION_LIST),
    ComponentRule('xoption', 'option', StructuralKind.OPTION),

    # Composite components
    ComponentRule('xtablelist', 'div', StructuralKind.DIRECT),
    ComponentRule('xpaginate', 'div', StructuralKind.DIRECT),
)

COMPONENT_MAP: Dict[str, ComponentRule] = {rule.source_tag: rule for rule in COMPONENT_RULES}


def rule_get(tag_name: str) -> Optional[ComponentRule]:
    """Look up the component rule for a (case-insensitive) tag name"""
    return COMPONENT_MAP.get(tag_name.lower())


@dataclass(frozen=True)
class AttributeRewrite:
    """
    One attribute spelling rewrite

    Attributes:
        source: Custom attribute name, lowercase
        target: Standard or data-* attribute name
        value: Fixed replacement value, or None to keep the original value
    """
    source: str
    target: str
    value: Optional[str] = None


ATTRIBUTE_REWRITES: Tuple[AttributeRewrite, ...] = (
    AttributeRewrite('classname', 'class'),
    AttributeRewrite('iscolumnheader', 'data-column-header'),
    AttributeRewrite('isheader', 'data-header'),
    AttributeRewrite('htmlfor', 'for'),
    AttributeRewrite('searchmode', 'data-search-mode'),
    AttributeRewrite('useaddbutton', 'data-use-add-button'),
    AttributeRewrite('usedeletebutton', 'data-use-delete-button'),
    AttributeRewrite('selected', 'selected', value='selected'),
)

ATTRIBUTE_MAP: Dict[str, AttributeRewrite] = {rw.source: rw for rw in ATTRIBUTE_REWRITES}

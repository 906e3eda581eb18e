"""
Attribute normalizer

Pure functions over attribute maps (name -> value) as the HTML parser reports
them: names are already lowercase, valueless attributes carry "".

Every rewrite pass funnels its attributes through attributes_rewrite(), which
applies the fixed spelling table from models.components and promotes an
unconsumed `type` attribute into a `btn <type>` class prefix.
"""

from typing import Any, Dict, Iterable, Mapping, Optional

from ..models.components import ATTRIBUTE_MAP

_FALSE_VALUES = {"false", "0", "no", "off"}

# Residual spellings renamed by the cleanup pass
_RESIDUAL_RENAMES = {
    'classname': 'class',
    'iscolumnheader': 'data-column-header',
}


def value_normalize(value: Any) -> str:
    """Attribute value as a plain string (None -> "", lists joined by spaces)"""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(str(v) for v in value)
    return str(value)


def class_merge(*parts: Optional[str]) -> str:
    """
    Join class fragments into one class attribute value

    Empty fragments are dropped and repeated class names keep their first
    position.

    Example:
        >>> class_merge("btn primary", None, "", "primary extra")
        'btn primary extra'
    """
    seen: Dict[str, None] = {}
    for part in parts:
        if not part:
            continue
        for name in part.split():
            seen.setdefault(name, None)
    return " ".join(seen)


def class_join(*parts: Optional[str]) -> str:
    """
    Join class fragments in order, keeping every name as written

    Example:
        >>> class_join("btn primary", None, "primary extra")
        'btn primary primary extra'
    """
    return " ".join(name for part in parts if part for name in part.split())


def visible_parse(value: Optional[str]) -> bool:
    """
    Resolve a `visible` attribute

    Absent means visible; "false", "0", "no" and "off" (any case) mean hidden.
    """
    if value is None:
        return True
    return value.strip().lower() not in _FALSE_VALUES


def attributes_rewrite(attrs: Mapping[str, Any], promote_type: bool = True) -> Dict[str, str]:
    """
    Rewrite custom attribute spellings to standard ones

    Args:
        attrs: Attribute map of the source element
        promote_type: Fold a surviving `type` attribute into a
                      `btn <type>` class prefix (callers that consume `type`
                      themselves remove it first or pass False)

    Returns:
        New attribute map in source order

    Example:
        >>> attributes_rewrite({"classname": "wide", "iscolumnheader": "true"})
        {'class': 'wide', 'data-column-header': 'true'}
        >>> attributes_rewrite({"type": "primary", "classname": "wide"})
        {'class': 'btn primary wide'}
    """
    result: Dict[str, str] = {}

    for name, raw_value in attrs.items():
        key = name.lower()
        value = value_normalize(raw_value)

        rewrite = ATTRIBUTE_MAP.get(key)
        if rewrite is not None:
            key = rewrite.target
            if rewrite.value is not None:
                value = rewrite.value

        if key == 'class' and 'class' in result:
            value = class_merge(result['class'], value)
        result[key] = value

    if promote_type and 'type' in result:
        type_value = result.pop('type').strip()
        if type_value:
            result['class'] = class_merge(f"btn {type_value}", result.get('class'))

    return result


def attributes_without(attrs: Mapping[str, Any], names: Iterable[str]) -> Dict[str, Any]:
    """Copy of attrs minus the given (lowercase) names"""
    dropped = {name.lower() for name in names}
    return {name: value for name, value in attrs.items() if name.lower() not in dropped}


def attributes_finalize(attrs: Mapping[str, Any]) -> Dict[str, str]:
    """
    Cleanup-pass rename of residual custom spellings on standard tags

    Only `className` and `isColumnHeader` are handled here; everything else
    was settled by the pass that rewrote the element.
    """
    result: Dict[str, str] = {}
    for name, raw_value in attrs.items():
        key = _RESIDUAL_RENAMES.get(name.lower(), name)
        value = value_normalize(raw_value)
        if key == 'class' and 'class' in result:
            value = class_merge(result['class'], value)
        result[key] = value
    return result

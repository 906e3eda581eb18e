"""
Tag rewriter for RodiX components

Each custom component element in a parsed document is replaced by its
standard markup shape. The shape is chosen by the component's
StructuralKind; handlers are registered per kind, the same way directive
handlers are registered by name.

The rewriter works on a BeautifulSoup tree; it never re-parses text, so
nested components are rewritten independently of each other.
"""

from typing import Callable, Dict, Iterable, List, Optional

from bs4 import BeautifulSoup, NavigableString, Tag

from ..models.components import COMPONENT_RULES, ComponentRule, StructuralKind, rule_get
from ..models.emulator import EmulatorConfig
from ..models.stats import ConversionReport
from .attributes import (
    attributes_rewrite,
    attributes_without,
    class_join,
    class_merge,
    value_normalize,
    visible_parse,
)
from .log import LOG

Handler = Callable[[Tag, ComponentRule], Tag]

_CONFIG = EmulatorConfig()


def visibilityClass_make(component: str, visible: bool) -> str:
    """
    Component-namespaced visibility class

    Example:
        >>> visibilityClass_make("xbutton", False)
        'xbutton-visible-hide'
    """
    return f"{component}-visible-{'show' if visible else 'hide'}"


def whitespace_is(node) -> bool:
    """True for text nodes holding only whitespace"""
    return isinstance(node, NavigableString) and not node.strip()


class TagRewriter:
    """
    Rewrites custom component elements of one parsed document

    Attributes:
        soup: Document tree being rewritten in place
        report: Substitution counts for the current conversion
        handlers: StructuralKind -> rewrite function
    """

    def __init__(self, soup: BeautifulSoup, report: Optional[ConversionReport] = None) -> None:
        self.soup = soup
        self.report = report if report is not None else ConversionReport()
        self.handlers: Dict[StructuralKind, Handler] = {}
        self.handlers_register()

    def handlers_register(self) -> None:
        """Register one handler per structural kind"""
        self.handlers[StructuralKind.DIRECT] = self.direct_rewrite
        self.handlers[StructuralKind.CLICKABLE] = self.clickable_rewrite
        self.handlers[StructuralKind.WRAPPED_INPUT] = self.wrappedInput_rewrite
        self.handlers[StructuralKind.RANGE_INPUT] = self.rangeInput_rewrite
        self.handlers[StructuralKind.TEXT_INPUT] = self.textInput_rewrite
        self.handlers[StructuralKind.OPTION_LIST] = self.optionList_rewrite
        self.handlers[StructuralKind.OPTION] = self.option_rewrite

    def pass_run(self, kinds: Iterable[StructuralKind]) -> int:
        """
        Rewrite every element whose component kind is in kinds

        Elements are visited in document order. Elements that an earlier
        rewrite in the same pass already consumed (detached from the tree)
        are skipped.

        Returns:
            Number of elements rewritten
        """
        wanted = set(kinds)
        names = [rule.source_tag for rule in COMPONENT_RULES if rule.kind in wanted]
        if not names:
            return 0

        count = 0
        for tag in self.soup.find_all(names):
            if not self.attached_is(tag):
                continue
            if self.rewrite(tag) is not None:
                count += 1
        return count

    def rewrite(self, tag: Tag) -> Optional[Tag]:
        """
        Rewrite a single custom element

        Returns:
            The replacement element, or None if tag is not a known component
        """
        rule = rule_get(tag.name)
        if rule is None:
            return None

        handler = self.handlers[rule.kind]
        replacement = handler(tag, rule)
        self.report.substitution_count(rule.source_tag)
        LOG(f"<{tag.name}> -> <{replacement.name}> ({rule.kind.value})", level=3)
        return replacement

    def attached_is(self, tag: Tag) -> bool:
        """True if tag is still part of this document's tree"""
        node = tag
        while node.parent is not None:
            node = node.parent
        return node is self.soup

    def element_create(self, name: str, attrs: Optional[Dict[str, str]] = None) -> Tag:
        """New element built by the document's tree builder (void tags stay void)"""
        return self.soup.new_tag(name, attrs=attrs or {})

    def element_replace(self, old: Tag, new: Tag, keep_children: bool = True) -> Tag:
        """
        Put new in place of old

        Children of old move into new; if new is a void element they move
        to just after it instead. Whitespace-only text is dropped in the void
        case. With keep_children=False the old children are discarded.
        """
        children: List = list(old.contents)
        old.replace_with(new)

        if not keep_children:
            for child in children:
                child.extract()
            old.decompose()
            return new

        if new.can_be_empty_element:
            anchor = new
            for child in children:
                child.extract()
                if whitespace_is(child):
                    continue
                anchor.insert_after(child)
                anchor = child
        else:
            for child in children:
                new.append(child.extract())
        return new

    def classAttrs_pop(self, attrs: Dict[str, object]) -> str:
        """Remove and merge the user's class spellings (class, className)"""
        return class_join(
            value_normalize(attrs.pop('class', None)),
            value_normalize(attrs.pop('classname', None)),
        )

    def direct_rewrite(self, tag: Tag, rule: ComponentRule) -> Tag:
        """Plain tag rename; attributes go through the generic rewrite"""
        new = self.element_create(rule.target_tag, attributes_rewrite(tag.attrs))
        return self.element_replace(tag, new)

    def clickable_rewrite(self, tag: Tag, rule: ComponentRule) -> Tag:
        """
        XButton -> <button>

        The `text` attribute becomes the content. The class list is
        `btn <type|default> [small] <visibility> [user classes]` and
        data-visible mirrors the resolved visibility.
        """
        attrs = dict(tag.attrs)
        text = attrs.pop('text', None)
        button_type = value_normalize(attrs.pop('type', None)).strip() or 'default'
        size = value_normalize(attrs.pop('size', None)).strip().lower()
        visible = visible_parse(
            None if 'visible' not in attrs else value_normalize(attrs.pop('visible'))
        )
        user_class = self.classAttrs_pop(attrs)

        classes = class_join(
            'btn',
            button_type,
            'small' if size == 'small' else None,
            visibilityClass_make(rule.source_tag, visible),
            user_class,
        )
        new_attrs = {'class': classes}
        new_attrs.update(attributes_rewrite(attrs, promote_type=False))
        new_attrs['data-visible'] = 'true' if visible else 'false'

        new = self.element_create(rule.target_tag, new_attrs)
        if text is None:
            return self.element_replace(tag, new)

        self.element_replace(tag, new, keep_children=False)
        new.string = value_normalize(text)
        return new

    def textInput_rewrite(self, tag: Tag, rule: ComponentRule) -> Tag:
        """XInput -> <input> with the visibility class and data-visible"""
        attrs = dict(tag.attrs)
        visible = visible_parse(
            None if 'visible' not in attrs else value_normalize(attrs.pop('visible'))
        )
        user_class = self.classAttrs_pop(attrs)

        new_attrs = {'class': class_merge(visibilityClass_make(rule.source_tag, visible), user_class)}
        new_attrs.update(attributes_rewrite(attrs, promote_type=False))
        new_attrs['data-visible'] = 'true' if visible else 'false'

        new = self.element_create(rule.target_tag, new_attrs)
        return self.element_replace(tag, new)

    def wrappedInput_rewrite(self, tag: Tag, rule: ComponentRule) -> Tag:
        """
        XCheckBox / XRadio -> label-wrapped hidden native input

        Output shape:
            <label class="xcheckbox">
              <input type="checkbox" ...original attributes... hidden="">
              <span class="checkbox-icon"></span>
              <span class="checkbox-text">original inner text</span>
            </label>
        """
        input_type = rule.input_type or 'checkbox'
        text = tag.get_text()
        attrs = attributes_rewrite(attributes_without(tag.attrs, ['type']), promote_type=False)

        input_attrs = {'type': input_type}
        input_attrs.update(attrs)
        input_attrs['hidden'] = ''

        label = self.element_create('label', {
            'class': class_merge(
                rule.source_tag,
                _CONFIG.disabled_class if 'disabled' in attrs else None,
            ),
        })
        native = self.element_create(rule.target_tag, input_attrs)
        icon = self.element_create('span', {
            'class': class_merge(
                f'{input_type}-icon',
                _CONFIG.checked_class if 'checked' in attrs else None,
            ),
        })
        caption = self.element_create('span', {'class': f'{input_type}-text'})
        caption.string = text

        label.append(native)
        label.append(icon)
        label.append(caption)
        return self.element_replace(tag, label, keep_children=False)

    def rangeInput_rewrite(self, tag: Tag, rule: ComponentRule) -> Tag:
        """XSlider -> <input type="range">"""
        attrs = attributes_rewrite(attributes_without(tag.attrs, ['type']), promote_type=False)
        new_attrs = {'type': rule.input_type or 'range'}
        new_attrs.update(attrs)
        new = self.element_create(rule.target_tag, new_attrs)
        return self.element_replace(tag, new)

    def optionList_rewrite(self, tag: Tag, rule: ComponentRule) -> Tag:
        """XSelectBox -> <select>; its XOption children are rewritten with it"""
        new = self.element_create(rule.target_tag, attributes_rewrite(tag.attrs))
        self.element_replace(tag, new)
        for option in new.find_all('xoption'):
            self.rewrite(option)
        return new

    def option_rewrite(self, tag: Tag, rule: ComponentRule) -> Tag:
        """XOption -> <option> whose text is the `label` attribute ("" if absent)"""
        attrs = dict(tag.attrs)
        label = value_normalize(attrs.pop('label', None))
        new = self.element_create(rule.target_tag, attributes_rewrite(attrs))
        self.element_replace(tag, new, keep_children=False)
        new.string = label
        return new

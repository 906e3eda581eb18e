"""
RodiX document converter

Transforms a RodiX component document into standard HTML.

The conversion runs in a fixed order; later passes rely on the shape the
earlier ones leave behind:

1. Special components (buttons, toggles, slider, text input, select box)
2. Generic rename of the remaining custom tags
3. Cleanup (void inputs, lone buttons in table rows, residual attributes)
4. Injection of the supplementary layout stylesheet

Example:
    >>> converter = RodiConverter()
    >>> converter.convert('<XDiv className="box">hi</XDiv>')  # doctest: +SKIP
    '<style id="rodix-layout-styles">...</style>\\n<div class="box">hi</div>'
"""

import traceback
from pathlib import Path
from typing import Any, Dict, Optional

from bs4 import BeautifulSoup, Tag

from ..models.components import StructuralKind
from ..models.stats import ConversionReport, ConversionStats
from .attributes import attributes_finalize
from .log import LOG
from .rewriter import TagRewriter, whitespace_is

ASSETS_DIR = Path(__file__).parent.parent / "assets"

# Order of the special-component pass
SPECIAL_KINDS = (
    StructuralKind.CLICKABLE,
    StructuralKind.WRAPPED_INPUT,
    StructuralKind.RANGE_INPUT,
    StructuralKind.TEXT_INPUT,
    StructuralKind.OPTION_LIST,
    StructuralKind.OPTION,
)

LONE_BUTTON_CELL_ATTRS = {'colspan': '2', 'style': 'text-align: center; padding: 4px;'}


class ConversionError(Exception):
    """Raised when a rewrite pass fails; the failure is already recorded in the stats"""
    pass


def layoutCss_load() -> str:
    """Read the packaged supplementary layout stylesheet"""
    return (ASSETS_DIR / "css" / "rodix-layout.css").read_text(encoding='utf-8')


class RodiConverter:
    """
    Converts RodiX documents to standard HTML

    Attributes:
        stats: Conversion statistics, shared with whoever owns the converter
        layout_css: Stylesheet injected by the final pass
        layout_style_id: Id of the injected <style>; a document that already
                         has it is not styled twice
        last_report: Substitution counts of the most recent successful call
    """

    def __init__(
        self,
        stats: Optional[ConversionStats] = None,
        layout_css: Optional[str] = None,
        layout_style_id: Optional[str] = None,
    ) -> None:
        from ..config import appsettings

        self.stats = stats if stats is not None else ConversionStats()
        self.layout_css = layout_css if layout_css is not None else layoutCss_load()
        self.layout_style_id = layout_style_id or appsettings.layout_style_id
        self.last_report = ConversionReport()

    def convert(self, document: str) -> str:
        """
        Convert a RodiX document

        Args:
            document: Raw document text

        Returns:
            Standard HTML

        Raises:
            ConversionError: A rewrite pass raised; the error is recorded in
                             stats (message, stack, timestamp, pass) first
        """
        self.stats.conversion_count()
        report = ConversionReport()
        stage = "parse"

        try:
            soup = BeautifulSoup(document, "html.parser", multi_valued_attributes=None)
            rewriter = TagRewriter(soup, report)

            stage = "special-components"
            for kind in SPECIAL_KINDS:
                rewriter.pass_run([kind])

            stage = "generic-rename"
            rewriter.pass_run([StructuralKind.DIRECT])

            stage = "cleanup"
            self.inputs_collapse(soup)
            self.tableButtons_wrap(soup)
            self.attributes_cleanup(soup)

            stage = "style-injection"
            self.styles_inject(soup)

            result = str(soup)
        except Exception as e:
            self.stats.error_record(
                str(e),
                stack=traceback.format_exc(),
                stage=stage,
                documentLength=len(document),
            )
            LOG(f"Conversion failed during {stage}: {e}", severity="ERROR")
            raise ConversionError(f"Conversion failed during {stage}: {e}") from e

        self.last_report = report
        LOG(f"Converted document: {report.total} custom tags rewritten", level=2)
        return result

    def inputs_collapse(self, soup: BeautifulSoup) -> None:
        """Inputs are void: anything parsed inside one moves to just after it"""
        for native in soup.find_all('input'):
            if not native.contents:
                continue
            anchor = native
            for child in list(native.contents):
                child.extract()
                if whitespace_is(child):
                    continue
                anchor.insert_after(child)
                anchor = child

    def tableButtons_wrap(self, soup: BeautifulSoup) -> None:
        """A row whose only content is one button gets it wrapped in a spanning cell"""
        for row in soup.find_all('tr'):
            significant = [child for child in row.contents if not whitespace_is(child)]
            if len(significant) != 1:
                continue
            button = significant[0]
            if not isinstance(button, Tag) or button.name != 'button':
                continue
            button.wrap(soup.new_tag('td', attrs=dict(LONE_BUTTON_CELL_ATTRS)))

    def attributes_cleanup(self, soup: BeautifulSoup) -> None:
        """Rename residual custom attribute spellings on every element"""
        for element in soup.find_all(True):
            if any(name in ('classname', 'iscolumnheader') for name in element.attrs):
                element.attrs = attributes_finalize(element.attrs)

    def styles_inject(self, soup: BeautifulSoup) -> None:
        """Add the layout stylesheet to <head>, or at the very top without one"""
        if soup.find('style', id=self.layout_style_id) is not None:
            return

        style = soup.new_tag('style', attrs={'id': self.layout_style_id})
        style.string = f"\n{self.layout_css}\n"

        head = soup.find('head')
        if head is not None:
            head.append(style)
        else:
            soup.insert(0, style)
            style.insert_after("\n")

    def stats_get(self) -> Dict[str, Any]:
        return self.stats.to_dict()

    def stats_reset(self) -> None:
        self.stats.reset()
        LOG("Conversion statistics reset", level=2)

"""
Stylesheet resolver

Compiles every catalog entry to CSS, applies the per-component fixups and
concatenates the results, each block under a `/* name - file */` header.

Pipeline per entry:
    source .scss --libsass--> CSS --fixups--> cached text
                 +-(CompileError)---> textual fallback

An entry is recompiled only when its source mtime moves past the one
recorded at the last compile. A failing entry is reported in the result's
error list; the rest of the catalog still loads.
"""

import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import sass

from ..models.styles import StyleCatalogEntry, StyleCategory, StyleLoadError, StyleLoadResult
from .catalog import StyleCatalog
from .log import LOG

# Values used when a source cannot be compiled and its variables are unresolved
FALLBACK_VARIABLES: Dict[str, str] = {
    '$primary-color': '#59d5ef',
    '$dark-primary-color': '#428bca',
    '$danger-color': '#fe6464',
    '$point-color': '#00c0c7',
    '$gray-color': '#cacaca',
    '$lite-gray-color': '#ddd',
    '$disable-color': '#727272',
    '$disable-bg-color': '#b3b8bd',
    '$dark-navy-color': '#20272D',
    '$border-radius-default': '5px',
    '$white': '#ffffff',
    '$black': '#000000',
}

LINE_COMMENT = re.compile(r"(?<![:\w])//.*$", re.MULTILINE)
IMPORT_RULE = re.compile(r"""@import\s+['"][^;]*?['"]\s*;?""")
MIXIN_START = re.compile(r"@mixin\b[^{;]*\{")
INCLUDE_RULE = re.compile(r"@include\s+[^;{]+;")
EXTEND_RULE = re.compile(r"@extend\s+[^;]+;")
VARIABLE_DECLARATION = re.compile(r"^[ \t]*\$[\w-]+\s*:[^;]*;[ \t]*\n?", re.MULTILINE)

VISIBILITY_SELECTOR = re.compile(r"\.visible-(show|hide)(?![\w-])")
TEXT_ALIGN_DECLARATION = re.compile(r"[ \t]*text-align\s*:[^;}]*;?[ \t]*\n?")
DISPLAY_FLEX = re.compile(r"display\s*:\s*flex(?![\w-])(?!\s*!important)")

BUTTON_LINE_HEIGHT_OVERRIDE = ".btn {\n  line-height: inherit !important;\n}"


class StyleSourceNotFoundError(Exception):
    """Raised when a catalog entry's source file does not exist"""
    pass


def blocks_strip(css: str, start: re.Pattern) -> str:
    """Remove every block opened by a start match, nested braces included"""
    result = []
    position = 0
    while True:
        match = start.search(css, position)
        if match is None:
            break
        result.append(css[position:match.start()])
        depth = 1
        index = match.end()
        while index < len(css) and depth:
            if css[index] == '{':
                depth += 1
            elif css[index] == '}':
                depth -= 1
            index += 1
        position = index
    result.append(css[position:])
    return "".join(result)


def fallback_convert(scss: str) -> str:
    """
    Best-effort plain CSS from SCSS source, without a compiler

    Strips line comments, @import, @mixin blocks, @include and @extend,
    drops variable declarations and substitutes the known variables.

    Example:
        >>> fallback_convert("// note\\n.a { color: $primary-color; }")
        '.a { color: #59d5ef; }'
    """
    css = LINE_COMMENT.sub('', scss)
    css = IMPORT_RULE.sub('', css)
    css = blocks_strip(css, MIXIN_START)
    css = INCLUDE_RULE.sub('', css)
    css = EXTEND_RULE.sub('', css)
    css = VARIABLE_DECLARATION.sub('', css)
    for variable, value in FALLBACK_VARIABLES.items():
        css = re.sub(re.escape(variable) + r"(?![\w-])", value, css)
    return css.strip()


def visibility_namespace(name: str, css: str) -> str:
    """`.visible-show` -> `.<name>-visible-show` (and hide) for a wrapper component"""
    prefix = name.lower()
    return VISIBILITY_SELECTOR.sub(lambda m: f".{prefix}-visible-{m.group(1)}", css)


def button_fixup(css: str) -> str:
    """Raise the visibility selectors to `button.` and win the shared .btn line-height"""
    css = re.sub(r"(?<![\w-])\.xbutton-visible-(show|hide)(?![\w-])", r"button.xbutton-visible-\1", css)
    return f"{css}\n\n{BUTTON_LINE_HEIGHT_OVERRIDE}"


def label_fixup(css: str) -> str:
    return TEXT_ALIGN_DECLARATION.sub('', css)


def selectBox_fixup(css: str) -> str:
    return DISPLAY_FLEX.sub('display: flex !important', css)


# Component-specific fixups, run after the wrapper namespacing
FIXUPS: Dict[str, Callable[[str], str]] = {
    'XButton': button_fixup,
    'XLabel': label_fixup,
    'XSelectBox': selectBox_fixup,
}


class StyleResolver:
    """
    Loads the stylesheet catalog into one CSS text

    Attributes:
        catalog: Entries to load; their compile cache lives on the entries
        extra_load_paths: Include directories added to the catalog's own
        last_result: Result of the most recent styles_loadAll()
    """

    def __init__(self, catalog: StyleCatalog, extra_load_paths: Optional[List[Path]] = None) -> None:
        self.catalog = catalog
        self.extra_load_paths = list(extra_load_paths or [])
        self.last_result: Optional[StyleLoadResult] = None

    def includePaths_get(self, entry: StyleCatalogEntry) -> List[str]:
        paths = [*self.catalog.load_paths, entry.source_path.parent, *self.extra_load_paths]
        return [str(path) for path in paths]

    def scss_compile(self, entry: StyleCatalogEntry) -> str:
        """Compile an entry with libsass, falling back to the textual conversion"""
        try:
            return sass.compile(
                filename=str(entry.source_path),
                include_paths=self.includePaths_get(entry),
                output_style='expanded',
            )
        except sass.CompileError as e:
            first_line = str(e).strip().splitlines()[0] if str(e).strip() else "compile error"
            LOG(f"{entry.name}: compile failed, using fallback conversion ({first_line})", severity="WARNING")
            return fallback_convert(entry.source_path.read_text(encoding='utf-8'))

    def fixups_apply(self, entry: StyleCatalogEntry, css: str) -> str:
        if entry.category == StyleCategory.RODIX:
            css = visibility_namespace(entry.name, css)
        fixup = FIXUPS.get(entry.name)
        if fixup is not None:
            css = fixup(css)
        return css

    def entry_load(self, entry: StyleCatalogEntry) -> str:
        """
        Compiled, fixed-up block for one entry, from cache when the source is unchanged

        Raises:
            StyleSourceNotFoundError: If the source file is missing
        """
        if not entry.source_path.exists():
            raise StyleSourceNotFoundError(f"Style source not found: {entry.source_path}")

        mtime = entry.source_path.stat().st_mtime
        if entry.stale_is(mtime):
            css = self.fixups_apply(entry, self.scss_compile(entry))
            entry.compiled_text = css
            entry.last_compiled_at = mtime
            LOG(f"Compiled {entry.name}: {entry.source_path.name}", level=2)
        else:
            LOG(f"Reused cached {entry.name}", level=3)

        return f"/* {entry.name} - {entry.source_path.name} */\n{entry.compiled_text}"

    def styles_loadAll(self) -> StyleLoadResult:
        """Load every catalog entry; failures are collected, never raised"""
        blocks: List[str] = []
        counts = {category: 0 for category in StyleCategory}
        errors: List[StyleLoadError] = []

        for category in StyleCategory:
            for entry in self.catalog.entries_byCategory(category):
                try:
                    blocks.append(self.entry_load(entry))
                    counts[category] += 1
                except Exception as e:
                    errors.append(StyleLoadError(name=entry.name, error=str(e)))
                    LOG(f"{entry.name}: {e}", severity="WARNING")

        result = StyleLoadResult(text="\n\n".join(blocks), counts_by_category=counts, errors=errors)
        LOG(
            "Styles loaded: " + ", ".join(f"{c.value} {n}" for c, n in counts.items())
            + f" ({len(errors)} failed)",
            level=1,
        )
        self.last_result = result
        return result

    def styles_reloadChanged(self) -> List[str]:
        """
        Recompile the entries whose source changed since their last compile

        Returns:
            Names of the recompiled entries
        """
        reloaded: List[str] = []
        for entry in self.catalog.entries.values():
            if not entry.source_path.exists():
                continue
            if not entry.stale_is(entry.source_path.stat().st_mtime):
                continue
            try:
                self.entry_load(entry)
                reloaded.append(entry.name)
            except Exception as e:
                LOG(f"Style reload failed ({entry.name}): {e}", severity="ERROR")
        if reloaded:
            LOG(f"Reloaded styles: {', '.join(reloaded)}", level=1)
        return reloaded

    def stats_get(self) -> Dict[str, Any]:
        counts = self.catalog.counts_get()
        loaded = [entry.name for entry in self.catalog.entries.values() if entry.compiled_text is not None]
        return {
            'totalGlobal': counts[StyleCategory.GLOBAL.value],
            'totalAtoms': counts[StyleCategory.ATOMS.value],
            'totalRodiX': counts[StyleCategory.RODIX.value],
            'totalComponents': len(self.catalog),
            'loadedComponents': len(loaded),
            'components': loaded,
        }

"""
Stylesheet catalog models

Types shared by the catalog loader and the stylesheet resolver.
"""

from enum import Enum
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class StyleCategory(Enum):
    """
    Catalog sections, in load order

    Global resets load first, then the base (atomic) component styles, then
    the RodiX wrapper styles that layer visibility/state classes on top.
    """
    GLOBAL = "global"
    ATOMS = "atoms"
    RODIX = "rodix"


@dataclass
class StyleCatalogEntry:
    """
    One named stylesheet source and its compile cache

    Attributes:
        name: Component name (e.g. "XButton", "reset")
        category: Catalog section the entry belongs to
        source_path: Absolute path of the .scss source
        last_compiled_at: Source mtime recorded at the last compile (None = never)
        compiled_text: Fixed-up CSS from the last compile
    """
    name: str
    category: StyleCategory
    source_path: Path
    last_compiled_at: Optional[float] = None
    compiled_text: Optional[str] = None

    def stale_is(self, mtime: float) -> bool:
        """True if the entry must be recompiled for a source with this mtime"""
        if self.compiled_text is None or self.last_compiled_at is None:
            return True
        return mtime > self.last_compiled_at


@dataclass
class StyleLoadError:
    """A catalog entry that could not be loaded"""
    name: str
    error: str

    def to_dict(self) -> Dict[str, str]:
        return {'componentName': self.name, 'error': self.error}


@dataclass
class StyleLoadResult:
    """
    Result of loading the whole catalog

    Attributes:
        text: Concatenated CSS, one commented block per loaded entry
        counts_by_category: Number of entries loaded per category
        errors: Entries that failed (the load itself never aborts)
    """
    text: str
    counts_by_category: Dict[StyleCategory, int] = field(default_factory=dict)
    errors: List[StyleLoadError] = field(default_factory=list)

    @property
    def loaded(self) -> int:
        return sum(self.counts_by_category.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            'loaded': self.loaded,
            'countsByCategory': {
                category.value: count for category, count in self.counts_by_category.items()
            },
            'errors': [error.to_dict() for error in self.errors],
        }

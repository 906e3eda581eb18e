"""
Style catalog loader.

A catalog is a YAML document naming every stylesheet source the preview
page needs, grouped in three sections that load in order:
  - global: resets and shared base rules
  - atoms: base component styles
  - rodix: RodiX wrapper styles (visibility/state classes)

Paths are relative to a source root (the web service src/ directory).
An optional load_paths list adds include directories for the compiler.
"""

import yaml
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..models.styles import StyleCatalogEntry, StyleCategory

DEFAULT_CATALOG = Path(__file__).parent.parent / "assets" / "styles.yaml"


class CatalogError(Exception):
    """Raised when a catalog file is missing or malformed"""
    pass


class StyleCatalog:
    """
    Ordered collection of StyleCatalogEntry objects.

    Entries keep their compile cache, so a catalog instance should live as
    long as the resolver that uses it.
    """

    def __init__(self, root: Path, data: Dict[str, Any], source: Optional[Path] = None):
        """
        Build a catalog from parsed YAML data.

        Args:
            root: Directory catalog paths are relative to
            data: Parsed catalog mapping
            source: File the data came from (for messages only)

        Raises:
            CatalogError: If a section is not a name -> path mapping
        """
        self.root = Path(root)
        self.source = source
        self.entries: Dict[str, StyleCatalogEntry] = {}
        self.load_paths: List[Path] = [self.root / p for p in data.get('load_paths') or []]

        for category in StyleCategory:
            section = data.get(category.value) or {}
            if not isinstance(section, dict):
                raise CatalogError(
                    f"Catalog section '{category.value}' must map names to paths "
                    f"(in {source or 'catalog data'})"
                )
            for name, relpath in section.items():
                self.entries[str(name)] = StyleCatalogEntry(
                    name=str(name),
                    category=category,
                    source_path=self.root / str(relpath),
                )

    @classmethod
    def catalog_load(cls, root: Path, catalog_path: Optional[Path] = None) -> "StyleCatalog":
        """
        Load a catalog YAML file.

        Args:
            root: Directory catalog paths are relative to
            catalog_path: YAML file; the packaged default when None

        Raises:
            CatalogError: If the file doesn't exist or can't be parsed
        """
        path = Path(catalog_path) if catalog_path is not None else DEFAULT_CATALOG
        if not path.exists():
            raise CatalogError(f"Style catalog not found: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise CatalogError(f"Failed to parse style catalog {path}: {e}")

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise CatalogError(f"Style catalog {path} must be a mapping")
        return cls(root, data, source=path)

    def entries_byCategory(self, category: StyleCategory) -> List[StyleCatalogEntry]:
        """Entries of one section, in catalog order"""
        return [entry for entry in self.entries.values() if entry.category == category]

    def entry_get(self, name: str) -> Optional[StyleCatalogEntry]:
        return self.entries.get(name)

    def counts_get(self) -> Dict[str, int]:
        return {category.value: len(self.entries_byCategory(category)) for category in StyleCategory}

    def __len__(self) -> int:
        return len(self.entries)

    def __repr__(self) -> str:
        return f"StyleCatalog(root='{self.root}', entries={len(self.entries)})"

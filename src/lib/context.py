"""
Preview context

Owns everything a running preview shares between requests: conversion
statistics, the stylesheet compile cache, the current plugin extraction and
the source watcher. The server and the CLI both work through one instance;
nothing here is module-global.
"""

import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config.settings import AppSettings
from ..models.plugin import PluginExtraction
from ..models.stats import ConversionStats
from ..models.styles import StyleLoadResult
from .catalog import StyleCatalog
from .converter import RodiConverter
from .emulator import RuntimeEmulator
from .log import LOG
from .page import PageAssembler
from .plugin import PluginLoader
from .styles import StyleResolver
from .watcher import DOCUMENT, PLUGIN, STYLES, SourceWatcher


class DocumentNotFoundError(Exception):
    """Raised when the previewed document does not exist"""
    pass


class PreviewContext:
    """
    Shared state of one preview session

    Attributes:
        settings: Application settings the context was built from
        document_path: RodiX document being previewed
        stats: Conversion statistics (reset through stats_reset())
        converter: Document converter recording into stats
        catalog: Stylesheet catalog; entries hold the compile cache
        resolver: Stylesheet resolver over the catalog
        plugin_loader: Loader for the plugin directory, None without one
        extraction: Current plugin extraction (None: no plugin found)
        watcher: Source watcher, fed by watch_start()
    """

    def __init__(
        self,
        settings: AppSettings,
        document_path: Optional[Path] = None,
        plugin_dir: Optional[Path] = None,
        catalog_path: Optional[Path] = None,
        web_svc_dir: Optional[Path] = None,
    ) -> None:
        self.settings = settings
        self.document_path = document_path if document_path is not None else settings.htmlFile_path()

        self.stats = ConversionStats()
        self.converter = RodiConverter(stats=self.stats, layout_style_id=settings.layout_style_id)

        style_root = web_svc_dir if web_svc_dir is not None else settings.webSvcDir_resolve()
        self.catalog = StyleCatalog.catalog_load(style_root, catalog_path or settings.style_catalog)
        self.resolver = StyleResolver(self.catalog, extra_load_paths=[style_root])

        plugin_dir = plugin_dir if plugin_dir is not None else settings.plugin_dir
        self.plugin_loader = PluginLoader(plugin_dir) if plugin_dir is not None else None
        self.extraction: Optional[PluginExtraction] = None

        self.emulator = RuntimeEmulator()
        self.assembler = PageAssembler(poll_interval=settings.poll_interval)
        self.watcher = SourceWatcher()
        self.started_at = time.time()

    def plugin_reload(self) -> Optional[PluginExtraction]:
        """Re-run the plugin extraction from scratch"""
        if self.plugin_loader is None:
            self.extraction = None
            return None
        self.extraction = self.plugin_loader.load()
        return self.extraction

    def plugin_script(self) -> str:
        if self.plugin_loader is None:
            return ""
        return self.plugin_loader.synthesize(self.extraction)

    def document_read(self) -> str:
        """
        Raw text of the previewed document

        Raises:
            DocumentNotFoundError: If no document is configured or it is missing
        """
        if self.document_path is None:
            raise DocumentNotFoundError("No document configured")
        if not self.document_path.exists():
            raise DocumentNotFoundError(f"File not found: {self.document_path}")
        return self.document_path.read_text(encoding='utf-8')

    def document_convert(self) -> str:
        return self.converter.convert(self.document_read())

    def styles_load(self) -> StyleLoadResult:
        return self.resolver.styles_loadAll()

    def page_render(self, live: bool = True) -> str:
        """
        Full preview page for the current sources

        Raises:
            DocumentNotFoundError: If the document is missing
            ConversionError: If the conversion fails
        """
        converted = self.document_convert()
        styles = self.styles_load()
        return self.assembler.page_build(
            converted_html=converted,
            styles_text=styles.text,
            emulator_js=self.emulator.bundle(),
            plugin_js=self.plugin_script(),
            source_file=self.document_path,
            styles_loaded=styles.loaded,
            live=live,
            event_seq=self.watcher.seq,
        )

    def stats_reset(self) -> None:
        self.converter.stats_reset()

    def watch_start(self) -> None:
        """Point the watcher at the document, the style sources and the plugin files"""
        if self.document_path is not None:
            self.watcher.watch(DOCUMENT, [self.document_path])
        self.watcher.watch(STYLES, [entry.source_path for entry in self.catalog.entries.values()])
        self.watcher.on_change(STYLES, self.styles_onChange)
        if self.plugin_loader is not None:
            self.plugin_watch()
            self.watcher.on_change(PLUGIN, self.plugin_onChange)

    def plugin_watch(self) -> None:
        """Watch the plugin's files, plus its directory for a first Contribution file"""
        paths = self.plugin_loader.watchPaths_get() + [self.plugin_loader.plugin_dir]
        self.watcher.watch(PLUGIN, paths)

    def styles_onChange(self, paths: List[Path]) -> Dict[str, Any]:
        return {'reloaded': self.resolver.styles_reloadChanged()}

    def plugin_onChange(self, paths: List[Path]) -> Dict[str, Any]:
        LOG("Plugin source changed, re-extracting", level=1)
        extraction = self.plugin_reload()
        self.plugin_watch()
        return {'plugin': extraction.summary() if extraction is not None else None}

    def status_get(self) -> Dict[str, Any]:
        return {
            'watchDirectory': str(self.document_path.parent) if self.document_path is not None else None,
            'currentFile': str(self.document_path) if self.document_path is not None else None,
            'converterStats': self.converter.stats_get(),
            'styleStats': self.resolver.stats_get(),
            'plugin': self.extraction.summary(with_service_text=True) if self.extraction is not None else None,
            'pluginInfo': self.plugin_loader.info_get() if self.plugin_loader is not None else None,
            'eventSeq': self.watcher.seq,
            'uptime': time.time() - self.started_at,
            'serverTime': datetime.now().isoformat(),
        }

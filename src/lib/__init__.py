"""
rodixpreview library

Document converter, stylesheet resolver, plugin behavior extractor,
runtime emulator delivery and the preview server around them.
"""

__version__ = "1.0.0"

from .log import LOG, state_connectToLogger
from .converter import RodiConverter, ConversionError
from .catalog import StyleCatalog, CatalogError
from .styles import StyleResolver, StyleSourceNotFoundError
from .plugin import PluginLoader
from .emulator import RuntimeEmulator, button_classify
from .page import PageAssembler
from .watcher import SourceWatcher
from .context import PreviewContext, DocumentNotFoundError
from .server import PreviewServer, preview_serve

__all__ = [
    "LOG",
    "state_connectToLogger",
    "RodiConverter",
    "ConversionError",
    "StyleCatalog",
    "CatalogError",
    "StyleResolver",
    "StyleSourceNotFoundError",
    "PluginLoader",
    "RuntimeEmulator",
    "button_classify",
    "PageAssembler",
    "SourceWatcher",
    "PreviewContext",
    "DocumentNotFoundError",
    "PreviewServer",
    "preview_serve",
    "__version__",
]

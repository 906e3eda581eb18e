"""
rodixpreview - Live preview for RodiX component documents

Converts RodiX component markup to standard HTML, compiles the component
stylesheets, and emulates the plugin runtime in the browser.
"""

__version__ = "1.0.0"

from .lib import RodiConverter, StyleResolver, PluginLoader, PreviewContext, LOG, state_connectToLogger

__all__ = [
    "RodiConverter",
    "StyleResolver",
    "PluginLoader",
    "PreviewContext",
    "LOG",
    "state_connectToLogger",
    "__version__",
]

"""
Models package for rodixpreview

Contains data structures and type definitions shared by the converter,
the stylesheet resolver, the plugin extractor and the runtime emulator.
"""

from .state import ProgramState, pipeline
from .components import (
    StructuralKind,
    ComponentRule,
    AttributeRewrite,
    COMPONENT_RULES,
    COMPONENT_MAP,
    ATTRIBUTE_REWRITES,
)
from .stats import ConversionStats, ConversionErrorRecord, ConversionReport
from .styles import StyleCategory, StyleCatalogEntry, StyleLoadError, StyleLoadResult
from .plugin import HandlerKind, PluginBinding, HandlerDescriptor, PluginExtraction
from .emulator import (
    ButtonAction,
    ButtonContext,
    ButtonRule,
    BUTTON_RULES,
    EmulatorConfig,
    SliderState,
    SelectBoxGroup,
)

__all__ = [
    "ProgramState",
    "pipeline",
    "StructuralKind",
    "ComponentRule",
    "AttributeRewrite",
    "COMPONENT_RULES",
    "COMPONENT_MAP",
    "ATTRIBUTE_REWRITES",
    "ConversionStats",
    "ConversionErrorRecord",
    "ConversionReport",
    "StyleCategory",
    "StyleCatalogEntry",
    "StyleLoadError",
    "StyleLoadResult",
    "HandlerKind",
    "PluginBinding",
    "HandlerDescriptor",
    "PluginExtraction",
    "ButtonAction",
    "ButtonContext",
    "ButtonRule",
    "BUTTON_RULES",
    "EmulatorConfig",
    "SliderState",
    "SelectBoxGroup",
]

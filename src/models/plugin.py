"""
Plugin behavior extraction models

Structures recovered from a plugin's behavior-description source
(the *Contribution.js file). Every extraction pass produces fresh objects;
nothing is merged across reloads.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class HandlerKind(Enum):
    """Naming-convention category of an extracted method"""
    HANDLER = "handler"   # handle*/on* methods bound to UI events
    INIT = "init"         # _init* methods invoked at construction
    HELPER = "helper"     # other underscore-prefixed methods


@dataclass(frozen=True)
class PluginBinding:
    """
    One "register handler for id X bound to method Y" declaration

    Example:
        this.uiHandler.on('btnApply', this.handleClickApply.bind(this));
        -> PluginBinding(component_id="btnApply", handler_name="handleClickApply")
    """
    component_id: str
    handler_name: str
    event_kind: str = "uiHandler.on"


@dataclass(frozen=True)
class HandlerDescriptor:
    """
    Raw captured method text

    Attributes:
        name: Method name
        body: Body text including the enclosing braces
        offset: Character offset of the method signature in the source
        params: Parameter list text as written (without parentheses)
        kind: Naming-convention category
    """
    name: str
    body: str
    offset: int
    params: str = ""
    kind: HandlerKind = HandlerKind.HANDLER


@dataclass
class PluginExtraction:
    """
    Everything recovered from one analysis pass

    Attributes:
        bindings: Event binding declarations, in source order
        handlers: handle*/on* methods, in source order
        init_functions: Underscore-prefixed methods, in source order
        raw_text: Full behavior-description source
        contribution_file: File name of the behavior-description source
        service_file: File name of the companion service source, if any
        service_text: Companion service source, if any
    """
    bindings: List[PluginBinding] = field(default_factory=list)
    handlers: List[HandlerDescriptor] = field(default_factory=list)
    init_functions: List[HandlerDescriptor] = field(default_factory=list)
    raw_text: str = ""
    contribution_file: str = ""
    service_file: Optional[str] = None
    service_text: Optional[str] = None

    def handler_table(self) -> Dict[str, HandlerDescriptor]:
        """Map handler names to descriptors (later definitions win, as in JS)"""
        return {handler.name: handler for handler in self.handlers + self.init_functions}

    def bindings_unresolved(self) -> List[PluginBinding]:
        """Bindings naming a method that was not extracted"""
        table = self.handler_table()
        return [binding for binding in self.bindings if binding.handler_name not in table]

    def summary(self, with_service_text: bool = False) -> Dict[str, Any]:
        """Counts and file names; the status route also carries the service source"""
        summary = {
            'contributionFile': self.contribution_file,
            'serviceFile': self.service_file,
            'eventBindings': len(self.bindings),
            'handlers': len(self.handlers),
            'initFunctions': len(self.init_functions),
        }
        if with_service_text:
            summary['serviceText'] = self.service_text
        return summary

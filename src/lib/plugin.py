"""
Plugin behavior extractor

Statically analyses a plugin's behavior-description source (the
*Contribution.js file; it is never executed) and synthesizes a browser
class, PluginEmulator, that wires the same handlers to the converted page.

Recovered from the source:
- bindings: this.uiHandler.on('<id>', this.<method>.bind(this))
- handlers: methods named handle* / on*
- underscore methods: _init* (called at construction) and helpers

Method bodies are captured with the token-aware JsScanner, so braces in
strings, templates and comments do not move the body boundaries.
"""

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..models.plugin import HandlerDescriptor, HandlerKind, PluginBinding, PluginExtraction
from .lexer import JsScanner
from .log import LOG

CONTRIBUTION_MARKERS = ('Contribution.js', 'contribution.js')
SERVICE_MARKERS = ('Service.js', 'service.js')

BINDING_PATTERN = re.compile(
    r"""this\.uiHandler\.on\(\s*['"]([^'"]+)['"]\s*,\s*this\.(\w+)\.bind\(this\)\s*\)"""
)
HANDLER_PATTERN = re.compile(r"^[ \t]*(handle\w+|on\w+)[ \t]*\(([^)]*)\)\s*\{", re.MULTILINE)
UNDERSCORE_PATTERN = re.compile(r"^[ \t]*(_\w+)[ \t]*\(([^)]*)\)\s*\{", re.MULTILINE)

DEFAULT_PARAMS = "type, data"

# Body rewrites, applied in order
COMPONENT_BRACKET = re.compile(r"""this\.components\[\s*['"]([A-Za-z_$][\w$]*)['"]\s*\]""")
SET_CLASS_NAME = re.compile(r"""this\.components\.(\w+)\.setClassName\(\s*['"]([^'"]*)['"]\s*\)""")
SET_VISIBLE = re.compile(r"""this\.components\.(\w+)\.setVisible\(\s*([^()]+?)\s*\)""")
RENDER_CALL = re.compile(r"""this\.uiHandler\.render\(\s*\)[ \t]*;?""")
MESSAGE_BOX = re.compile(
    r"""this\.rodiAPI\.getUserInteraction\(\)\.MessageBox\.show\("""
    r"""\s*[^,()]+,\s*([^,]+?)\s*,\s*([^,)]+?)\s*(?:,[^)]*)?\)"""
)
SIMPLE_EXPRESSION = re.compile(r"^[\w$.]+$")


def kind_fromName(name: str) -> HandlerKind:
    if name.startswith('_init'):
        return HandlerKind.INIT
    if name.startswith('_'):
        return HandlerKind.HELPER
    return HandlerKind.HANDLER


def _visible_replace(match: re.Match) -> str:
    component, argument = match.group(1), match.group(2)
    if not SIMPLE_EXPRESSION.match(argument):
        argument = f"({argument})"
    return f"this.components.{component}.style.display = {argument} ? 'block' : 'none'"


def _message_replace(match: re.Match) -> str:
    message, title = match.group(1), match.group(2)
    return f'alert({title} + "\\n\\n" + {message})'


def body_rewrite(body: str) -> str:
    """
    Rewrite framework calls in a captured method body to DOM equivalents

    Example:
        >>> body_rewrite("{ this.components['lbl'].setVisible(false); }")
        "{ this.components.lbl.style.display = false ? 'block' : 'none'; }"
    """
    body = COMPONENT_BRACKET.sub(r"this.components.\1", body)
    body = SET_CLASS_NAME.sub(r'this.components.\1.className = "\2"', body)
    body = SET_VISIBLE.sub(_visible_replace, body)
    body = RENDER_CALL.sub('', body)
    body = MESSAGE_BOX.sub(_message_replace, body)
    return body


class PluginLoader:
    """
    Loads and analyses the plugin in one directory

    Attributes:
        plugin_dir: Directory holding the plugin sources
        contribution_file: Name of the behavior-description file found by load()
        service_file: Name of the companion service file found by load()
    """

    def __init__(self, plugin_dir: Path) -> None:
        self.plugin_dir = Path(plugin_dir)
        self.contribution_file: Optional[str] = None
        self.service_file: Optional[str] = None

    def files_locate(self) -> None:
        """Find the behavior and service files by name substring"""
        files = sorted(p.name for p in self.plugin_dir.iterdir() if p.is_file())
        self.contribution_file = next(
            (f for f in files if any(marker in f for marker in CONTRIBUTION_MARKERS)), None
        )
        self.service_file = next(
            (f for f in files if any(marker in f for marker in SERVICE_MARKERS)), None
        )

    def load(self) -> Optional[PluginExtraction]:
        """
        Analyse the plugin directory

        Returns:
            The extraction, or None (with a warning) when the directory or
            its behavior-description file is missing
        """
        LOG(f"Loading plugin from {self.plugin_dir}", level=1)
        if not self.plugin_dir.is_dir():
            LOG(f"Plugin directory not found: {self.plugin_dir}", severity="WARNING")
            return None

        self.files_locate()
        if self.contribution_file is None:
            LOG(f"No Contribution file in {self.plugin_dir}", severity="WARNING")
            return None

        LOG(f"Contribution: {self.contribution_file}", level=2)
        text = (self.plugin_dir / self.contribution_file).read_text(encoding='utf-8')

        service_text = None
        if self.service_file is not None:
            LOG(f"Service: {self.service_file}", level=2)
            service_text = (self.plugin_dir / self.service_file).read_text(encoding='utf-8')

        scanner = JsScanner(text)
        methods = self.methods_extract(scanner)
        extraction = PluginExtraction(
            bindings=self.bindings_extract(scanner),
            handlers=[m for m in methods if m.kind == HandlerKind.HANDLER],
            init_functions=[m for m in methods if m.kind != HandlerKind.HANDLER],
            raw_text=text,
            contribution_file=self.contribution_file,
            service_file=self.service_file,
            service_text=service_text,
        )

        LOG(
            f"Extracted {len(extraction.bindings)} bindings, {len(extraction.handlers)} handlers, "
            f"{len(extraction.init_functions)} init functions",
            level=1,
        )
        for binding in extraction.bindings_unresolved():
            LOG(
                f"Binding '{binding.component_id}' names unknown method '{binding.handler_name}'",
                severity="WARNING",
            )
        return extraction

    def bindings_extract(self, scanner: JsScanner) -> List[PluginBinding]:
        return [
            PluginBinding(component_id=m.group(1), handler_name=m.group(2))
            for m in scanner.matches_inCode(BINDING_PATTERN)
        ]

    def methods_extract(self, scanner: JsScanner) -> List[HandlerDescriptor]:
        """
        Every handle*/on*/underscore method that is not nested in another one

        A method-looking line inside an earlier captured body (an object
        literal callback, say) belongs to that body and is not extracted.
        """
        matches = list(scanner.matches_inCode(HANDLER_PATTERN, group=1))
        matches += list(scanner.matches_inCode(UNDERSCORE_PATTERN, group=1))
        matches.sort(key=lambda m: m.start(1))

        methods: List[HandlerDescriptor] = []
        covered_until = -1
        for match in matches:
            offset = match.start(1)
            if offset < covered_until:
                continue

            name = match.group(1)
            span = scanner.block_extract(match.end() - 1)
            if span is None:
                LOG(f"Unbalanced body for method '{name}' at offset {offset}", severity="WARNING")
                body = ""
            else:
                body = scanner.text[span[0]:span[1]]
                covered_until = span[1]

            methods.append(HandlerDescriptor(
                name=name,
                body=body,
                offset=offset,
                params=match.group(2).strip(),
                kind=kind_fromName(name),
            ))
        return methods

    def handlers_extract(self, text: str) -> List[HandlerDescriptor]:
        return [m for m in self.methods_extract(JsScanner(text)) if m.kind == HandlerKind.HANDLER]

    def initFunctions_extract(self, text: str) -> List[HandlerDescriptor]:
        return [m for m in self.methods_extract(JsScanner(text)) if m.kind != HandlerKind.HANDLER]

    def handler_convert(self, handler: HandlerDescriptor) -> str:
        """Emit one method of the PluginEmulator class"""
        params = handler.params or DEFAULT_PARAMS
        body = body_rewrite(handler.body) if handler.body else "{}"
        return f"\n  {handler.name}({params}) {body}\n"

    def synthesize(self, extraction: Optional[PluginExtraction]) -> str:
        """
        Build the browser-side PluginEmulator class for an extraction

        Returns:
            JavaScript source; empty when there is no extraction
        """
        if extraction is None:
            return ""

        table_names = list(extraction.handler_table())
        for binding in extraction.bindings_unresolved():
            LOG(f"Handler '{binding.handler_name}' not found; binding left unwired", level=2)

        init_calls = "".join(
            f"    this.{func.name}();\n"
            for func in extraction.init_functions
            if func.kind == HandlerKind.INIT
        )
        binding_calls = "".join(
            f"    this.emulatorBind({json.dumps(b.component_id)}, {json.dumps(b.handler_name)});\n"
            for b in extraction.bindings
        )
        methods = "".join(
            self.handler_convert(handler)
            for handler in extraction.handlers + extraction.init_functions
        )

        return (
            "// ============================================\n"
            f"// Plugin emulation: {extraction.contribution_file}\n"
            "// ============================================\n"
            "\n"
            "class PluginEmulator {\n"
            "  constructor() {\n"
            "    this.components = {};\n"
            "    this.rodiX = window.rodiX;\n"
            "    this.data = {};\n"
            "    this.uiHandler = { on: () => {}, render: () => {} };\n"
            "    this.emulatorHandlers = {};\n"
            "\n"
            "    document.querySelectorAll('[id]').forEach((el) => {\n"
            "      this.components[el.id] = el;\n"
            "    });\n"
            "\n"
            f"    {json.dumps(table_names)}.forEach((name) => {{\n"
            "      if (typeof this[name] === 'function') {\n"
            "        this.emulatorHandlers[name] = this[name].bind(this);\n"
            "      }\n"
            "    });\n"
            "\n"
            "    console.log('[PluginEmulator] initialized');\n"
            "    this.emulatorInit();\n"
            "  }\n"
            "\n"
            "  emulatorInit() {\n"
            f"{init_calls}"
            f"{binding_calls}"
            "  }\n"
            "\n"
            "  emulatorDispatch(handlerName, type, payload) {\n"
            "    const handler = this.emulatorHandlers[handlerName];\n"
            "    if (!handler) {\n"
            "      console.warn('[PluginEmulator] no handler named ' + handlerName);\n"
            "      return;\n"
            "    }\n"
            "    handler(type, payload);\n"
            "  }\n"
            "\n"
            "  emulatorBind(componentId, handlerName) {\n"
            "    const emit = (type, payload = {}) => this.emulatorDispatch(handlerName, type, payload);\n"
            "\n"
            "    if (this.rodiX && typeof this.rodiX.registerHandler === 'function') {\n"
            "      this.rodiX.registerHandler(componentId, emit);\n"
            "    }\n"
            "\n"
            "    const component = this.components[componentId];\n"
            "    if (!component) {\n"
            "      return;\n"
            "    }\n"
            "    component.addEventListener('click', (e) => emit('click', { value: e.target.value }));\n"
            "    component.addEventListener('change', (e) => emit('change', { value: e.target.value }));\n"
            "    component.addEventListener('rodix-select', (e) => emit('select', e.detail || {}));\n"
            "  }\n"
            f"{methods}"
            "}\n"
            "\n"
            "if (window.rodiX) {\n"
            "  window.pluginEmulator = new PluginEmulator();\n"
            "}\n"
        )

    def info_get(self) -> Optional[Dict[str, Any]]:
        """Parsed package.json of the plugin, or None"""
        package_path = self.plugin_dir / 'package.json'
        if not package_path.exists():
            return None
        try:
            return json.loads(package_path.read_text(encoding='utf-8'))
        except json.JSONDecodeError as e:
            LOG(f"Failed to parse {package_path}: {e}", severity="WARNING")
            return None

    def watchPaths_get(self) -> List[Path]:
        """Plugin files whose change should trigger a re-extraction"""
        names = [self.contribution_file, self.service_file, 'package.json']
        return [self.plugin_dir / name for name in names if name]

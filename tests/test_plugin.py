"""
Plugin behavior extractor tests

Binding and method recovery from a Contribution source, literal-aware
brace matching, body rewrites and the synthesized PluginEmulator class.
"""

import json

import pytest

from rodixpreview.lib.lexer import JsScanner
from rodixpreview.lib.plugin import PluginLoader, body_rewrite, kind_fromName
from rodixpreview.models.plugin import HandlerDescriptor, HandlerKind, PluginBinding


@pytest.fixture
def extraction(plugin_dir):
    return PluginLoader(plugin_dir).load()


class TestJsScanner:
    """Test literal detection and brace matching"""

    def test_literal_offsets(self):
        text = "a = '{'; // {\nb = 1;"
        scanner = JsScanner(text)
        assert scanner.literal_is(text.index("'{'") + 1)
        assert scanner.literal_is(text.index("// {") + 3)
        assert not scanner.literal_is(text.index("b = 1"))

    def test_brace_in_string(self):
        scanner = JsScanner("f() { const s = '}'; }")
        span = scanner.block_extract(0)
        assert scanner.text[span[0]:span[1]] == "{ const s = '}'; }"

    def test_brace_in_comment(self):
        text = "f() {\n  // }\n  /* { */\n  return 1;\n}\nafter() {}"
        scanner = JsScanner(text)
        span = scanner.block_extract(0)
        assert text[span[0]:span[1]] == "{\n  // }\n  /* { */\n  return 1;\n}"

    def test_brace_in_template(self):
        text = "f() { return `${a}}{`; }"
        scanner = JsScanner(text)
        span = scanner.block_extract(0)
        assert span == (4, len(text))

    def test_nested_blocks(self):
        text = "f() { if (x) { y(); } }"
        scanner = JsScanner(text)
        assert scanner.brace_findMatching(4) == len(text) - 1

    def test_unbalanced(self):
        scanner = JsScanner("f() { if (x) { y(); }")
        assert scanner.block_extract(0) is None

    def test_not_an_opening_brace(self):
        scanner = JsScanner("a = '{';")
        assert scanner.brace_findMatching(0) is None
        assert scanner.brace_findMatching(5) is None


class TestNaming:
    """Test the method naming convention"""

    @pytest.mark.parametrize("name,kind", [
        ("_initData", HandlerKind.INIT),
        ("_initialize", HandlerKind.INIT),
        ("_format", HandlerKind.HELPER),
        ("handleClickApply", HandlerKind.HANDLER),
        ("onChangeMode", HandlerKind.HANDLER),
    ])
    def test_kind(self, name, kind):
        assert kind_fromName(name) == kind


class TestLoad:
    """Test analysing a plugin directory"""

    def test_files_found(self, extraction):
        assert extraction.contribution_file == "PIDContribution.js"
        assert extraction.service_file == "PIDService.js"
        assert "PIDService" in extraction.service_text

    def test_bindings(self, extraction):
        assert extraction.bindings == [
            PluginBinding("btnApply", "handleClickApply"),
            PluginBinding("selectMode", "onChangeMode"),
        ]
        assert extraction.bindings_unresolved() == []

    def test_handlers(self, extraction):
        assert [h.name for h in extraction.handlers] == ["handleClickApply", "onChangeMode"]
        assert extraction.handlers[0].params == "type, data"

    def test_commented_out_method_ignored(self, extraction):
        names = [h.name for h in extraction.handlers + extraction.init_functions]
        assert "onLegacy" not in names

    def test_bodies_survive_literal_braces(self, extraction):
        body = extraction.handlers[0].body
        assert body.startswith("{")
        assert body.endswith("this.uiHandler.render();\n  }")
        assert "onChangeMode" not in body

    def test_underscore_methods(self, extraction):
        assert [(f.name, f.kind) for f in extraction.init_functions] == [
            ("_initData", HandlerKind.INIT),
            ("_format", HandlerKind.HELPER),
        ]

    def test_summary(self, extraction):
        assert extraction.summary() == {
            'contributionFile': "PIDContribution.js",
            'serviceFile': "PIDService.js",
            'eventBindings': 2,
            'handlers': 2,
            'initFunctions': 2,
        }

    def test_summary_with_service_text(self, extraction):
        summary = extraction.summary(with_service_text=True)
        assert summary['serviceText'] == extraction.service_text
        assert "PIDService" in summary['serviceText']

    def test_missing_contribution(self, tmp_path):
        (tmp_path / "README.md").write_text("nothing here", encoding="utf-8")
        assert PluginLoader(tmp_path).load() is None

    def test_missing_directory(self, tmp_path):
        assert PluginLoader(tmp_path / "nowhere").load() is None

    def test_unresolved_binding(self, tmp_path):
        (tmp_path / "XContribution.js").write_text(
            "class X {\n"
            "  constructor() { this.uiHandler.on('btnGo', this.handleGo.bind(this)); }\n"
            "}\n",
            encoding="utf-8",
        )
        extraction = PluginLoader(tmp_path).load()
        assert extraction.bindings_unresolved() == [PluginBinding("btnGo", "handleGo")]

    def test_watch_paths(self, plugin_dir):
        loader = PluginLoader(plugin_dir)
        loader.load()
        assert loader.watchPaths_get() == [
            plugin_dir / "PIDContribution.js",
            plugin_dir / "PIDService.js",
            plugin_dir / "package.json",
        ]


class TestNestedMethods:
    """Test that method-looking lines inside a captured body stay in it"""

    SOURCE = (
        "class P {\n"
        "  handleOpen(type, data) {\n"
        "    const table = {\n"
        "      onRow(row) {\n"
        "        return row;\n"
        "      }\n"
        "    };\n"
        "  }\n"
        "\n"
        "  onClose() {\n"
        "  }\n"
        "}\n"
    )

    def test_nested_skipped(self, tmp_path):
        handlers = PluginLoader(tmp_path).handlers_extract(self.SOURCE)
        assert [h.name for h in handlers] == ["handleOpen", "onClose"]
        assert "onRow(row)" in handlers[0].body

    def test_no_init_functions(self, tmp_path):
        assert PluginLoader(tmp_path).initFunctions_extract(self.SOURCE) == []

    def test_unbalanced_body_is_empty(self, tmp_path):
        handlers = PluginLoader(tmp_path).handlers_extract("  handleBroken(type) {\n    if (x) {\n")
        assert len(handlers) == 1
        assert handlers[0].body == ""


class TestBodyRewrite:
    """Test framework call rewrites"""

    def test_bracket_access(self):
        assert body_rewrite("this.components['lbl'].value") == "this.components.lbl.value"

    def test_set_class_name(self):
        assert (
            body_rewrite("this.components.btn.setClassName('btn primary');")
            == 'this.components.btn.className = "btn primary";'
        )

    def test_set_visible_simple(self):
        assert (
            body_rewrite("this.components.p.setVisible(flag);")
            == "this.components.p.style.display = flag ? 'block' : 'none';"
        )

    def test_set_visible_expression(self):
        assert (
            body_rewrite("this.components.p.setVisible(a === 'b');")
            == "this.components.p.style.display = (a === 'b') ? 'block' : 'none';"
        )

    def test_render_removed(self):
        assert body_rewrite("x();\n    this.uiHandler.render();\n") == "x();\n    \n"

    def test_message_box(self):
        source = "this.rodiAPI.getUserInteraction().MessageBox.show(0, 'Saved', 'PID');"
        assert body_rewrite(source) == "alert('PID' + \"\\n\\n\" + 'Saved');"


class TestSynthesize:
    """Test the generated PluginEmulator class"""

    def test_none_gives_empty_script(self, plugin_dir):
        assert PluginLoader(plugin_dir).synthesize(None) == ""

    def test_class_shape(self, plugin_dir):
        loader = PluginLoader(plugin_dir)
        js = loader.synthesize(loader.load())

        assert "class PluginEmulator {" in js
        assert "this.uiHandler = { on: () => {}, render: () => {} };" in js
        assert "this._initData();" in js
        assert "this._format();" not in js
        assert 'this.emulatorBind("btnApply", "handleClickApply");' in js
        assert 'this.emulatorBind("selectMode", "onChangeMode");' in js
        assert js.rstrip().endswith("if (window.rodiX) {\n  window.pluginEmulator = new PluginEmulator();\n}")

    def test_handler_table(self, plugin_dir):
        loader = PluginLoader(plugin_dir)
        js = loader.synthesize(loader.load())
        table = json.dumps(["handleClickApply", "onChangeMode", "_initData", "_format"])
        assert f"{table}.forEach" in js

    def test_methods_rewritten(self, plugin_dir):
        loader = PluginLoader(plugin_dir)
        js = loader.synthesize(loader.load())

        assert "\n  handleClickApply(type, data) {" in js
        assert "this.components.lblStatus.style.display = true ? 'block' : 'none';" in js
        assert 'this.components.btnApply.className = "btn primary";' in js
        assert "alert('PID' + \"\\n\\n\" + 'Saved');" in js
        assert "this.components.panelManual.style.display = false ? 'block' : 'none';" in js
        assert "this.uiHandler.render()" not in js
        assert "setVisible" not in js

    def test_default_params(self, tmp_path):
        handler = HandlerDescriptor(name="onTick", body="{ tick(); }", offset=0)
        assert PluginLoader(tmp_path).handler_convert(handler) == "\n  onTick(type, data) { tick(); }\n"


class TestPackageInfo:
    """Test reading package.json"""

    def test_info(self, plugin_dir):
        assert PluginLoader(plugin_dir).info_get() == {"name": "pid-tuning", "version": "0.3.0"}

    def test_missing(self, tmp_path):
        assert PluginLoader(tmp_path).info_get() is None

    def test_malformed(self, tmp_path):
        (tmp_path / "package.json").write_text("{not json", encoding="utf-8")
        assert PluginLoader(tmp_path).info_get() is None

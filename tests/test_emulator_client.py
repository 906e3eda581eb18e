"""
Client library tests

Runs the shipped rodix-emulator.js bundle under node against a minimal
window/document stand-in, and checks the slider, button and dropdown
behavior the browser sees. Slider and button cases are also run through
the Python models, so both sides answer the same table.
"""

import json
import shutil
import subprocess
from pathlib import Path
from typing import Any, Optional

import pytest

from rodixpreview.lib.emulator import RuntimeEmulator, button_classify, siblingId_derive
from rodixpreview.models.emulator import ButtonContext, EmulatorConfig, SliderState

NODE = shutil.which("node")

pytestmark = pytest.mark.skipif(NODE is None, reason="node is not installed")

# Only what the library touches at load time and in the pure/state methods.
DOM_STANDIN = """
globalThis.window = globalThis;
const listeners = [];
function classList(...initial) {
  const names = new Set(initial);
  return {
    add: (name) => names.add(name),
    remove: (name) => names.delete(name),
    contains: (name) => names.has(name),
  };
}
function wrapper() {
  const node = { classList: classList() };
  node.child = { parent: node };
  node.contains = (target) => target === node || target === node.child;
  return node;
}
function button(id, label, ...parentClasses) {
  return { id, textContent: label, parentElement: { classList: classList(...parentClasses) } };
}
globalThis.document = {
  readyState: 'loading',
  addEventListener(type, fn, options) {
    listeners.push({ type, fn, once: !!(options && options.once) });
  },
  removeEventListener(type, fn) {
    const index = listeners.findIndex((l) => l.type === type && l.fn === fn);
    if (index >= 0) {
      listeners.splice(index, 1);
    }
  },
  click(target) {
    listeners.filter((l) => l.type === 'click').forEach((l) => {
      if (l.once) {
        this.removeEventListener('click', l.fn);
      }
      l.fn({ target });
    });
  },
  clickListeners() {
    return listeners.filter((l) => l.type === 'click').length;
  },
  getElementById(id) {
    return { id };
  },
};
"""


def client_run(tmp_path: Path, body: str, emulator: Optional[RuntimeEmulator] = None) -> Any:
    """Evaluate body (a function body returning JSON-able data) after the bundle"""
    emulator = emulator or RuntimeEmulator()
    script = tmp_path / "client.js"
    script.write_text(
        "\n".join([
            DOM_STANDIN,
            emulator.bundle(),
            f"const result = (() => {{\n{body}\n}})();",
            "process.stdout.write(JSON.stringify(result));",
        ]),
        encoding='utf-8',
    )
    completed = subprocess.run([NODE, str(script)], capture_output=True, text=True, timeout=60, check=True)
    return json.loads(completed.stdout)


# (minimum, maximum, step, raw, quantized)
SLIDER_CASES = [
    (0, 100, 5, 42, 40),
    (0, 100, 5, 250, 100),
    (0, 100, 5, -3, 0),
    (0, 100, 5, 42.5, 40),
    (0, 100, 5, 47.5, 50),
    (3, 23, 5, 10, 8),
    (0, 1, 0.1, 0.34, 0.3),
    (0.5, 10, 1, 3.5, 3.5),
    (0.25, 10, 1, 3.175, 3.25),
    (0, 1e-6, 1e-7, 4.2e-7, 4e-7),
]


class TestClientSlider:
    """Test SliderState as shipped to the browser"""

    def test_quantize_table(self, tmp_path):
        cases = [list(case[:4]) for case in SLIDER_CASES]
        results = client_run(tmp_path, f"""
            return {json.dumps(cases)}.map(([min, max, step, raw]) =>
                new window.rodiX.SliderState(min, max, step, min).quantize(raw));
        """)
        assert results == [case[4] for case in SLIDER_CASES]

    @pytest.mark.parametrize("minimum,maximum,step,raw,expected", SLIDER_CASES)
    def test_python_model_agrees(self, minimum, maximum, step, raw, expected):
        assert SliderState(minimum=minimum, maximum=maximum, step=step).quantize(raw) == expected

    def test_initial_value_on_offset_grid(self, tmp_path):
        value = client_run(tmp_path, "return new window.rodiX.SliderState(0.5, 10, 1, 3.5).value;")
        assert value == 3.5
        assert SliderState(minimum=0.5, maximum=10, step=1, value=3.5).value == 3.5

    def test_inverted_range_and_bad_step(self, tmp_path):
        state = client_run(tmp_path, """
            const s = new window.rodiX.SliderState(10, 0, 0, 5);
            return [s.minimum, s.maximum, s.step, s.value];
        """)
        assert state == [10, 10, 1, 10]
        python = SliderState(minimum=10, maximum=0, step=0, value=5)
        assert [python.minimum, python.maximum, python.step, python.value] == state

    def test_keys(self, tmp_path):
        values = client_run(tmp_path, """
            const s = new window.rodiX.SliderState(0, 100, 5, 40);
            return ['ArrowRight', 'ArrowDown', 'End', 'ArrowUp', 'Home', 'ArrowLeft'].map((key) => {
                s.keyPress(key);
                return s.value;
            });
        """)
        assert values == [45, 40, 100, 100, 0, 0]

    def test_position(self, tmp_path):
        values = client_run(tmp_path, """
            const s = new window.rodiX.SliderState(0, 100, 5, 0);
            return [s.valueFromPosition(42, 100), s.valueFromPosition(150, 100), s.valueFromPosition(10, 0)];
        """)
        assert values == [40, 100, 0]


# (id, label, parent classes, action)
BUTTON_CASES = [
    ("btnShowMessage", "", [], "show-message"),
    ("btnAddMessage", "", [], "show-message"),
    ("btnAddGain", "", [], "add"),
    ("btnRemoveRow", "", [], "delete"),
    ("btnX", "Reset", [], "revert"),
    ("", "DELETE ALL", [], "delete"),
    ("btnApply", "Apply", [], "none"),
    ("tabAddMessage", "", ["tab-group"], "tab-switch"),
]


class TestClientButtons:
    """Test button classification and the id conventions"""

    def test_classify_table(self, tmp_path):
        cases = [[case[0], case[1], case[2]] for case in BUTTON_CASES]
        actions = client_run(tmp_path, f"""
            return {json.dumps(cases)}.map(([id, label, classes]) =>
                window.rodiX.classifyButton(button(id, label, ...classes)).action);
        """)
        assert actions == [case[3] for case in BUTTON_CASES]

        python = [
            button_classify(ButtonContext(button_id=i, label=label, in_tab_group="tab-group" in classes)).value
            for i, label, classes, _ in BUTTON_CASES
        ]
        assert python == actions

    def test_matched_keyword(self, tmp_path):
        result = client_run(tmp_path, "return window.rodiX.classifyButton(button('btnRemoveGain', ''));")
        assert result == {'action': "delete", 'keyword': "remove"}

    def test_sibling_ids(self, tmp_path):
        cases = [
            ["btnAddGain", "add", "select"],
            ["btnDeleteGain", "delete", "table"],
            ["btnGainAdd", "add", "input"],
            ["Gain", None, "table"],
        ]
        ids = client_run(tmp_path, f"""
            return {json.dumps(cases)}.map(([id, keyword, prefix]) =>
                window.rodiX.siblingId({{ id }}, keyword, prefix));
        """)
        assert ids == ["selectGain", "tableGain", "inputGain", "tableGain"]
        assert ids == [siblingId_derive(*case) for case in cases]

    def test_panel_for_tab(self, tmp_path):
        result = client_run(tmp_path, """
            const panel = window.rodiX.panelFor({ id: 'tabSettings' });
            return [panel && panel.id, window.rodiX.panelFor({ id: 'btnSettings' })];
        """)
        assert result == ["panelSettings", None]


class TestClientDropdowns:
    """Test open/close state and outside-click dismissal"""

    SETUP = """
        const emulator = window.rodiX;
        const a = { wrapper: wrapper(), outside: null };
        const b = { wrapper: wrapper(), outside: null };
        emulator.dropdowns.push(a, b);
        const isOpen = (d) => d.wrapper.classList.contains(emulator.config.openClass);
    """

    def test_only_one_open(self, tmp_path):
        state = client_run(tmp_path, self.SETUP + """
            emulator.openDropdown(a);
            emulator.openDropdown(b);
            return [isOpen(a), isOpen(b), document.clickListeners()];
        """)
        assert state == [False, True, 1]

    def test_outside_click_closes(self, tmp_path):
        state = client_run(tmp_path, self.SETUP + """
            emulator.openDropdown(a);
            document.click({});
            return [isOpen(a), document.clickListeners()];
        """)
        assert state == [False, 0]

    def test_inside_click_keeps_outside_dismissal(self, tmp_path):
        state = client_run(tmp_path, self.SETUP + """
            emulator.openDropdown(a);
            document.click(a.wrapper.child);
            const afterInside = [isOpen(a), document.clickListeners()];
            document.click({});
            return afterInside.concat([isOpen(a), document.clickListeners()]);
        """)
        assert state == [True, 1, False, 0]

    def test_config_open_class(self, tmp_path):
        emulator = RuntimeEmulator(EmulatorConfig(open_class="expanded"))
        state = client_run(tmp_path, self.SETUP + """
            emulator.openDropdown(a);
            return [emulator.config.openClass, a.wrapper.classList.contains('expanded')];
        """, emulator)
        assert state == ["expanded", True]

"""
Shared fixtures: a miniature web service source tree, a plugin directory
and a RodiX document, all under tmp_path.
"""

import json
from pathlib import Path

import pytest

from rodixpreview.config import AppSettings
from rodixpreview.lib.context import PreviewContext


CATALOG_YAML = """
load_paths:
  - styles

global:
  base: styles/base.scss

atoms:
  Button: components/atoms/Button/Button.scss

rodix:
  XButton: components/rodiXComponents/XButton/XButton.scss
  XInput: components/rodiXComponents/XInput/XInput.scss
  XSpan: components/rodiXComponents/XSpan/XSpan.scss
  XLabel: components/rodiXComponents/XLabel/XLabel.scss
  XSelectBox: components/rodiXComponents/XSelectBox/XSelectBox.scss
"""

STYLE_SOURCES = {
    "styles/_variables.scss": "$primary-color: #59d5ef;\n",
    "styles/base.scss": "body {\n  margin: 0;\n}\n",
    "components/atoms/Button/Button.scss": (
        "@import 'variables';\n"
        ".btn {\n  color: $primary-color;\n  line-height: 0;\n}\n"
        ".visible-show {\n  display: block;\n}\n"
    ),
    "components/rodiXComponents/XButton/XButton.scss": (
        ".visible-show {\n  display: inline-block;\n}\n"
        ".visible-hide {\n  display: none;\n}\n"
    ),
    "components/rodiXComponents/XInput/XInput.scss": (
        ".visible-show {\n  display: block;\n}\n"
        ".visible-hide {\n  display: none;\n}\n"
    ),
    "components/rodiXComponents/XSpan/XSpan.scss": (
        ".visible-show {\n  display: inline;\n}\n"
    ),
    "components/rodiXComponents/XLabel/XLabel.scss": (
        ".xlabel {\n  text-align: center;\n  color: red;\n}\n"
    ),
    "components/rodiXComponents/XSelectBox/XSelectBox.scss": (
        ".xselectbox {\n  display: flex;\n}\n"
    ),
}

CONTRIBUTION_JS = """\
export default class PIDContribution {
  constructor(rodiAPI, uiHandler) {
    this.rodiAPI = rodiAPI;
    this.uiHandler = uiHandler;
    this.components = {};
    this.uiHandler.on('btnApply', this.handleClickApply.bind(this));
    this.uiHandler.on("selectMode", this.onChangeMode.bind(this));
  }

  _initData() {
    this.data = { gains: [1, 2, 3] };
  }

  _format(value) {
    return `${value}`;
  }

  /*
  onLegacy(type) {
  */

  handleClickApply(type, data) {
    const note = "closing brace } inside a string";
    // a comment with an opening brace {
    this.components['lblStatus'].setVisible(true);
    this.components.btnApply.setClassName('btn primary');
    this.rodiAPI.getUserInteraction().MessageBox.show(0, 'Saved', 'PID');
    this.uiHandler.render();
  }

  onChangeMode(type, data) {
    if (data.value === 'auto') {
      this.components.panelManual.setVisible(false);
    }
  }
}
"""

DOCUMENT_HTML = """\
<XDiv className="panel">
  <XTable>
    <XRow><XCell isColumnHeader="true">Gain</XCell><XCell><XInput id="inputGain" value="3"></XInput></XCell></XRow>
    <XRow><XButton id="btnApply" type="primary" text="Apply"></XButton></XRow>
  </XTable>
  <XSelectBox id="selectMode">
    <XOption value="auto" label="Auto"></XOption>
    <XOption value="manual" label="Manual"></XOption>
  </XSelectBox>
  <XSpan id="lblStatus" visible="false">Saved</XSpan>
</XDiv>
"""


def tree_write(root: Path, files: dict) -> None:
    for relpath, content in files.items():
        path = root / relpath
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


@pytest.fixture
def web_root(tmp_path: Path) -> Path:
    """Web service src/ with a handful of component stylesheets"""
    root = tmp_path / "web"
    tree_write(root, STYLE_SOURCES)
    return root


@pytest.fixture
def catalog_file(tmp_path: Path) -> Path:
    path = tmp_path / "styles.yaml"
    path.write_text(CATALOG_YAML, encoding="utf-8")
    return path


@pytest.fixture
def plugin_dir(tmp_path: Path) -> Path:
    """Plugin directory with a Contribution, a Service and a package.json"""
    root = tmp_path / "plugin"
    tree_write(root, {
        "PIDContribution.js": CONTRIBUTION_JS,
        "PIDService.js": "export default class PIDService {}\n",
        "package.json": json.dumps({"name": "pid-tuning", "version": "0.3.0"}),
    })
    return root


@pytest.fixture
def document(tmp_path: Path) -> Path:
    path = tmp_path / "htmlStore" / "index.html"
    path.parent.mkdir(parents=True)
    path.write_text(DOCUMENT_HTML, encoding="utf-8")
    return path


@pytest.fixture
def settings(tmp_path: Path, web_root: Path, catalog_file: Path, plugin_dir: Path, document: Path) -> AppSettings:
    return AppSettings(
        project_root=tmp_path,
        web_svc_dir=web_root,
        html_folder=document.parent,
        html_file=document.name,
        plugin_dir=plugin_dir,
        style_catalog=catalog_file,
    )


@pytest.fixture
def context(settings: AppSettings) -> PreviewContext:
    ctx = PreviewContext(settings)
    ctx.plugin_reload()
    return ctx

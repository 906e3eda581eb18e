"""
End-to-end pipeline tests

Runs the CLI stages in order: RodiX document -> converted page on disk,
with the style catalog and plugin from the conftest source tree.
"""

import warnings
from pathlib import Path

import pytest

import rodixpreview
from rodixpreview.__main__ import (
    document_convert,
    env_check,
    page_write,
    plugin_extract,
    results_report,
    server_run,
    settings_override,
    styles_resolve,
)
from rodixpreview.models import ProgramState, pipeline


@pytest.fixture
def state(tmp_path, document, plugin_dir, catalog_file, web_root):
    return ProgramState(
        inputdir=document.parent,
        outputdir=tmp_path / "out",
        verbosity=0,
        inputFile=document.name,
        pluginDir=str(plugin_dir),
        styleCatalog=str(catalog_file),
        webSvcDir=str(web_root),
        serve=False,
        host="127.0.0.1",
        port=0,
    )


class TestPipeline:
    """Test the full render"""

    def test_page_written(self, state):
        """Every stage runs and the static page lands in outputdir"""
        final = pipeline(
            state,
            env_check,
            document_convert,
            styles_resolve,
            plugin_extract,
            page_write,
            results_report,
            server_run,
        )

        assert final.envOK is True
        assert final.outputFile == state.outputdir / "index.html"
        html = final.outputFile.read_text(encoding="utf-8")

        assert '<button class="btn primary xbutton-visible-show" id="btnApply" data-visible="true">Apply</button>' in html
        assert "/* XButton - XButton.scss */" in html
        assert "button.xbutton-visible-show" in html
        assert "window.RODIX_CONFIG" in html
        assert 'this.emulatorBind("btnApply", "handleClickApply");' in html
        assert "debug-toolbar" not in html

    def test_state_fields(self, state):
        final = pipeline(state, env_check, document_convert, styles_resolve, plugin_extract)
        assert final.inputSourceFile == state.inputdir / state.inputFile
        assert final.styleResult.loaded == 7
        assert final.pluginExtraction.contribution_file == "PIDContribution.js"
        assert final.context.converter.last_report.total > 0

    def test_without_plugin(self, state):
        state.pluginDir = None
        final = pipeline(state, env_check, document_convert, styles_resolve, plugin_extract, page_write)
        assert final.pluginExtraction is None
        assert 'id="rodix-plugin"' not in final.outputFile.read_text(encoding="utf-8")


class TestEnvCheck:
    """Test environment failures"""

    def test_missing_document(self, state):
        """A missing input file stops the pipeline with exit code 1"""
        state.inputFile = "missing.html"
        with pytest.raises(SystemExit) as excinfo:
            env_check(state)
        assert excinfo.value.code == 1

    def test_missing_catalog(self, state, tmp_path):
        state.styleCatalog = str(tmp_path / "nope.yaml")
        with pytest.raises(SystemExit) as excinfo:
            env_check(state)
        assert excinfo.value.code == 1

    def test_overrides(self, state, web_root):
        overrides = settings_override(state)
        assert overrides['html_file'] == state.inputFile
        assert overrides['web_svc_dir'] == web_root
        assert overrides['port'] == 0

    def test_unset_options_not_overridden(self, state):
        state.pluginDir = None
        state.host = None
        overrides = settings_override(state)
        assert 'plugin_dir' not in overrides
        assert 'host' not in overrides


class TestPackageSource:
    """Test that every module compiles cleanly"""

    @pytest.mark.parametrize(
        "module",
        sorted(Path(rodixpreview.__file__).parent.rglob("*.py")),
        ids=lambda path: path.name,
    )
    def test_no_compile_warnings(self, module):
        """Docstrings and literals carry no invalid escape sequences"""
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            compile(module.read_text(encoding="utf-8"), str(module), "exec")

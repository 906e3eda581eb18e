"""
Preview context tests

The context ties converter, styles, plugin and watcher together; these
tests run it against the miniature source tree from conftest.
"""

import os

import pytest

from rodixpreview.lib.catalog import CatalogError
from rodixpreview.lib.context import DocumentNotFoundError, PreviewContext
from rodixpreview.lib.watcher import FILE_CHANGED, PLUGIN_CHANGED, STYLE_CHANGED


def touch(path, offset=10):
    stamp = path.stat().st_mtime + offset
    os.utime(path, (stamp, stamp))


class TestDocument:
    """Test reading and converting the previewed document"""

    def test_convert(self, context):
        converted = context.document_convert()
        assert '<table>' in converted
        assert '<td colspan="2"' in converted
        assert 'class="btn primary xbutton-visible-show"' in converted
        assert '<option value="auto">Auto</option>' in converted
        assert context.stats.total_conversions == 1

    def test_missing_document(self, context, document):
        document.unlink()
        with pytest.raises(DocumentNotFoundError):
            context.document_read()

    def test_no_document_configured(self, settings):
        context = PreviewContext(settings.model_copy(update={'html_folder': None}))
        with pytest.raises(DocumentNotFoundError):
            context.document_read()

    def test_stats_reset(self, context):
        context.document_convert()
        context.stats_reset()
        assert context.converter.stats_get()['totalConversions'] == 0


class TestPage:
    """Test full page rendering"""

    def test_static_page(self, context):
        page = context.page_render(live=False)
        assert 'id="lblStatus"' in page
        assert "/* XButton - XButton.scss */" in page
        assert "window.RODIX_CONFIG" in page
        assert "class PluginEmulator" in page
        assert "debug-toolbar" not in page

    def test_live_page(self, context):
        assert "window.RODIX_PREVIEW" in context.page_render(live=True)

    def test_without_plugin(self, settings):
        context = PreviewContext(settings.model_copy(update={'plugin_dir': None}))
        assert context.plugin_reload() is None
        assert context.plugin_script() == ""
        assert 'id="rodix-plugin"' not in context.page_render(live=False)

    def test_bad_catalog(self, settings, tmp_path):
        with pytest.raises(CatalogError):
            PreviewContext(settings, catalog_path=tmp_path / "nope.yaml")


class TestStatus:
    """Test the status report"""

    def test_fields(self, context, document, plugin_dir):
        context.styles_load()
        status = context.status_get()
        assert status['currentFile'] == str(document)
        assert status['watchDirectory'] == str(document.parent)
        assert status['converterStats'] == {'totalConversions': 0, 'errors': []}
        assert status['styleStats']['loadedComponents'] == 7
        assert status['plugin']['contributionFile'] == "PIDContribution.js"
        assert status['plugin']['serviceText'] == (plugin_dir / "PIDService.js").read_text(encoding="utf-8")
        assert status['pluginInfo'] == {"name": "pid-tuning", "version": "0.3.0"}
        assert status['eventSeq'] == 0
        assert status['uptime'] >= 0


class TestLiveUpdates:
    """Test the watcher wiring"""

    def test_document_change(self, context, document):
        context.watch_start()
        touch(document)
        assert [e.kind for e in context.watcher.poll()] == [FILE_CHANGED]

    def test_style_change_recompiles(self, context, web_root):
        context.styles_load()
        context.watch_start()
        touch(web_root / "components/rodiXComponents/XButton/XButton.scss")

        events = context.watcher.poll()
        assert [e.kind for e in events] == [STYLE_CHANGED]
        assert events[0].detail == {'reloaded': ["XButton"]}

    def test_plugin_change_reextracts(self, context, plugin_dir):
        context.watch_start()
        before = context.extraction
        contribution = plugin_dir / "PIDContribution.js"
        contribution.write_text(
            contribution.read_text(encoding="utf-8").replace("onChangeMode", "onSwitchMode"),
            encoding="utf-8",
        )
        touch(contribution)

        events = context.watcher.poll()
        assert [e.kind for e in events] == [PLUGIN_CHANGED]
        assert events[0].detail['plugin']['handlers'] == 2
        assert context.extraction is not before
        assert [h.name for h in context.extraction.handlers] == ["handleClickApply", "onSwitchMode"]

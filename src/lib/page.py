"""
Preview page assembler

Combines the four outputs into one HTML page:
    converted markup + resolved stylesheets + emulator library + plugin code

Live pages (served) also carry the preview header, the debug toolbar and
the polling client; static pages (written by the CLI) carry only the
component styles and scripts.
"""

import html
import json
from datetime import datetime
from pathlib import Path
from typing import Optional

from .log import LOG

ASSETS_DIR = Path(__file__).parent.parent / "assets"

COMPONENT_STYLE_ID = "rodix-component-styles"


def script_escape(code: str) -> str:
    """Keep inline script text from closing its own <script> element"""
    return code.replace("</script", "<\\/script")


class PageAssembler:
    """
    Builds preview pages from their parts

    Attributes:
        assets_dir: Directory with the css/, html/ and js/ templates
        poll_interval: Seconds between client event polls (live pages)
    """

    def __init__(self, assets_dir: Optional[Path] = None, poll_interval: float = 1.0) -> None:
        self.assets_dir = Path(assets_dir) if assets_dir is not None else ASSETS_DIR
        self.poll_interval = poll_interval

    def template_load(self, relpath: str) -> str:
        """Load an asset template"""
        template_path = self.assets_dir / relpath
        if template_path.exists():
            return template_path.read_text(encoding='utf-8')
        LOG(f"Template {relpath} not found", severity="WARNING")
        return ""

    def head_build(self, title: str, styles_text: str, styles_loaded: int, live: bool) -> str:
        preview_css = ""
        if live:
            preview_css = f"""
    <style id="preview-server-styles">
{self.template_load('css/preview.css')}
    </style>"""

        return f"""<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{html.escape(title)}</title>

    <style id="{COMPONENT_STYLE_ID}">
/* RodiX component styles: {styles_loaded} loaded */

{styles_text}
    </style>

    <style id="rodix-style-override">
{self.template_load('css/override.css')}
    </style>{preview_css}
</head>"""

    def header_build(self, source_file: Optional[Path]) -> str:
        name = html.escape(str(source_file)) if source_file is not None else "(no document)"
        return f"""    <div class="preview-header">
        <h1>RodiX Live Preview</h1>
        <div class="file-info">
            File: {name}<br>
            Last update: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}
            <span id="status" class="status connected">● connected</span>
        </div>
    </div>
"""

    def page_build(
        self,
        converted_html: str,
        styles_text: str,
        emulator_js: str,
        plugin_js: str = "",
        source_file: Optional[Path] = None,
        styles_loaded: int = 0,
        live: bool = True,
        event_seq: int = 0,
    ) -> str:
        """
        Assemble a complete preview page

        Args:
            converted_html: Output of the document converter
            styles_text: Concatenated component stylesheets
            emulator_js: Runtime emulator bundle (config + library)
            plugin_js: Synthesized PluginEmulator code, "" without a plugin
            source_file: Previewed document, shown in the header
            styles_loaded: Number of stylesheet entries in styles_text
            live: Include the preview chrome and the polling client
            event_seq: Newest watcher event already reflected by this page

        Returns:
            HTML document text
        """
        title = f"RodiX Preview - {source_file.name}" if source_file is not None else "RodiX Preview"
        head_html = self.head_build(title, styles_text, styles_loaded, live)

        chrome = ""
        client = ""
        if live:
            chrome = self.header_build(source_file) + "\n" + self.template_load('html/toolbar.html')
            preview_settings = json.dumps({
                'pollInterval': int(self.poll_interval * 1000),
                'styleElementId': COMPONENT_STYLE_ID,
                'seq': event_seq,
            })
            client = f"""
    <script>
window.RODIX_PREVIEW = {preview_settings};
{self.template_load('js/preview-client.js')}
    </script>"""

        plugin_script = ""
        if plugin_js:
            plugin_script = f"""
    <script id="rodix-plugin">
{script_escape(plugin_js)}
    </script>"""

        return f"""<!DOCTYPE html>
<html lang="en">
{head_html}
<body>
{chrome}
    <div class="preview-content">
{converted_html}
    </div>

    <script id="rodix-emulator">
{script_escape(emulator_js)}
    </script>{plugin_script}{client}
</body>
</html>"""

    def errorPage_build(self, title: str, message: str, stack: Optional[str] = None) -> str:
        """Minimal page for a failed request (missing document, conversion failure)"""
        stack_html = f"\n        <pre>{html.escape(stack)}</pre>" if stack else ""
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>{html.escape(title)}</title>
    <style>
{self.template_load('css/preview.css')}
    </style>
</head>
<body>
    <div class="error-page">
        <h1>{html.escape(title)}</h1>
        <p>{html.escape(message)}</p>{stack_html}
    </div>
</body>
</html>"""

"""
Preview HTTP server

Single-threaded standard library HTTPServer; one request is handled at a
time, so conversions, style reloads and watcher scans never overlap.

Routes:
    GET  /                      assembled preview page
    GET  /api/status            context status
    GET  /api/converter/stats   conversion statistics
    POST /api/converter/reset   clear conversion statistics
    GET  /api/source            raw document
    GET  /api/converted         converted document
    GET  /api/styles            concatenated component stylesheets
    GET  /api/events?after=N    live-update events newer than N
"""

import json
from datetime import datetime
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Callable, Dict, List, Tuple
from urllib.parse import parse_qs, urlparse

from .context import DocumentNotFoundError, PreviewContext
from .converter import ConversionError
from .log import LOG

Query = Dict[str, List[str]]


class PreviewServer(HTTPServer):
    """HTTPServer carrying the preview context its handlers work on"""

    def __init__(self, address: Tuple[str, int], context: PreviewContext) -> None:
        self.context = context
        super().__init__(address, PreviewRequestHandler)


class PreviewRequestHandler(BaseHTTPRequestHandler):
    """Dispatches requests to the route table"""

    server_version = "rodixpreview"

    GET_ROUTES: Dict[str, str] = {
        '/': 'page_get',
        '/index.html': 'page_get',
        '/api/status': 'status_get',
        '/api/converter/stats': 'converterStats_get',
        '/api/source': 'source_get',
        '/api/converted': 'converted_get',
        '/api/styles': 'styles_get',
        '/api/events': 'events_get',
    }

    POST_ROUTES: Dict[str, str] = {
        '/api/converter/reset': 'converterReset_post',
    }

    @property
    def context(self) -> PreviewContext:
        return self.server.context

    def do_GET(self) -> None:
        self.route_dispatch(self.GET_ROUTES)

    def do_POST(self) -> None:
        self.route_dispatch(self.POST_ROUTES)

    def route_dispatch(self, routes: Dict[str, str]) -> None:
        url = urlparse(self.path)
        name = routes.get(url.path)
        if name is None:
            self._send_json(404, {'error': f"Not found: {url.path}"})
            return
        handler: Callable[[Query], None] = getattr(self, name)
        handler(parse_qs(url.query))

    # ---- responses ----

    def _send(self, code: int, body: str, content_type: str) -> None:
        encoded = body.encode('utf-8')
        self.send_response(code)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(encoded)))
        self.send_header("Cache-Control", "no-store")
        self.end_headers()
        self.wfile.write(encoded)

    def _send_html(self, code: int, body: str) -> None:
        self._send(code, body, "text/html; charset=utf-8")

    def _send_json(self, code: int, payload: Any) -> None:
        self._send(code, json.dumps(payload, indent=2), "application/json; charset=utf-8")

    def log_message(self, fmt: str, *args: Any) -> None:
        LOG(f"{self.address_string()} {fmt % args}", level=3)

    def conversion_stack(self) -> str:
        errors = self.context.stats.errors
        return errors[-1].stack if errors else ""

    # ---- routes ----

    def page_get(self, query: Query) -> None:
        assembler = self.context.assembler
        try:
            self._send_html(200, self.context.page_render(live=True))
        except DocumentNotFoundError as e:
            self._send_html(404, assembler.errorPage_build("Document not found", str(e)))
        except ConversionError as e:
            stack = self.conversion_stack() if self.context.settings.debug_mode else None
            self._send_html(500, assembler.errorPage_build("Conversion failed", str(e), stack))

    def status_get(self, query: Query) -> None:
        self._send_json(200, self.context.status_get())

    def converterStats_get(self, query: Query) -> None:
        self._send_json(200, self.context.converter.stats_get())

    def converterReset_post(self, query: Query) -> None:
        self.context.stats_reset()
        self._send_json(200, {'success': True, 'message': "Statistics reset"})

    def source_get(self, query: Query) -> None:
        try:
            content = self.context.document_read()
        except DocumentNotFoundError as e:
            self._send_json(404, {'error': str(e)})
            return
        stat = self.context.document_path.stat()
        self._send_json(200, {
            'file': str(self.context.document_path),
            'content': content,
            'size': stat.st_size,
            'lastModified': datetime.fromtimestamp(stat.st_mtime).isoformat(),
        })

    def converted_get(self, query: Query) -> None:
        try:
            content = self.context.document_convert()
        except DocumentNotFoundError as e:
            self._send_json(404, {'error': str(e)})
            return
        except ConversionError as e:
            self._send_json(500, {'error': str(e), 'stack': self.conversion_stack()})
            return
        self._send_json(200, {
            'file': str(self.context.document_path),
            'content': content,
            'stats': self.context.converter.stats_get(),
            'substitutions': self.context.converter.last_report.substitutions,
        })

    def styles_get(self, query: Query) -> None:
        self._send(200, self.context.styles_load().text, "text/css; charset=utf-8")

    def events_get(self, query: Query) -> None:
        try:
            after = int(query.get('after', ['0'])[0])
        except ValueError:
            self._send_json(400, {'error': "'after' must be an integer"})
            return
        watcher = self.context.watcher
        watcher.poll()
        self._send_json(200, {
            'seq': watcher.seq,
            'events': [event.to_dict() for event in watcher.events_since(after)],
        })


def preview_serve(context: PreviewContext, host: str, port: int) -> None:
    """Serve the preview until interrupted"""
    server = PreviewServer((host, port), context)
    LOG(f"RodiX preview running at http://{host}:{server.server_port}", severity="INFO")
    LOG("Press Ctrl+C to stop", severity="INFO")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        LOG("Shutting down", severity="INFO")
    finally:
        server.server_close()

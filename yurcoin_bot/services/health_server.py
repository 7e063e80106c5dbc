"""Liveness endpoint for hosting platforms.

`GET /` answers 200 with a plain-text banner while the bot process is up.
Anything else is a 404. The server runs on a daemon thread next to the poll
loop, so it dies with the process.
"""

from __future__ import annotations

import http.server
import socketserver
import threading
from typing import Tuple


BANNER = b"YurCoin bot is running"


class HealthRequestHandler(http.server.BaseHTTPRequestHandler):
    # Quiet by default. Toggle with http.verbose.
    verbose: bool = False

    def log_message(self, format: str, *args) -> None:  # noqa: A003 (format)
        if self.verbose:
            super().log_message(format, *args)

    def _respond(self, with_body: bool) -> None:
        if self.path.split("?", 1)[0] != "/":
            self.send_error(404)
            return
        self.send_response(200)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(BANNER)))
        self.send_header("Cache-Control", "no-store")
        self.end_headers()
        if with_body:
            self.wfile.write(BANNER)

    def do_GET(self) -> None:  # noqa: N802
        self._respond(with_body=True)

    def do_HEAD(self) -> None:  # noqa: N802
        self._respond(with_body=False)


class _Server(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True


def make_server(host: str = "0.0.0.0", port: int = 8080, verbose: bool = False) -> _Server:
    handler = type("_Handler", (HealthRequestHandler,), {"verbose": bool(verbose)})
    return _Server((str(host), int(port)), handler)


def start_in_background(host: str = "0.0.0.0", port: int = 8080, verbose: bool = False) -> Tuple[_Server, threading.Thread]:
    httpd = make_server(host, port, verbose)
    t = threading.Thread(target=httpd.serve_forever, name="health-http", daemon=True)
    t.start()
    return httpd, t

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlsplit

from .errors import FileSystemError
from .fs import FileSystem

HTML_CONTENT_TYPE = "text/html; charset=utf-8"
DEFAULT_CONTENT_TYPE = "application/octet-stream"
INDEX_NAME = "index"


@dataclass(frozen=True)
class Request:
    path: str
    method: str = "GET"


@dataclass(frozen=True)
class Response:
    status: int
    body: bytes = b""
    content_type: Optional[str] = None


NOT_FOUND = Response(404, b"Not Found", "text/plain; charset=utf-8")
METHOD_NOT_ALLOWED = Response(405, b"Method Not Allowed", "text/plain; charset=utf-8")


def clean_request_path(raw_path: str) -> Optional[str]:
    """Strip query and fragment, percent-decode, and reject anything that could escape the root."""
    try:
        path = unquote(urlsplit(raw_path).path)
    except ValueError:
        return None
    if "\x00" in path or "\\" in path:
        return None
    if ".." in path.split("/"):
        return None
    if not path.startswith("/"):
        path = "/" + path
    return path


def html_candidates(path: str) -> list[str]:
    if path == "/":
        return [f"/{INDEX_NAME}.html"]
    if path.endswith("/"):
        return [f"{path[:-1]}.html", f"{path}{INDEX_NAME}.html"]
    return [f"{path}.html"]


class RouteResolver:
    """Maps request paths to files of one build snapshot under ``output_dir``.

    Pretty URLs are tried first (``/about`` -> ``about.html``), then the request
    path itself as a raw file. Anything else, including read errors, is a 404.
    """

    def __init__(self, fs: FileSystem, output_dir: Path):
        self.fs = fs
        self.output_dir = output_dir

    def handle(self, request: Request) -> Response:
        if request.method not in {"GET", "HEAD"}:
            return METHOD_NOT_ALLOWED
        return self.resolve(request.path)

    def resolve(self, raw_path: str) -> Response:
        path = clean_request_path(raw_path)
        if path is None:
            return NOT_FOUND
        for candidate in html_candidates(path):
            data = self._read(candidate)
            if data is not None:
                return Response(200, data, HTML_CONTENT_TYPE)
        data = self._read(path)
        if data is not None:
            content_type, _ = mimetypes.guess_type(path)
            return Response(200, data, content_type or DEFAULT_CONTENT_TYPE)
        return NOT_FOUND

    def _read(self, rel_path: str) -> Optional[bytes]:
        target = self.output_dir / rel_path.lstrip("/")
        if not self.fs.is_file(target):
            return None
        try:
            return self.fs.read_bytes(target)
        except FileSystemError:
            return None


class PreviewRequestHandler(BaseHTTPRequestHandler):
    server_version = "hypertext"
    resolver: RouteResolver

    def do_GET(self) -> None:
        self._send(self.resolver.handle(Request(path=self.path, method="GET")), include_body=True)

    def do_HEAD(self) -> None:
        self._send(self.resolver.handle(Request(path=self.path, method="HEAD")), include_body=False)

    def _send(self, response: Response, include_body: bool) -> None:
        self.send_response(response.status)
        if response.content_type:
            self.send_header("Content-Type", response.content_type)
        self.send_header("Content-Length", str(len(response.body)))
        self.end_headers()
        if include_body:
            self.wfile.write(response.body)


def make_server(resolver: RouteResolver, host: str, port: int) -> ThreadingHTTPServer:
    handler = type("BoundPreviewRequestHandler", (PreviewRequestHandler,), {"resolver": resolver})
    return ThreadingHTTPServer((host, port), handler)

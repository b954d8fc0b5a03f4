"""An HTTP server exposing health, version, config and metrics endpoints."""

from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Callable, Mapping, MutableMapping, Optional, Protocol
from urllib.parse import urlsplit

from svcutils.metrics import DEFAULT_REGISTRY, Registry

_log = logging.getLogger(__name__)

_HEALTHCHECK_PATH = "/healthcheck"
_METRICS_PATH = "/metrics"
_VERSION_PATH = "/version"
_CONFIG_PATH = "/config"

_CONTENT_TYPE_HEADER = "Content-Type"
_CONTENT_TYPE_JSON = "application/json; charset=utf-8"
_CONTENT_TYPE_METRICS = "text/plain; version=0.0.4; charset=utf-8"
_CONTENT_TYPE_TEXT = "text/plain; charset=utf-8"


class _ResponseWriter(Protocol):
    headers: MutableMapping[str, str]

    def write_header(self, code: int) -> None: ...

    def write(self, data: bytes) -> Any: ...


Handler = Callable[[_ResponseWriter, Any], None]


@dataclass(frozen=True)
class BuildVersion:
    """Build information reported by the version endpoint."""

    build: str = ""
    version: str = ""
    timestamp: str = ""


def write_string_response(resp: _ResponseWriter, code: int, body: str) -> None:
    """Write a status code and a text body."""
    resp.write_header(code)
    resp.write(body.encode("utf-8"))


def _json_default(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def write_json_response(resp: _ResponseWriter, code: int, body: Any) -> None:
    """Write ``body`` as JSON; write a 500 with the error if it cannot be encoded."""
    resp.headers[_CONTENT_TYPE_HEADER] = _CONTENT_TYPE_JSON
    resp.write_header(code)
    try:
        text = json.dumps(body, default=_json_default, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as exc:
        write_string_response(resp, HTTPStatus.INTERNAL_SERVER_ERROR, str(exc))
        return
    write_string_response(resp, HTTPStatus.OK, text)


def default_handlers(
    build_version: Optional[BuildVersion] = None,
    registry: Optional[Registry] = None,
    config_provider: Optional[Callable[[], Mapping[str, Any]]] = None,
) -> dict[str, Handler]:
    """Return the health, version, config and metrics handlers keyed by path."""
    version = build_version or BuildVersion()
    metrics = DEFAULT_REGISTRY if registry is None else registry

    def healthcheck(resp: _ResponseWriter, request: Any) -> None:
        write_string_response(resp, HTTPStatus.OK, HTTPStatus.OK.phrase)

    def version_handler(resp: _ResponseWriter, request: Any) -> None:
        write_json_response(resp, HTTPStatus.OK, version)

    def config_handler(resp: _ResponseWriter, request: Any) -> None:
        try:
            config = dict(config_provider()) if config_provider is not None else {}
        except Exception as exc:
            write_string_response(resp, HTTPStatus.INTERNAL_SERVER_ERROR, str(exc))
            return
        write_json_response(resp, HTTPStatus.OK, config)

    def metrics_handler(resp: _ResponseWriter, request: Any) -> None:
        resp.headers[_CONTENT_TYPE_HEADER] = _CONTENT_TYPE_METRICS
        write_string_response(resp, HTTPStatus.OK, metrics.expose())

    return {
        _METRICS_PATH: metrics_handler,
        _HEALTHCHECK_PATH: healthcheck,
        _VERSION_PATH: version_handler,
        _CONFIG_PATH: config_handler,
    }


class _HTTPResponse:
    """Adapts a request handler to the response-writer interface."""

    def __init__(self, request: BaseHTTPRequestHandler) -> None:
        self._request = request
        self.headers: dict[str, str] = {}
        self._header_written = False

    def write_header(self, code: int) -> None:
        if self._header_written:
            return
        self._header_written = True
        self._request.send_response(int(code))
        for name, value in self.headers.items():
            self._request.send_header(name, value)
        self._request.end_headers()

    def write(self, data: bytes) -> None:
        self.write_header(HTTPStatus.OK)
        self._request.wfile.write(data)


def make_server(port: int, handlers: Mapping[str, Handler]) -> ThreadingHTTPServer:
    """Create (but do not start) a server routing exact paths to handlers."""
    routes = dict(handlers)

    class _RequestHandler(BaseHTTPRequestHandler):
        def _dispatch(self) -> None:
            path = urlsplit(self.path).path
            resp = _HTTPResponse(self)
            handler = routes.get(path)
            if handler is None:
                resp.headers[_CONTENT_TYPE_HEADER] = _CONTENT_TYPE_TEXT
                write_string_response(resp, HTTPStatus.NOT_FOUND, "404 page not found\n")
                return
            handler(resp, self)
            resp.write_header(HTTPStatus.OK)

        do_GET = do_POST = do_PUT = do_DELETE = do_PATCH = _dispatch

        def log_message(self, format: str, *args: Any) -> None:
            _log.debug("%s - " + format, self.address_string(), *args)

    return ThreadingHTTPServer(("", port), _RequestHandler)


def start_profiling_server(port: int, handlers: Optional[Mapping[str, Handler]] = None) -> None:
    """Serve the handlers on ``port`` until the server is shut down."""
    _log.info("Starting profiling server on port [%s]", port)
    try:
        server = make_server(port, handlers or {})
    except OSError as exc:
        _log.error("Failed to start profiling server. Error: %s", exc)
        raise RuntimeError(f"failed to start profiling server, {exc}") from exc
    with server:
        server.serve_forever()


def start_profiling_server_with_default_handlers(
    port: int,
    handlers: Optional[Mapping[str, Handler]] = None,
    build_version: Optional[BuildVersion] = None,
    registry: Optional[Registry] = None,
    config_provider: Optional[Callable[[], Mapping[str, Any]]] = None,
) -> None:
    """Serve ``handlers`` together with the metrics, health, version and config handlers."""
    routes = dict(handlers or {})
    routes.update(default_handlers(build_version, registry, config_provider))
    start_profiling_server(port, routes)
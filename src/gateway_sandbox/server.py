import json
import logging
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Self

from src.utils.factories import GatewayResponseFactory

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


def _default_routes() -> dict[tuple[str, str], tuple[int, dict | str]]:
    return {
        ("POST", "/HostedPaymentPage"): (200, GatewayResponseFactory.payment_created("TXN_SANDBOX_1")),
        ("PUT", "/Transaction"): (200, GatewayResponseFactory.transaction_updated("TXN_SANDBOX_1")),
        ("GET", "/Transaction/*"): (200, GatewayResponseFactory.transaction_details("TXN_SANDBOX_1")),
        ("POST", "/Transactions/GetTransactions"): (200, GatewayResponseFactory.transaction_list()),
    }


class _GatewayHandler(BaseHTTPRequestHandler):
    """Serves canned gateway responses and records every request."""

    def do_GET(self):
        self._handle()

    def do_POST(self):
        self._handle()

    def do_PUT(self):
        self._handle()

    def _handle(self):
        content_length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(content_length) if content_length else b""
        server_config = self.server.config  # type: ignore[attr-defined]

        path = self.path.split("?", 1)[0]
        if path.startswith(API_PREFIX):
            path = path[len(API_PREFIX):]

        try:
            json_body = json.loads(body) if body else None
        except ValueError:
            json_body = None

        with server_config["lock"]:
            server_config["requests"].append({
                "method": self.command,
                "path": path,
                "headers": dict(self.headers),
                "json": json_body,
            })
            route = self._match(server_config["routes"], self.command, path)

        if route is None:
            self._respond(404, {"success": False, "message": f"No route for {self.command} {path}"})
            return

        if server_config["response_delay"] > 0:
            time.sleep(server_config["response_delay"])

        self._respond(*route)

    @staticmethod
    def _match(routes, method: str, path: str):
        if (method, path) in routes:
            return routes[(method, path)]
        for (route_method, route_path), route in routes.items():
            if route_method == method and route_path.endswith("/*") and path.startswith(route_path[:-1]):
                return route
        return None

    def _respond(self, code: int, body: dict | str):
        raw = body if isinstance(body, str) else json.dumps(body, default=str)
        self.send_response(code)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(raw.encode())))
        self.end_headers()
        self.wfile.write(raw.encode())

    def log_message(self, format, *args):
        logger.debug("sandbox: " + format, *args)


class GatewaySandboxServer:
    """Local stand-in for the gateway API.

    Routes are keyed by (method, path) with the ``/api`` prefix stripped; a
    path ending in ``/*`` matches any suffix. Bodies may be dicts (sent as
    JSON) or raw strings.
    """

    def __init__(self, host: str = "127.0.0.1", port: int = 0):
        self._host = host
        self._port = port
        self._config = {
            "routes": _default_routes(),
            "response_delay": 0,
            "requests": [],
            "lock": threading.Lock(),
        }
        self._server: ThreadingHTTPServer | None = None
        self._thread: threading.Thread | None = None

    def set_response(self, method: str, path: str, status_code: int, body: dict | str) -> Self:
        with self._config["lock"]:
            self._config["routes"][(method.upper(), path)] = (status_code, body)
        return self

    def set_response_delay(self, seconds: float) -> Self:
        self._config["response_delay"] = seconds
        return self

    def start(self) -> None:
        self._server = ThreadingHTTPServer((self._host, self._port), _GatewayHandler)
        self._server.config = self._config  # type: ignore[attr-defined]
        self._port = self._server.server_address[1]
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        if self._server:
            self._server.shutdown()
            self._server.server_close()
            self._server = None
        if self._thread:
            self._thread.join(timeout=5)
            self._thread = None

    @property
    def api_url(self) -> str:
        return f"http://{self._host}:{self._port}{API_PREFIX}"

    @property
    def port(self) -> int:
        return self._port

    def get_requests(self) -> list[dict]:
        with self._config["lock"]:
            return list(self._config["requests"])

    def last_request(self) -> dict | None:
        with self._config["lock"]:
            return self._config["requests"][-1] if self._config["requests"] else None

    def clear_requests(self) -> None:
        with self._config["lock"]:
            self._config["requests"].clear()

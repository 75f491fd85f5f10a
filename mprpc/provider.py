"""Server side of RPC: publishes services and answers framed calls over TCP."""

from __future__ import annotations

import logging
import socket
import socketserver
import struct
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .application import get_config
from .config import Config
from .registry import Registry
from .service import MethodDescriptor, Service
from .wire import RpcHeader, WireError, unpack_request

_log = logging.getLogger(__name__)

_PREFIX = struct.Struct("<I")
_READ_TIMEOUT = 10.0
_POLL_INTERVAL = 0.1


@dataclass
class _ServiceInfo:
    service: Service
    methods: Dict[str, MethodDescriptor] = field(default_factory=dict)


def _recv_exact(sock: socket.socket, size: int) -> bytes:
    chunks: List[bytes] = []
    remaining = size
    while remaining > 0:
        chunk = sock.recv(min(remaining, 65536))
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def _read_frame(sock: socket.socket) -> bytes:
    prefix = _recv_exact(sock, _PREFIX.size)
    if len(prefix) < _PREFIX.size:
        return prefix
    (header_size,) = _PREFIX.unpack(prefix)
    header = _recv_exact(sock, header_size)
    try:
        args_size = RpcHeader.from_bytes(header).args_size
    except WireError:
        return prefix + header
    return prefix + header + _recv_exact(sock, args_size)


class _Handler(socketserver.BaseRequestHandler):
    server: "_Server"

    def handle(self) -> None:
        sock: socket.socket = self.request
        sock.settimeout(_READ_TIMEOUT)
        try:
            data = _read_frame(sock)
            if not data:
                return
            reply = self.server.provider.handle_message(data)
            if reply:
                sock.sendall(reply)
        except OSError as exc:
            _log.warning("connection error: %s", exc)
        finally:
            try:
                sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass


class _Server(socketserver.ThreadingTCPServer):
    daemon_threads = True
    allow_reuse_address = True

    def __init__(self, address, provider: "RpcProvider") -> None:
        self.provider = provider
        super().__init__(address, _Handler)


class RpcProvider:
    """Publishes services on a TCP node and registers their methods.

    The node listens on ``rpcserverip``:``rpcserverport`` from the
    configuration. Each connection carries one call; the provider answers
    and closes it.
    """

    def __init__(
        self, config: Optional[Config] = None, registry: Optional[Registry] = None
    ) -> None:
        self._config = config if config is not None else get_config()
        self._registry = (
            registry if registry is not None else Registry.from_config(self._config)
        )
        self._services: Dict[str, _ServiceInfo] = {}
        self._stopped = threading.Event()

    def notify_service(self, service: Service) -> None:
        """Publish *service*; a service already published under its name is kept."""
        name = service.service_name
        _log.info("service_name:%s", name)
        info = _ServiceInfo(service)
        for descriptor in service.descriptors():
            info.methods.setdefault(descriptor.name, descriptor)
            _log.info("method_name:%s", descriptor.name)
        self._services.setdefault(name, info)

    def handle_message(self, data: bytes) -> Optional[bytes]:
        """Run the call framed in *data* and return the encoded response.

        Returns None when the call cannot be decoded or routed, or when the
        method never signals completion.
        """
        try:
            header, args = unpack_request(data)
        except WireError as exc:
            _log.error("rpc header parse error (%s): %r", exc, bytes(data))
            return None

        _log.debug(
            "received service_name=%s method_name=%s args=%r",
            header.service_name,
            header.method_name,
            args,
        )

        info = self._services.get(header.service_name)
        if info is None:
            _log.error("%s is not exist!", header.service_name)
            return None
        method = info.methods.get(header.method_name)
        if method is None:
            _log.error("%s:%s is not exist!", header.service_name, header.method_name)
            return None

        try:
            request = method.request_type.from_bytes(args)
        except WireError:
            _log.error("request parse error, content:%r", args)
            return None
        response = method.response_type()
        replies: List[bytes] = []

        def done() -> None:
            try:
                replies.append(response.to_bytes())
            except (TypeError, ValueError):
                _log.error("serialize response_str error!")

        info.service.call_method(method, None, request, response, done)
        return replies[-1] if replies else None

    def run(self) -> None:
        """Serve published services until :meth:`stop` is called.

        When the configured port is 0 the port the system picks is the one
        registered.
        """
        ip = self._config.load("rpcserverip")
        port_text = self._config.load("rpcserverport")
        try:
            port = int(port_text)
        except ValueError as exc:
            raise ValueError(f"invalid rpcserverport: {port_text!r}") from exc

        server = _Server((ip, port), self)
        server.timeout = _POLL_INTERVAL
        try:
            bound_port = server.server_address[1]
            self._registry.start()
            self._register(ip, bound_port)
            print(f"RpcProvider start service at ip:{ip} port:{bound_port}")
            while not self._stopped.is_set():
                server.handle_request()
        finally:
            server.server_close()
            self._registry.close()
            self._stopped.clear()

    def stop(self) -> None:
        """Ask a running :meth:`run` to return."""
        self._stopped.set()

    def _register(self, ip: str, port: int) -> None:
        address = f"{ip}:{port}"
        for name, info in self._services.items():
            service_path = f"/{name}"
            self._registry.create(service_path)
            for method_name in info.methods:
                self._registry.create(f"{service_path}/{method_name}", address, ephemeral=True)
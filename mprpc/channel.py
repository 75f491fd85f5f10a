"""Client side of an RPC call: framing, service lookup and the TCP exchange."""

from __future__ import annotations

import functools
import logging
import socket
from typing import Callable, Optional, Tuple, Type

from .application import get_config
from .controller import RpcController
from .registry import Registry
from .service import MethodDescriptor, Service
from .wire import Message, WireError, pack_request

_log = logging.getLogger(__name__)

_RECV_CHUNK = 4096


def parse_host(data: str) -> Tuple[str, int]:
    """Split an ``ip:port`` address into its host and port."""
    ip, sep, port_text = data.partition(":")
    if not sep:
        raise ValueError(f"address has no port: {data!r}")
    try:
        port = int(port_text)
    except ValueError as exc:
        raise ValueError(f"invalid port in address: {data!r}") from exc
    if not 0 <= port <= 0xFFFF:
        raise ValueError(f"port out of range in address: {data!r}")
    return ip, port


def _errno(exc: OSError) -> int:
    return exc.errno or 0


class RpcChannel:
    """Sends calls to the node that the registry lists for each method.

    Every call looks the method up in the registry, opens a TCP connection,
    sends the framed request and reads the response until the server closes
    the connection.
    """

    def __init__(self, registry: Optional[Registry] = None) -> None:
        self._registry = registry

    @property
    def registry(self) -> Registry:
        """The registry used to find service nodes."""
        if self._registry is None:
            self._registry = Registry.from_config(get_config())
        return self._registry

    def call_method(
        self,
        method: MethodDescriptor,
        controller: Optional[RpcController],
        request: Message,
        response: Message,
    ) -> None:
        """Call *method* remotely with *request* and fill *response* in place.

        Failures are recorded on *controller*; without one they are logged.
        """
        own_controller = controller is None
        active = RpcController() if controller is None else controller
        self._invoke(method, active, request, response)
        if own_controller and active.failed:
            _log.warning("rpc %s failed: %s", method.full_name, active.error_text)

    def _invoke(
        self,
        method: MethodDescriptor,
        controller: RpcController,
        request: Message,
        response: Message,
    ) -> None:
        try:
            args = request.to_bytes()
        except (TypeError, ValueError):
            controller.set_failed("serialize request error!")
            return
        try:
            payload = pack_request(method.service_name, method.name, args)
        except (TypeError, ValueError):
            controller.set_failed("serialize rpc header error!")
            return

        _log.debug(
            "calling service_name=%s method_name=%s args=%r",
            method.service_name,
            method.name,
            args,
        )

        method_path = f"/{method.service_name}/{method.name}"
        registry = self.registry
        registry.start()
        host_data = registry.get_data(method_path)
        if not host_data:
            controller.set_failed(f"{method_path} is not exist!")
            return
        try:
            ip, port = parse_host(host_data)
        except ValueError:
            controller.set_failed(f"{method_path} address is invalid!")
            return

        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        except OSError as exc:
            controller.set_failed(f"create socket error! errno:{_errno(exc)}")
            return

        with sock:
            try:
                sock.connect((ip, port))
            except OSError as exc:
                controller.set_failed(f"connect error! errno:{_errno(exc)}")
                return
            try:
                sock.sendall(payload)
            except OSError as exc:
                controller.set_failed(f"send error! errno:{_errno(exc)}")
                return
            try:
                received = self._receive(sock)
            except OSError as exc:
                controller.set_failed(f"recv error! errno:{_errno(exc)}")
                return

        try:
            parsed = type(response).from_bytes(received)
        except WireError:
            text = received.decode("utf-8", errors="replace")
            controller.set_failed(f"parse error! response_str:{text}")
            return
        vars(response).update(vars(parsed))

    @staticmethod
    def _receive(sock: socket.socket) -> bytes:
        chunks = []
        while True:
            chunk = sock.recv(_RECV_CHUNK)
            if not chunk:
                return b"".join(chunks)
            chunks.append(chunk)


class Stub:
    """Client proxy of a service: one callable attribute per RPC method.

    Each method is called as ``(controller, request, response=None, done=None)``
    and returns the filled response.
    """

    def __init__(self, service_type: Type[Service], channel: RpcChannel) -> None:
        self._service_type = service_type
        self._channel = channel
        for descriptor in service_type.descriptors():
            setattr(self, descriptor.attribute, functools.partial(self._call, descriptor))

    def _call(
        self,
        method: MethodDescriptor,
        controller: Optional[RpcController],
        request: Message,
        response: Optional[Message] = None,
        done: Optional[Callable[[], None]] = None,
    ) -> Message:
        if response is None:
            response = method.response_type()
        self._channel.call_method(method, controller, request, response)
        if done is not None:
            done()
        return response

    def __repr__(self) -> str:
        return f"Stub({self._service_type.service_name})"
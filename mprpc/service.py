"""Declaration of RPC services and their methods."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Dict, Optional, Tuple, Type, TypeVar

from .controller import RpcController
from .wire import Message

F = TypeVar("F", bound=Callable[..., Any])

_MARK = "_mprpc_method"


@dataclass(frozen=True)
class MethodDescriptor:
    """Describes one RPC method of a service."""

    name: str
    service_name: str
    request_type: Type[Message]
    response_type: Type[Message]
    attribute: str
    index: int

    @property
    def full_name(self) -> str:
        return f"{self.service_name}.{self.name}"


def rpc_method(
    name: str, request_type: Type[Message], response_type: Type[Message]
) -> Callable[[F], F]:
    """Mark a service method as the RPC method *name*.

    The decorated function is called as ``(controller, request, response, done)``.
    """
    if not name:
        raise ValueError("an RPC method needs a name")
    for kind in (request_type, response_type):
        if not (isinstance(kind, type) and issubclass(kind, Message)):
            raise TypeError(f"{kind!r} is not a Message class")

    def decorate(func: F) -> F:
        setattr(func, _MARK, (name, request_type, response_type))
        return func

    return decorate


class Service:
    """Base class of RPC services.

    ``service_name`` defaults to the name of the first class in the
    hierarchy that is not given one explicitly; subclasses inherit it.
    """

    service_name: ClassVar[str] = ""
    _methods: ClassVar[Tuple[MethodDescriptor, ...]] = ()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if not cls.__dict__.get("service_name"):
            cls.service_name = getattr(cls, "service_name", "") or cls.__name__
        specs: Dict[str, Tuple[Type[Message], Type[Message], str]] = {}
        for klass in reversed(cls.__mro__):
            declared = set()
            for attribute, value in vars(klass).items():
                spec = getattr(value, _MARK, None)
                if spec is None:
                    continue
                name, request_type, response_type = spec
                if name in declared:
                    raise TypeError(f"{klass.__name__}: RPC method {name!r} declared twice")
                declared.add(name)
                specs[name] = (request_type, response_type, attribute)
        cls._methods = tuple(
            MethodDescriptor(name, cls.service_name, req, resp, attribute, index)
            for index, (name, (req, resp, attribute)) in enumerate(specs.items())
        )

    @classmethod
    def descriptors(cls) -> Tuple[MethodDescriptor, ...]:
        """Return the service's methods in declaration order."""
        return cls._methods

    def call_method(
        self,
        method: MethodDescriptor,
        controller: Optional[RpcController],
        request: Message,
        response: Message,
        done: Optional[Callable[[], None]] = None,
    ) -> None:
        """Run *method* of this service on *request*, filling *response*."""
        if method not in self._methods:
            raise ValueError(f"{method.full_name} is not a method of {self.service_name}")
        getattr(self, method.attribute)(controller, request, response, done)
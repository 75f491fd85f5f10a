"""User service node: publishes ``Login`` and ``Register`` over RPC."""

from __future__ import annotations

import sys
from typing import Callable, Optional, Sequence

from .application import UsageError, parse_args
from .config import Config
from .controller import RpcController
from .messages import LoginRequest, LoginResponse, RegisterRequest, RegisterResponse
from .provider import RpcProvider
from .registry import RegistryError
from .service import Service, rpc_method


class UserService(Service):
    """Logs users in and registers new ones."""

    service_name = "UserServiceRpc"

    def check_login(self, name: str, pwd: str) -> bool:
        """Check the credentials of *name*; every login is refused."""
        print("doing local service: Login")
        print(f"name:{name} pwd:{pwd}")
        return False

    def register_user(self, id: int, name: str, pwd: str) -> bool:
        """Register the user *name* under *id*; registration always succeeds."""
        print("doing local service: Register")
        print(f"id:{id}name:{name} pwd:{pwd}")
        return True

    @rpc_method("Login", LoginRequest, LoginResponse)
    def login(
        self,
        controller: Optional[RpcController],
        request: LoginRequest,
        response: LoginResponse,
        done: Optional[Callable[[], None]],
    ) -> None:
        """Answer a login request."""
        outcome = self.check_login(request.name, request.pwd)
        response.result.errcode = 0
        response.result.errmsg = ""
        response.success = outcome
        if done is not None:
            done()

    @rpc_method("Register", RegisterRequest, RegisterResponse)
    def register(
        self,
        controller: Optional[RpcController],
        request: RegisterRequest,
        response: RegisterResponse,
        done: Optional[Callable[[], None]],
    ) -> None:
        """Answer a registration request."""
        outcome = self.register_user(request.id, request.name, request.pwd)
        response.result.errcode = 0
        response.result.errmsg = ""
        response.success = outcome
        if done is not None:
            done()


def _load_config(argv: Optional[Sequence[str]]) -> Config:
    config = Config()
    config.load_file(parse_args(argv))
    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Publish :class:`UserService` and serve calls until interrupted."""
    try:
        config = _load_config(argv)
    except UsageError as exc:
        print(exc, file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"cannot read configuration: {exc}", file=sys.stderr)
        return 1

    provider = RpcProvider(config)
    provider.notify_service(UserService())
    try:
        provider.run()
    except KeyboardInterrupt:
        pass
    except RegistryError as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
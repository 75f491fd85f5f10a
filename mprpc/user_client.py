"""Command that logs in and registers a user through a user-service node."""

from __future__ import annotations

import sys
from typing import Optional, Sequence

from .application import UsageError, parse_args
from .channel import RpcChannel, Stub
from .config import Config
from .messages import LoginRequest, RegisterRequest
from .registry import Registry
from .user_service import UserService


def _load_config(argv: Optional[Sequence[str]]) -> Config:
    config = Config()
    config.load_file(parse_args(argv))
    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Call ``Login`` and then ``Register`` and print both results."""
    try:
        config = _load_config(argv)
    except UsageError as exc:
        print(exc, file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"cannot read configuration: {exc}", file=sys.stderr)
        return 1

    stub = Stub(UserService, RpcChannel(Registry.from_config(config)))
    pwd = "password"

    login = stub.login(None, LoginRequest(name="zhang san", pwd=pwd))
    if login.result.errcode == 0:
        print(f"rpc login response success:{int(login.success)}")
    else:
        print(f"rpc login response error : {login.result.errmsg}")

    registration = stub.register(None, RegisterRequest(id=2000, name="mprpc", pwd=pwd))
    if registration.result.errcode == 0:
        print(f"rpc register response success:{int(registration.success)}")
    else:
        print(f"rpc register response error : {registration.result.errmsg}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
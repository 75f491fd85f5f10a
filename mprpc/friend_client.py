"""Command that asks a friend-list node for the friends of a user."""

from __future__ import annotations

import sys
from typing import Optional, Sequence

from .application import UsageError, parse_args
from .channel import RpcChannel, Stub
from .config import Config
from .controller import RpcController
from .friend_service import FriendService
from .messages import GetFriendsListRequest
from .registry import Registry


def _load_config(argv: Optional[Sequence[str]]) -> Config:
    config = Config()
    config.load_file(parse_args(argv))
    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Call ``GetFriendsList`` for user 1000 and print the result."""
    try:
        config = _load_config(argv)
    except UsageError as exc:
        print(exc, file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"cannot read configuration: {exc}", file=sys.stderr)
        return 1

    stub = Stub(FriendService, RpcChannel(Registry.from_config(config)))
    controller = RpcController()
    response = stub.get_friends_list(controller, GetFriendsListRequest(userid=1000))

    if controller.failed:
        print(controller.error_text)
    elif response.result.errcode == 0:
        print("rpc GetFriendsList response success!")
        for index, name in enumerate(response.friends, start=1):
            print(f"index:{index} name:{name}")
    else:
        print(f"rpc GetFriendsList response error : {response.result.errmsg}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
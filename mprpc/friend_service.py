"""Friend-list service node: publishes ``GetFriendsList`` over RPC."""

from __future__ import annotations

import sys
from typing import Callable, List, Optional, Sequence

from .application import UsageError, parse_args
from .config import Config
from .controller import RpcController
from .messages import GetFriendsListRequest, GetFriendsListResponse
from .provider import RpcProvider
from .registry import RegistryError
from .service import Service, rpc_method


class FriendService(Service):
    """Answers friend-list queries for a user."""

    service_name = "FiendServiceRpc"

    def friends_of(self, userid: int) -> List[str]:
        """Return the friends of the user *userid*."""
        print(f"do GetFriendsList service! userid:{userid}")
        return ["gao yang", "liu hong", "wang shuo"]

    @rpc_method("GetFriendsList", GetFriendsListRequest, GetFriendsListResponse)
    def get_friends_list(
        self,
        controller: Optional[RpcController],
        request: GetFriendsListRequest,
        response: GetFriendsListResponse,
        done: Optional[Callable[[], None]],
    ) -> None:
        """Fill *response* with the friends of ``request.userid``."""
        friends = self.friends_of(request.userid)
        response.result.errcode = 0
        response.result.errmsg = ""
        response.friends.extend(friends)
        if done is not None:
            done()


def _load_config(argv: Optional[Sequence[str]]) -> Config:
    config = Config()
    config.load_file(parse_args(argv))
    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Publish :class:`FriendService` and serve calls until interrupted."""
    try:
        config = _load_config(argv)
    except UsageError as exc:
        print(exc, file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"cannot read configuration: {exc}", file=sys.stderr)
        return 1

    provider = RpcProvider(config)
    provider.notify_service(FriendService())
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
from mprpc.config import Config
from mprpc.friend_service import FriendService, main
from mprpc.messages import GetFriendsListRequest, GetFriendsListResponse
from mprpc.provider import RpcProvider
from mprpc.registry import Registry
from mprpc.wire import pack_request

FRIENDS = ["gao yang", "liu hong", "wang shuo"]


def test_friends_of_returns_fixed_list(capsys):
    assert FriendService().friends_of(1000) == FRIENDS
    assert "do GetFriendsList service! userid:1000" in capsys.readouterr().out


def test_get_friends_list_fills_response_and_calls_done():
    calls = []
    response = GetFriendsListResponse()
    FriendService().get_friends_list(
        None, GetFriendsListRequest(userid=7), response, lambda: calls.append(True)
    )
    assert response.friends == FRIENDS
    assert response.result.errcode == 0
    assert response.result.errmsg == ""
    assert calls == [True]


def test_descriptor_names():
    descriptors = FriendService.descriptors()
    assert [d.name for d in descriptors] == ["GetFriendsList"]
    assert descriptors[0].service_name == "FiendServiceRpc"


def test_served_through_provider(tmp_path):
    provider = RpcProvider(Config(), Registry(tmp_path))
    provider.notify_service(FriendService())
    request = GetFriendsListRequest(userid=1000).to_bytes()
    reply = provider.handle_message(pack_request("FiendServiceRpc", "GetFriendsList", request))
    decoded = GetFriendsListResponse.from_bytes(reply)
    assert decoded.friends == FRIENDS
    assert decoded.result.errcode == 0


def test_unknown_method_is_not_answered(tmp_path):
    provider = RpcProvider(Config(), Registry(tmp_path))
    provider.notify_service(FriendService())
    assert provider.handle_message(pack_request("FiendServiceRpc", "Missing", b"")) is None


def test_main_without_arguments_fails(capsys):
    assert main([]) == 1
    assert "format: command -i <configfile>" in capsys.readouterr().err


def test_main_with_missing_config_fails(tmp_path):
    assert main(["-i", str(tmp_path / "absent.conf")]) == 1
import threading
import time

import pytest

from mprpc.config import Config
from mprpc.friend_client import main
from mprpc.friend_service import FriendService
from mprpc.provider import RpcProvider
from mprpc.registry import Registry


def _wait_for(root, path):
    watcher = Registry(root)
    watcher.start()
    deadline = time.monotonic() + 5
    while not watcher.get_data(path):
        if time.monotonic() > deadline:
            raise RuntimeError("service node did not register")
        time.sleep(0.02)


@pytest.fixture
def registry_root(tmp_path):
    root = tmp_path / "registry"
    config = Config()
    config.parse(f"rpcserverip=127.0.0.1\nrpcserverport=0\nregistryroot={root}\n")
    provider = RpcProvider(config, Registry(root))
    provider.notify_service(FriendService())
    thread = threading.Thread(target=provider.run, daemon=True)
    thread.start()
    _wait_for(root, "/FiendServiceRpc/GetFriendsList")
    yield root
    provider.stop()
    thread.join(5)


def _client_config(tmp_path, root):
    path = tmp_path / "client.conf"
    path.write_text(f"registryroot={root}\n", encoding="utf-8")
    return str(path)


def test_lists_friends_from_running_node(tmp_path, registry_root, capsys):
    assert main(["-i", _client_config(tmp_path, registry_root)]) == 0
    out = capsys.readouterr().out
    assert "rpc GetFriendsList response success!" in out
    assert "index:1 name:gao yang" in out
    assert "index:2 name:liu hong" in out
    assert "index:3 name:wang shuo" in out


def test_reports_missing_service(tmp_path, capsys):
    root = tmp_path / "empty-registry"
    assert main(["-i", _client_config(tmp_path, root)]) == 0
    assert "/FiendServiceRpc/GetFriendsList is not exist!" in capsys.readouterr().out


def test_usage_error_without_arguments(capsys):
    assert main([]) == 1
    assert "format: command -i <configfile>" in capsys.readouterr().err
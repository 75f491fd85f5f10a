import pytest

from mprpc.config import Config
from mprpc.registry import Registry, RegistryError


@pytest.fixture
def registry(tmp_path):
    reg = Registry(tmp_path / "reg")
    reg.start()
    yield reg
    reg.close()


def test_create_and_get_data(registry):
    assert registry.create("/UserServiceRpc") is True
    assert registry.create("/UserServiceRpc/Login", "127.0.0.1:8000") is True
    assert registry.get_data("/UserServiceRpc/Login") == "127.0.0.1:8000"


def test_node_without_data_is_empty(registry):
    registry.create("/FiendServiceRpc", None)
    assert registry.get_data("/FiendServiceRpc") == ""


def test_existing_node_is_left_alone(registry):
    registry.create("/svc", "first")
    assert registry.create("/svc", "second") is False
    assert registry.get_data("/svc") == "first"


def test_missing_node_gives_empty_string(registry):
    assert registry.get_data("/nothing/here") == ""


def test_create_without_parent_fails(registry):
    with pytest.raises(RegistryError):
        registry.create("/absent/Login", "127.0.0.1:8000")


@pytest.mark.parametrize("path", ["relative", "/a//b", "/a/", "/../x", "/.data"])
def test_invalid_paths_are_rejected(registry, path):
    with pytest.raises(RegistryError):
        registry.create(path, "x")


def test_operations_need_start(tmp_path):
    reg = Registry(tmp_path)
    with pytest.raises(RegistryError):
        reg.get_data("/svc")
    with pytest.raises(RegistryError):
        reg.create("/svc")


def test_ephemeral_nodes_vanish_on_close(tmp_path):
    owner = Registry(tmp_path)
    owner.start()
    owner.create("/Svc")
    owner.create("/Svc/Login", "127.0.0.1:8000", ephemeral=True)

    with Registry(tmp_path) as observer:
        assert observer.get_data("/Svc/Login") == "127.0.0.1:8000"
        owner.close()
        assert observer.get_data("/Svc/Login") == ""
        assert observer.create("/Svc") is False


def test_ephemeral_node_cannot_have_children(registry):
    registry.create("/eph", "data", ephemeral=True)
    with pytest.raises(RegistryError):
        registry.create("/eph/child")


def test_bytes_data_round_trip(registry):
    registry.create("/raw", b"10.0.0.1:9000")
    assert registry.get_data("/raw") == "10.0.0.1:9000"


def test_from_config_uses_registryroot(tmp_path):
    config = Config()
    config.parse(f"registryroot={tmp_path / 'root'}\n")
    reg = Registry.from_config(config)
    assert reg.root == tmp_path / "root"


def test_from_config_root_depends_on_address():
    first = Config()
    first.parse("zookeeperip=127.0.0.1\nzookeeperport=2181\n")
    second = Config()
    second.parse("zookeeperip=127.0.0.1\nzookeeperport=2182\n")
    root_a = Registry.from_config(first).root
    root_b = Registry.from_config(second).root
    assert root_a != root_b
    assert "2181" in root_a.name
"""A service registry that keeps its nodes in a directory tree.

Nodes are addressed by absolute slash-separated paths such as
``/UserServiceRpc/Login``. Each node is a directory under the registry root
and holds its data in a file. Ephemeral nodes belong to the registry
instance that created them and are removed when it is closed.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional, Union

from .config import Config

_DATA_FILE = ".data"
_EPHEMERAL_MARK = ".ephemeral"

_log = logging.getLogger(__name__)


class RegistryError(Exception):
    """Raised when the registry cannot be used or a node cannot be created."""


class Registry:
    """Client of a directory-backed registry of service addresses."""

    def __init__(self, root: Union[str, "os.PathLike[str]"]) -> None:
        self.root = Path(root)
        self._started = False
        self._ephemeral: List[Path] = []

    @classmethod
    def from_config(cls, config: Config) -> "Registry":
        """Build a registry from *config*.

        The ``registryroot`` setting names the root directory. Without it the
        root is a directory in the system temporary directory named after the
        ``zookeeperip`` and ``zookeeperport`` settings.
        """
        root = config.load("registryroot")
        if root:
            return cls(root)
        host = config.load("zookeeperip")
        port = config.load("zookeeperport")
        return cls(Path(tempfile.gettempdir()) / f"mprpc-registry-{host}-{port}")

    def start(self) -> None:
        """Open the registry, creating its root directory if needed."""
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise RegistryError(f"cannot open registry at {self.root}: {exc}") from exc
        self._started = True
        _log.info("registry opened at %s", self.root)

    def _node(self, path: str) -> Path:
        if not self._started:
            raise RegistryError("registry is not started")
        if not isinstance(path, str) or not path.startswith("/"):
            raise RegistryError(f"invalid node path: {path!r}")
        if path == "/":
            return self.root
        parts = path[1:].split("/")
        if any(not part or part.startswith(".") for part in parts):
            raise RegistryError(f"invalid node path: {path!r}")
        return self.root.joinpath(*parts)

    def create(
        self,
        path: str,
        data: Union[str, bytes, None] = None,
        ephemeral: bool = False,
    ) -> bool:
        """Create the node at *path* holding *data*.

        Nothing happens if the node already exists. Returns whether a node
        was created.
        """
        node = self._node(path)
        if node.is_dir():
            return False
        parent = node.parent
        if not parent.is_dir():
            raise RegistryError(f"cannot create {path}: parent node does not exist")
        if (parent / _EPHEMERAL_MARK).exists():
            raise RegistryError(f"cannot create {path}: ephemeral nodes have no children")
        if isinstance(data, str):
            payload = data.encode("utf-8")
        else:
            payload = bytes(data or b"")
        try:
            node.mkdir()
        except FileExistsError:
            return False
        except OSError as exc:
            raise RegistryError(f"cannot create {path}: {exc}") from exc
        try:
            (node / _DATA_FILE).write_bytes(payload)
            if ephemeral:
                (node / _EPHEMERAL_MARK).touch()
        except OSError as exc:
            shutil.rmtree(node, ignore_errors=True)
            raise RegistryError(f"cannot create {path}: {exc}") from exc
        if ephemeral:
            self._ephemeral.append(node)
        _log.info("node created: %s", path)
        return True

    def get_data(self, path: str) -> str:
        """Return the data of the node at *path*, or an empty string if there is none."""
        node = self._node(path)
        try:
            return (node / _DATA_FILE).read_bytes().decode("utf-8", errors="replace")
        except OSError:
            _log.info("no data for node: %s", path)
            return ""

    def close(self) -> None:
        """Remove the ephemeral nodes this registry created and close it."""
        while self._ephemeral:
            shutil.rmtree(self._ephemeral.pop(), ignore_errors=True)
        self._started = False

    def __enter__(self) -> "Registry":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        state: Optional[str] = "started" if self._started else "closed"
        return f"Registry(root={str(self.root)!r}, {state})"
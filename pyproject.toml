[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mprpc"
version = "0.1.0"
description = "A small RPC framework: services published over TCP and found through a service registry"
requires-python = ">=3.10"
dependencies = []
keywords = ["rpc", "remote procedure call", "service discovery", "registry", "tcp", "protobuf"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
mprpc-friend-provider = "mprpc.friend_service:main"
mprpc-user-provider = "mprpc.user_service:main"
mprpc-friend-client = "mprpc.friend_client:main"
mprpc-user-client = "mprpc.user_client:main"

[tool.hatch.build.targets.wheel]
packages = ["mprpc"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true

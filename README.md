# mprpc

A small remote procedure call framework with no dependencies outside the
standard library. A provider publishes services over TCP and records
where each method lives in a service registry; a caller looks the method
up in the registry, sends one request and reads one response.

## Install

    pip install .

For running the tests:

    pip install ".[test]"
    pytest

## Configuration

Every program is started with `-i <configfile>`. The file holds
`key=value` lines. Blank lines and lines whose first non-space character
is `#` are skipped, lines without `=` are ignored, spaces around keys and
values are trimmed, and the first value given for a key wins:

    # where this node serves requests
    rpcserverip=127.0.0.1
    rpcserverport=8000
    # where the service registry lives
    zookeeperip=127.0.0.1
    zookeeperport=2181

`mprpc.config.Config` reads such files (`load_file(path)`) or text
(`parse(text)`); `load(key)` returns a value, or an empty string for a
missing key. `mprpc.application.init(argv)` parses `-i` from the command
line into a shared configuration that `get_config()` returns; a command
line without a configuration file raises `UsageError`.

A `rpcserverport` of `0` lets the system choose the port; the chosen port
is the one registered.

## The service registry

`mprpc.registry.Registry` keeps nodes such as `/UserServiceRpc/Login` as
directories under a root directory, each holding its data. The root is
the `registryroot` setting if given; otherwise it is a directory named
`mprpc-registry-<zookeeperip>-<zookeeperport>` in the system temporary
directory. `create(path, data, ephemeral)` does nothing if the node
already exists; ephemeral nodes are removed when the registry that made
them is closed. `get_data(path)` returns a node's data, or an empty
string.

Each published method is registered under `/<service>/<method>` with the
provider's `ip:port` as its data; `mprpc.channel.parse_host` reads that
value back.

## Wire format

Messages are encoded in protocol-buffer wire format by `mprpc.wire`:
subclass `Message` and declare fields with `Field(number, kind, ...)`.
A request is a 4-byte little-endian header length, the encoded
`RpcHeader` (service name, method name, argument size) and the encoded
request message; `pack_request` and `unpack_request` build and read that
frame. The provider answers with the encoded response message and closes
the connection; the caller reads until the connection is closed.

## Writing a service

Subclass `mprpc.service.Service` and declare each remote method with
`rpc_method(name, request_type, response_type)`. A method receives the
controller, the decoded request, an empty response to fill in, and a
`done` callback that sends the response back.

Publish instances with `RpcProvider.notify_service(service)` and serve
with `RpcProvider.run()`, which returns after `stop()`. On the calling
side, an `RpcChannel` built on a `Registry` finds the provider and
performs the call, recording failures on an `RpcController`
(`failed`, `error_text`). A `Stub(service_type, channel)` has one
attribute per method, called as `(controller, request)` and returning
the filled response.

## Example programs

Two example services come with the package, each with a matching
client:

    mprpc-friend-provider -i rpc.conf
    mprpc-friend-client -i rpc.conf

    mprpc-user-provider -i rpc.conf
    mprpc-user-client -i rpc.conf

The providers serve until interrupted. The friend client asks for the
friends of user 1000 and prints each name with its index, or the error
text from its `RpcController` when the call fails. The user client calls
`Login` and `Register` and prints both results; it passes no controller,
so a failed call is reported through the `logging` module.

## What the package does not do

- The registry is a directory tree on the local file system, not a
  network service: providers and callers find each other only when they
  share that directory.
- There is no log-file writer. The framework reports through Python's
  standard `logging` module and writes nothing to disk unless the
  application configures a handler.
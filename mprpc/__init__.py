"""A small RPC framework: services over TCP, found through a directory-backed registry."""

__version__ = "0.1.0"
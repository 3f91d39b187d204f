"""jsonproto - Schema-driven decoding of JSON token streams into typed messages."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("jsonproto")
except PackageNotFoundError:
    __version__ = "(local)"

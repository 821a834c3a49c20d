"""Idempotent host provisioning tools."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("hostprov")
except PackageNotFoundError:
    __version__ = "0.0.0.dev"

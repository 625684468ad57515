"""Pipeshell - a small line-oriented command interpreter with pipes and redirection."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pipeshell")
except PackageNotFoundError:
    # package is not installed
    pass

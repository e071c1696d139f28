"""Installed package version, resolved once at import."""

from importlib.metadata import PackageNotFoundError, version

DISTRIBUTION = "neptune-graphql"

try:
    __version__ = version(DISTRIBUTION)
except PackageNotFoundError:
    # Source tree on sys.path without an install
    __version__ = "0.0.0+unknown"

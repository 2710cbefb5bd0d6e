"""
Version information for the Ault SDK.
"""
import importlib.metadata
import pathlib

import tomli

DISTRIBUTION_NAME = "ault-sdk"
FALLBACK_VERSION = "0.1.0"


def _read_version() -> str:
    """Installed metadata first, then ``pyproject.toml`` for source checkouts."""
    try:
        return importlib.metadata.version(DISTRIBUTION_NAME)
    except importlib.metadata.PackageNotFoundError:
        pass

    pyproject = pathlib.Path(__file__).parent.parent / "pyproject.toml"
    try:
        with pyproject.open("rb") as f:
            return tomli.load(f)["project"]["version"]
    except (FileNotFoundError, KeyError, tomli.TOMLDecodeError):
        return FALLBACK_VERSION


__version__ = _read_version()

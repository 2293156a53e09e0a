from __future__ import annotations

import importlib.metadata

from . import __version__


def get_version_string() -> str:
    try:
        version = importlib.metadata.version("spantext")
    except importlib.metadata.PackageNotFoundError:
        version = __version__
    return f"spantext {version}"

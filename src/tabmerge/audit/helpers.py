"""Run identifiers and environment capture for run manifests."""

import importlib.metadata
import platform
import secrets
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

__all__ = ["describe_environment", "new_run_id"]


def new_run_id() -> str:
    """Return a sortable, unique run id such as "20260203T120000Z-1a2b3c4d"."""
    return f"{datetime.now(UTC):%Y%m%dT%H%M%SZ}-{secrets.token_hex(4)}"


def _installed_version(distribution: str) -> str:
    try:
        return importlib.metadata.version(distribution)
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def describe_environment(dependencies: Iterable[str]) -> dict[str, Any]:
    """Describe the interpreter and the installed versions of tabmerge's stack.

    Parameters
    ----------
    dependencies : Iterable[str]
        Distribution names to report; missing ones are reported as "unknown".

    Returns
    -------
    dict[str, Any]
        ``python_version``, ``platform``, ``package_version`` and
        ``dependencies``.
    """
    return {
        "python_version": platform.python_version(),
        "platform": f"{platform.system()}-{platform.release()}-{platform.machine()}",
        "package_version": _installed_version("tabmerge"),
        "dependencies": {name: _installed_version(name) for name in dependencies},
    }

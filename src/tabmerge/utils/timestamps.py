"""UTC timestamps in the ISO 8601 "Z" form used throughout the audit trail."""

from datetime import UTC, datetime
from pathlib import Path

__all__ = ["file_mtime", "utc_now"]


def _as_z(moment: datetime) -> str:
    return moment.isoformat().replace("+00:00", "Z")


def utc_now() -> str:
    """Current time, e.g. "2026-02-03T12:34:56.123456Z"."""
    return _as_z(datetime.now(UTC))


def file_mtime(path: Path) -> str | None:
    """Modification time of a source file to the second, or None if unreadable."""
    try:
        stamp = path.stat().st_mtime
    except OSError:
        return None
    return _as_z(datetime.fromtimestamp(int(stamp), UTC))

"""Audit trail for merge runs.

A run directory holds events.jsonl, appended while the run progresses,
and run.json, written when it finishes. RunContext drives both.
"""

from tabmerge.audit.context import RunContext
from tabmerge.audit.helpers import new_run_id
from tabmerge.audit.logger import AuditLogger
from tabmerge.audit.manifest import ManifestWriter

__all__ = [
    "AuditLogger",
    "ManifestWriter",
    "RunContext",
    "new_run_id",
]

"""Naming conventions shared by artifact creation and cleanup.

Candidates are matched against live metadata by exact string equality, so the
path joins here must be the same ones used when the artifacts were created.
"""

from __future__ import annotations

import re

COLUMNAR_TABLE_PREFIX = "KYLIN_"
JOB_DIR_PREFIX = "kylin-"
STAGING_TABLE_PREFIX = "kylin_intermediate_"

UUID_LENGTH = 36
_UUID_RX = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"
)


def normalize_root(root: str) -> str:
    """Return the working root without trailing slashes."""
    return root.rstrip("/")


def child_path(root: str, name: str) -> str:
    """Join a child name under the working root."""
    return f"{normalize_root(root)}/{name}"


def job_working_dir(root: str, job_id: str) -> str:
    """Return the canonical working directory of a job."""
    return child_path(root, f"{JOB_DIR_PREFIX}{job_id}")


def staging_table_segment_id(
    table_name: str, prefix: str = STAGING_TABLE_PREFIX
) -> str | None:
    """
    Extract the owning segment id embedded at the end of a staging table name.

    Staging tables cannot contain hyphens, so the segment UUID is written with
    underscores. Returns None when the name is too short to carry a UUID after
    the prefix or when the suffix is not a canonical lowercase UUID.
    """
    if not table_name.startswith(prefix):
        return None
    if len(table_name) - len(prefix) < UUID_LENGTH:
        return None
    candidate = table_name[-UUID_LENGTH:].replace("_", "-")
    if not _UUID_RX.fullmatch(candidate):
        return None
    return candidate

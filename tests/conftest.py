from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

# Ensure tests always import the local src tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from storagegc.core.errors import StagingStatementError  # noqa: E402

ROOT_DIR = "/kylin/kylin_metadata"


class FakeMetadataStore:
    def __init__(self, jobs=(), cubes=(), error: Exception | None = None):
        self.jobs = list(jobs)
        self.cubes = list(cubes)
        self.error = error
        self.calls: list[str] = []

    def list_jobs(self):
        self.calls.append("list_jobs")
        if self.error:
            raise self.error
        return list(self.jobs)

    def list_cubes(self):
        self.calls.append("list_cubes")
        return list(self.cubes)


class FakeColumnarStore:
    def __init__(self, tables=(), *, enabled=True, fail_on=(), hang=None):
        self.tables = dict(tables)
        self.enabled = {name: enabled for name in self.tables}
        self.fail_on = set(fail_on)
        self.hang = hang
        self.calls: list[str] = []

    def list_tables(self, prefix):
        self.calls.append(f"list_tables:{prefix}")
        return list(self.tables.items())

    def table_exists(self, name):
        return name in self.tables

    def is_enabled(self, name):
        return self.enabled.get(name, False)

    def disable(self, name):
        self.calls.append(f"disable:{name}")
        self.enabled[name] = False

    def drop(self, name):
        if self.hang is not None and name in self.hang["names"]:
            self.hang["event"].wait(5)
        if name in self.fail_on:
            raise RuntimeError(f"cannot drop {name}")
        self.calls.append(f"drop:{name}")
        self.tables.pop(name, None)


class FakeFileStore:
    def __init__(self, children=(), *, existing=None, fail_on=()):
        self.children = list(children)
        self.existing = set(existing) if existing is not None else None
        self.fail_on = set(fail_on)
        self.deleted: list[str] = []
        self.calls: list[str] = []

    def list_children(self, root):
        self.calls.append(f"list_children:{root}")
        return list(self.children)

    def exists(self, path):
        if self.existing is None:
            return True
        return path in self.existing

    def delete(self, path, recursive=True):
        assert recursive is True
        if path in self.fail_on:
            raise OSError(f"permission denied: {path}")
        self.deleted.append(path)


class FakeStagingDb:
    def __init__(self, tables=(), *, fail=False, error: Exception | None = None):
        self.tables = list(tables)
        self.fail = fail
        self.error = error
        self.batches: list[list[str]] = []
        self.calls: list[str] = []

    def list_tables(self, database):
        self.calls.append(f"list_tables:{database}")
        return list(self.tables)

    def execute_batch(self, statements):
        self.batches.append(list(statements))
        if self.error is not None:
            raise self.error
        if self.fail:
            raise StagingStatementError("ParseException: line 1")


@pytest.fixture
def root_dir() -> str:
    return ROOT_DIR


@pytest.fixture
def fakes():
    """Factories for in-memory backend doubles."""
    from types import SimpleNamespace

    return SimpleNamespace(
        metadata=FakeMetadataStore,
        columnar=FakeColumnarStore,
        files=FakeFileStore,
        staging=FakeStagingDb,
    )


@pytest.fixture
def propagating_logs(monkeypatch):
    """Let caplog see `storagegc` records even after the CLI configured logging."""
    monkeypatch.setattr(logging.getLogger("storagegc"), "propagate", True)

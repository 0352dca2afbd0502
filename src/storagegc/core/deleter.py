"""Deletion execution with per-item failure isolation.

Deletions never raise to the caller: each candidate yields a DeleteResult, so
one failing (or hanging) artifact cannot stop the rest of a batch.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Callable, Iterable

from storagegc.core.errors import PerItemDeleteTimeout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeleteResult:
    """Result for a single artifact deletion."""

    target: str
    deleted: bool
    timed_out: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and not self.timed_out


@dataclass(frozen=True)
class PassResult:
    """Outcome of one cleanup pass (one storage domain)."""

    domain: str
    candidates: list[str]
    results: list[DeleteResult] | None = None
    degraded: bool = False
    error: str | None = None

    @property
    def failures(self) -> list[DeleteResult]:
        return [r for r in self.results or [] if not r.ok]


def delete_each(
    targets: Iterable[str],
    delete_one: Callable[[str], bool],
) -> list[DeleteResult]:
    """
    Run `delete_one` synchronously for every target.

    `delete_one` returns True if something was removed and False if the
    artifact was already gone. Exceptions are logged and recorded per target.
    """
    results: list[DeleteResult] = []
    for target in targets:
        try:
            removed = delete_one(target)
            results.append(DeleteResult(target=target, deleted=removed))
        except Exception as e:  # noqa: BLE001
            logger.error("Failed to delete %s: %s", target, e)
            results.append(DeleteResult(target=target, deleted=False, error=str(e)))
    return results


class BoundedDeleter:
    """
    Serialized deletions, each awaited under a deadline.

    Every unit of work is submitted to a single background worker. If the
    deadline passes, the future is cancelled and the worker is abandoned; the
    next item gets a fresh worker so a hung call cannot queue up later items.

    An abandoned thread keeps running: `concurrent.futures` joins worker
    threads at interpreter exit, so a drop that never returns still delays
    process exit. Only the adapter's own per-call timeout (the HTTP timeout
    for HBase REST) bounds that wait.
    """

    def __init__(self, timeout_seconds: float) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        self.timeout_seconds = timeout_seconds
        self._pool: ThreadPoolExecutor | None = None

    def _worker(self) -> ThreadPoolExecutor:
        if self._pool is None:
            self._pool = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="storagegc-delete"
            )
        return self._pool

    def _abandon_worker(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=False, cancel_futures=True)
            self._pool = None

    def close(self) -> None:
        """Release the worker once the batch is done."""
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None

    def __enter__(self) -> BoundedDeleter:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def delete(self, target: str, delete_one: Callable[[str], bool]) -> DeleteResult:
        """Delete one target, giving up after the deadline."""
        future: Future[bool] = self._worker().submit(delete_one, target)
        try:
            removed = future.result(timeout=self.timeout_seconds)
        except FutureTimeoutError:
            future.cancel()
            self._abandon_worker()
            err = PerItemDeleteTimeout(
                f"deleting {target} took more than {self.timeout_seconds:g}s"
            )
            logger.warning("It fails to delete %s: %s", target, err)
            return DeleteResult(
                target=target, deleted=False, timed_out=True, error=str(err)
            )
        except Exception as e:  # noqa: BLE001
            logger.error("Failed to delete %s: %s", target, e)
            return DeleteResult(target=target, deleted=False, error=str(e))
        return DeleteResult(target=target, deleted=removed)

    def delete_all(
        self, targets: Iterable[str], delete_one: Callable[[str], bool]
    ) -> list[DeleteResult]:
        """Delete targets one at a time, each with its own deadline."""
        return [self.delete(target, delete_one) for target in targets]

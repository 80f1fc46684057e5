"""Shared test fixtures."""

from concurrent.futures import Executor, Future
from datetime import datetime

import mongomock

from log_governance.repositories.event_store import EventStore


class ImmediateExecutor(Executor):
    """Runs submitted work inline so fire-and-forget paths are deterministic."""

    def submit(self, fn, *args, **kwargs):
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)
        return future


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def make_store(clock=None, **kwargs) -> EventStore:
    db = mongomock.MongoClient()["log_governance_test"]
    if clock is not None:
        kwargs["clock"] = clock
    return EventStore(db, **kwargs)

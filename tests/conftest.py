from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from topsync.context import BotContext, SyncScope


class FakeRegistry:
    """In-memory CommandRegistry that records every call."""

    def __init__(
        self,
        existing: Optional[List[Dict[str, Any]]] = None,
        *,
        fetch_error: Optional[Exception] = None,
        bulk_error: Optional[Exception] = None,
        create_errors: Optional[Dict[str, Exception]] = None,
    ) -> None:
        self.existing = list(existing or [])
        self.fetch_error = fetch_error
        self.bulk_error = bulk_error
        self.create_errors = dict(create_errors or {})

        self.fetch_calls: List[SyncScope] = []
        self.bulk_calls: List[tuple] = []
        self.create_calls: List[tuple] = []

    async def fetch(self, scope: SyncScope) -> List[Dict[str, Any]]:
        self.fetch_calls.append(scope)
        if self.fetch_error is not None:
            raise self.fetch_error
        return [dict(c) for c in self.existing]

    async def bulk_overwrite(self, scope: SyncScope, payload: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        self.bulk_calls.append((scope, payload))
        if self.bulk_error is not None:
            raise self.bulk_error
        return [dict(c, id=str(1000 + i)) for i, c in enumerate(payload)]

    async def create(self, scope: SyncScope, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.create_calls.append((scope, payload))
        err = self.create_errors.get(payload.get("name"))
        if err is not None:
            raise err
        return dict(payload, id="2000")


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def make_context():
    def _make(registry: Any, api: Any = None, application_id: int = 555) -> BotContext:
        return BotContext(application_id=application_id, registry=registry, api=api)

    return _make

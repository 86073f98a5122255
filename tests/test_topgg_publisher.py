from __future__ import annotations

import asyncio
import json

import httpx

from topsync.services.topgg import TOPGG_COMMANDS_URL, TopGGPublisher

from .conftest import FakeRegistry

COMMANDS = [
    {"id": "1", "application_id": "555", "name": "ping", "description": "Check that the bot is alive.", "type": 1},
    {"id": "2", "application_id": "555", "name": "Inspect", "description": "", "type": 2},
]


def _mock_api(status: int = 200, body: str = ""):
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status, text=body)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler)), requests


def _run_publish(publisher: TopGGPublisher, api: httpx.AsyncClient) -> bool:
    async def go() -> bool:
        async with api:
            return await publisher.publish()

    return asyncio.run(go())


def test_publish_posts_converted_batch_with_bearer_token(make_context):
    api, requests = _mock_api(200)
    publisher = TopGGPublisher(make_context(FakeRegistry(COMMANDS), api=api), "secret")

    assert _run_publish(publisher, api) is True

    assert len(requests) == 1
    req = requests[0]
    assert req.method == "POST"
    assert req.url == httpx.URL(TOPGG_COMMANDS_URL)
    assert req.headers["Authorization"] == "Bearer secret"
    body = json.loads(req.content)
    assert [c["name"] for c in body] == ["ping", "Inspect"]
    assert body[0]["application_id"] == "555"
    assert body[0]["version"] == "1"
    assert body[1]["description"] == ""


def test_publish_accepts_204(make_context):
    api, _ = _mock_api(204)
    publisher = TopGGPublisher(make_context(FakeRegistry(COMMANDS), api=api), "secret")
    assert _run_publish(publisher, api) is True


def test_publish_fails_on_other_status(make_context):
    for status in (201, 400, 401, 500):
        api, requests = _mock_api(status, body='{"error": "nope"}')
        publisher = TopGGPublisher(make_context(FakeRegistry(COMMANDS), api=api), "secret")
        assert _run_publish(publisher, api) is False
        assert len(requests) == 1


def test_publish_without_token_makes_no_call(make_context):
    api, requests = _mock_api(200)
    registry = FakeRegistry(COMMANDS)
    publisher = TopGGPublisher(make_context(registry, api=api), "  ")

    assert _run_publish(publisher, api) is False
    assert requests == []
    assert registry.fetch_calls == []


def test_publish_with_empty_batch_makes_no_call(make_context):
    api, requests = _mock_api(200)
    publisher = TopGGPublisher(make_context(FakeRegistry([]), api=api), "secret")

    assert _run_publish(publisher, api) is False
    assert requests == []


def test_publish_skips_unconvertible_commands(make_context):
    api, requests = _mock_api(200)
    registry = FakeRegistry(COMMANDS + [{"id": "3", "description": "missing name"}])
    publisher = TopGGPublisher(make_context(registry, api=api), "secret")

    assert _run_publish(publisher, api) is True
    assert [c["name"] for c in json.loads(requests[0].content)] == ["ping", "Inspect"]


def test_publish_fetch_failure_is_empty_batch(make_context):
    api, requests = _mock_api(200)
    registry = FakeRegistry(fetch_error=RuntimeError("discord down"))
    publisher = TopGGPublisher(make_context(registry, api=api), "secret")

    assert _run_publish(publisher, api) is False
    assert requests == []


def test_publish_network_error_returns_false(make_context):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    api = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    publisher = TopGGPublisher(make_context(FakeRegistry(COMMANDS), api=api), "secret")

    assert _run_publish(publisher, api) is False


def test_publish_timeout_returns_false(make_context):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    api = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    publisher = TopGGPublisher(make_context(FakeRegistry(COMMANDS), api=api), "secret", timeout=0.1)

    assert _run_publish(publisher, api) is False


# -----------------------------
# Periodic updates
# -----------------------------


class CountingPublisher(TopGGPublisher):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.calls = 0

    async def publish(self) -> bool:
        self.calls += 1
        return True


def test_stop_immediately_after_start_publishes_nothing(make_context):
    async def go() -> int:
        publisher = CountingPublisher(make_context(FakeRegistry(COMMANDS)), "secret", initial_delay_s=0)
        publisher.start_periodic_updates()
        publisher.stop_periodic_updates()
        await asyncio.sleep(0.05)
        assert not publisher.is_running()
        return publisher.calls

    assert asyncio.run(go()) == 0


def test_first_publish_after_initial_delay_then_stop(make_context):
    async def go() -> int:
        publisher = CountingPublisher(
            make_context(FakeRegistry(COMMANDS)), "secret", initial_delay_s=0.01, interval_s=3600
        )
        publisher.start_periodic_updates()
        for _ in range(100):
            if publisher.calls:
                break
            await asyncio.sleep(0.01)
        publisher.stop_periodic_updates()
        calls_at_stop = publisher.calls
        await asyncio.sleep(0.05)
        assert publisher.calls == calls_at_stop
        return calls_at_stop

    assert asyncio.run(go()) == 1


def test_stop_is_idempotent_and_safe_when_never_started(make_context):
    async def go() -> None:
        publisher = CountingPublisher(make_context(FakeRegistry(COMMANDS)), "secret")
        publisher.stop_periodic_updates()
        publisher.start_periodic_updates()
        publisher.start_periodic_updates()  # second start is a no-op
        assert publisher.is_running()
        publisher.stop_periodic_updates()
        publisher.stop_periodic_updates()
        await asyncio.sleep(0)

    asyncio.run(go())

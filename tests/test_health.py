import asyncio

from aiohttp.test_utils import TestClient, TestServer

from stranger_talk.health import VERSION, build_health_app
from stranger_talk.services import ChatRelayService


def _get_json(service: ChatRelayService, path: str) -> tuple[int, dict]:
    async def _run() -> tuple[int, dict]:
        async with TestClient(TestServer(build_health_app(service))) as client:
            response = await client.get(path)
            return response.status, await response.json()

    return asyncio.run(_run())


def test_health_endpoint(service: ChatRelayService) -> None:
    status, payload = _get_json(service, "/health")

    assert status == 200
    assert payload["status"] == "OK"
    assert payload["version"] == VERSION
    assert "timestamp" in payload


def test_index_reports_summary(service: ChatRelayService) -> None:
    service.registry.credit_support(1, 100)
    service.register(2)

    status, payload = _get_json(service, "/")

    assert status == 200
    assert payload["users"] == 2
    assert payload["supporters"] == 1
    assert payload["activeChats"] == 0
    assert payload["earnings"] == "100 Stars"
    assert payload["uptime"] == "0 hours"


def test_stats_endpoint_includes_counters(service: ChatRelayService) -> None:
    asyncio.run(service.request_chat(1))

    status, payload = _get_json(service, "/stats")

    assert status == 200
    assert payload["waiting"] == 1
    assert payload["active_chats"] == 0
    assert payload["uptime"] >= 0

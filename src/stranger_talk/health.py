"""HTTP health and statistics endpoints for hosting platforms."""

from __future__ import annotations

import logging
import time

from aiohttp import web

from .models import utcnow
from .services import ChatRelayService

LOGGER = logging.getLogger(__name__)

VERSION = "2.0.0"
SERVICE_KEY = web.AppKey("service", ChatRelayService)
STARTED_AT_KEY = web.AppKey("started_at", float)


async def index(request: web.Request) -> web.Response:
    service = request.app[SERVICE_KEY]
    stats = service.get_statistics()
    uptime_hours = int((time.monotonic() - request.app[STARTED_AT_KEY]) // 3600)
    return web.json_response(
        {
            "status": "🤖 StrangerTalk Bot is running!",
            "users": stats["users"],
            "supporters": stats["supporters"],
            "activeChats": stats["active_chats"],
            "earnings": f"{stats['total_support']} Stars",
            "uptime": f"{uptime_hours} hours",
        }
    )


async def health(request: web.Request) -> web.Response:
    return web.json_response(
        {"status": "OK", "timestamp": utcnow().isoformat(), "version": VERSION}
    )


async def stats(request: web.Request) -> web.Response:
    service = request.app[SERVICE_KEY]
    payload = dict(service.get_statistics())
    payload["uptime"] = round(time.monotonic() - request.app[STARTED_AT_KEY], 3)
    return web.json_response(payload)


def build_health_app(service: ChatRelayService) -> web.Application:
    app = web.Application()
    app[SERVICE_KEY] = service
    app[STARTED_AT_KEY] = time.monotonic()
    app.router.add_get("/", index)
    app.router.add_get("/health", health)
    app.router.add_get("/stats", stats)
    return app


async def start_health_server(
    service: ChatRelayService, *, host: str = "0.0.0.0", port: int = 3000
) -> web.AppRunner:
    runner = web.AppRunner(build_health_app(service))
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    LOGGER.info("Health server listening on %s:%s", host, port)
    return runner

from contextlib import contextmanager
from datetime import timedelta
import time
from typing import Any, Callable, Awaitable, Generator

import statsd
from statsd.client.timer import Timer
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Match
from starlette.types import ASGIApp

from app.config import get_config


class Stats:
    def timing(self, key: str, value: int) -> None:
        raise NotImplementedError

    def inc(self, key: str, count: int = 1, rate: int = 1) -> None:
        raise NotImplementedError

    def gauge(self, key: str, value: int, delta: bool = False) -> None:
        raise NotImplementedError

    def timer(self, key: str) -> Timer:
        raise NotImplementedError


class NoopStats(Stats):
    def timing(self, key: str, value: int) -> None:
        """Empty method due to NoopStats implementation"""
        pass

    def inc(self, key: str, count: int = 1, rate: int = 1) -> None:
        """Empty method due to NoopStats implementation"""
        pass

    def gauge(self, key: str, value: int, delta: bool = False) -> None:
        """Empty method due to NoopStats implementation"""
        pass

    def timer(self, key: str) -> Timer:
        @contextmanager
        def noop_context_manager() -> Generator[Any, Any, Any]:
            yield

        return noop_context_manager()  # type: ignore[return-value]


class MemoryClient:
    """
    Keeps stats in memory, used when stats are enabled without a statsd host
    """

    def __init__(self) -> None:
        self.memory: dict[str, Any] = {}

    def timer(self, stat: str, rate: int = 1) -> Timer:
        return Timer(self, stat, rate)

    def timing(self, stat: str, delta: timedelta | float, rate: int = 1) -> None:
        if isinstance(delta, timedelta):
            delta = delta.total_seconds() * 1000.0
        self.memory.setdefault(stat, []).append(delta)

    def incr(self, stat: str, count: int = 1, rate: int = 1) -> None:
        self.memory[stat] = self.memory.get(stat, 0) + count

    def gauge(self, stat: str, value: int, rate: int = 1, delta: bool = False) -> None:
        self.memory.setdefault(stat, []).append({"value": value, "timestamp": time.time()})

    def get_memory(self) -> dict[str, Any]:
        return self.memory


class Statsd(Stats):
    def __init__(self, client: statsd.StatsClient | MemoryClient):
        self.client = client

    def timing(self, key: str, value: int) -> None:
        self.client.timing(key, value)

    def inc(self, key: str, count: int = 1, rate: int = 1) -> None:
        self.client.incr(key, count, rate)

    def gauge(self, key: str, value: int, delta: bool = False) -> None:
        self.client.gauge(key, value, delta=delta)

    def timer(self, key: str) -> Timer:
        return self.client.timer(key)


_STATS: Stats = NoopStats()


def setup_stats() -> None:
    config = get_config()

    if config.stats.enabled is False:
        return

    client = (
        MemoryClient()
        if config.stats.host is None
        else statsd.StatsClient(config.stats.host, config.stats.port or 8125)
    )
    global _STATS
    _STATS = Statsd(client)


def get_stats() -> Stats:
    return _STATS


def get_route_template(request: Request) -> str:
    """
    Returns the matched route path (e.g. /tenant/{tenant_id}/{resource_type}) so tenant and
    resource ids do not end up in stat keys
    """
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return str(getattr(route, "path", request.url.path))

    return "unmatched"


class StatsdMiddleware(BaseHTTPMiddleware):
    """
    Middleware to record request counts, status codes and response time for each request
    """

    def __init__(self, app: ASGIApp, module_name: str):
        super().__init__(app)
        self.module_name = module_name

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        route = get_route_template(request)
        get_stats().inc(f"{self.module_name}.http.request.{request.method.lower()}.{route}")

        start_time = time.monotonic()
        response = await call_next(request)
        response_time = int((time.monotonic() - start_time) * 1000)

        get_stats().inc(f"{self.module_name}.http.status.{response.status_code}")
        get_stats().timing(f"{self.module_name}.http.response_time", response_time)

        return response

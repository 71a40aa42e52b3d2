import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, List, Optional

import pytest

from chatgame.catalog import Block, Catalog
from chatgame.events import CommandRouter
from chatgame.resolution import Resolver
from chatgame.sockets import Broadcaster
from chatgame.state import Session
from chatgame.telemetry import TelemetrySink, TextLogWriter
from chatgame.timer import TimerEngine

TICK = 0.01


@dataclass
class Emitted:
    event: str
    data: Any
    to: Optional[str] = None
    skip_sid: Optional[str] = None


class RecordingServer:
    """Remplace socketio.AsyncServer: garde la trace de chaque emit."""

    def __init__(self) -> None:
        self.emitted: List[Emitted] = []

    async def emit(self, event: str, data: Any = None, to: Optional[str] = None, skip_sid: Optional[str] = None) -> None:
        self.emitted.append(Emitted(event, data, to, skip_sid))

    def events(self, name: str) -> List[Any]:
        return [e.data for e in self.emitted if e.event == name]

    def names(self) -> List[str]:
        return [e.event for e in self.emitted]

    def clear(self) -> None:
        self.emitted.clear()


class FixedClock:
    def __init__(self, moment: datetime) -> None:
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment


def make_catalog(*sizes: int) -> Catalog:
    blocks = []
    for index, size in enumerate(sizes):
        problems = [{"question": f"q{index}-{p}"} for p in range(size)]
        blocks.append(Block(index=index, problems=tuple(problems), data={"name": f"block {index}", "problems": problems}))
    return Catalog(blocks)


async def wait_until(predicate, timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached before timeout")
        await asyncio.sleep(TICK / 2)


@pytest.fixture()
def clock():
    return FixedClock(datetime(2024, 5, 17, 14, 30, 0, tzinfo=timezone.utc))


@pytest.fixture()
def catalog():
    return make_catalog(5, 3, 5)


class YieldingServer(RecordingServer):
    """Comme un vrai AsyncServer: chaque emit rend la main à la boucle."""

    async def emit(self, event: str, data: Any = None, to: Optional[str] = None, skip_sid: Optional[str] = None) -> None:
        self.emitted.append(Emitted(event, data, to, skip_sid))
        await asyncio.sleep(TICK / 10)


def make_harness(data_dir, catalog, clock, sio):
    session = Session(max_time=10, points_awarded=5)
    broadcaster = Broadcaster(sio)
    telemetry = TelemetrySink(data_dir, clock=clock)
    logs = TextLogWriter(data_dir, clock=clock)
    resolver = Resolver(session, broadcaster, telemetry)
    timer = TimerEngine(session, broadcaster, resolver, tick_seconds=TICK)
    router = CommandRouter(session, catalog, broadcaster, timer, resolver, telemetry, logs, problems_per_block=5)
    return SimpleNamespace(
        session=session,
        sio=sio,
        broadcaster=broadcaster,
        telemetry=telemetry,
        logs=logs,
        resolver=resolver,
        timer=timer,
        router=router,
        catalog=catalog,
        data_dir=data_dir,
    )


@pytest.fixture()
def harness(tmp_path, catalog, clock):
    h = make_harness(tmp_path / "data", catalog, clock, RecordingServer())
    yield h
    h.telemetry.close()


@pytest.fixture()
def yielding_harness(tmp_path, catalog, clock):
    h = make_harness(tmp_path / "data", catalog, clock, YieldingServer())
    yield h
    h.telemetry.close()

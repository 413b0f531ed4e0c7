"""
tests/conftest.py
Shared fixtures: isolated settings, an offline engine and a fake clock.
"""
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from calculation_engine.engine import QuoteEngine
from config.settings import Settings
from geo_resolver import DistanceCache, GeoResolver, GreatCircleStrategy, LaneTableStrategy
from query_processor.parser import RegexTextExtractor


class FakeClock:
    """Manually advanced replacement for time.time."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def cfg() -> Settings:
    """Defaults only; never reads os.environ or .env."""
    return Settings.from_mapping({})


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def offline_resolver(clock) -> GeoResolver:
    """No HTTP providers: great-circle then lane table."""
    return GeoResolver(
        strategies=[GreatCircleStrategy(), LaneTableStrategy()],
        geocoder=None,
        cache=DistanceCache(clock=clock),
    )


@pytest.fixture
def engine(cfg, offline_resolver) -> QuoteEngine:
    return QuoteEngine(settings=cfg, extractor=RegexTextExtractor(), geo_resolver=offline_resolver)

import sys
from pathlib import Path

import pytest

# Add repo root so "import tests.helpers" works
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from slotbooker.config import SchedulingConfig  # noqa: E402
from slotbooker.services.booking import BookingService  # noqa: E402
from tests.helpers import TZ, StubCalendar, StubSink, at  # noqa: E402


@pytest.fixture
def scheduling_config() -> SchedulingConfig:
    return SchedulingConfig(
        min_lead_minutes=120,
        duration_minutes=30,
        step_minutes=30,
        search_days=14,
        work_start_hour=9,
        work_end_hour=17,
        timezone=TZ,
    )


@pytest.fixture
def now():
    """Monday 2025-02-10 08:00 local."""
    return at(10, 8)


@pytest.fixture
def calendar() -> StubCalendar:
    return StubCalendar()


@pytest.fixture
def sink() -> StubSink:
    return StubSink()


@pytest.fixture
def service(scheduling_config, calendar, sink, now) -> BookingService:
    return BookingService(scheduling_config, calendar, sink, clock=lambda: now)

from __future__ import annotations

import os
import tempfile

# must be set before thebus.db creates its engine
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(tempfile.mkdtemp(prefix="thebus-"), "test.db")

import pytest  # noqa: E402

from thebus.domain import ArrivalFeed, ArrivalRecord, CancellationState, StopIdentifier  # noqa: E402
from thebus.errors import FetchError  # noqa: E402
from thebus.providers.base import ArrivalsProvider  # noqa: E402


def arrival_xml(route="1", headsign="UH Manoa", stop_time="9:35am", estimated="1", canceled="0") -> str:
    return (
        "<arrival>"
        f"<route>{route}</route><headsign>{headsign}</headsign>"
        f"<stopTime>{stop_time}</stopTime><estimated>{estimated}</estimated>"
        f"<canceled>{canceled}</canceled>"
        "</arrival>"
    )


def feed_xml(stop="214", *arrivals: str, timestamp="2/21/2016 10:38:28 AM") -> str:
    return f"<stopTimes><stop>{stop}</stop><timestamp>{timestamp}</timestamp>{''.join(arrivals)}</stopTimes>"


class FakeProvider(ArrivalsProvider):
    """Returns a canned feed (or raises a canned FetchError) and records calls."""

    def __init__(self, feed: ArrivalFeed | None = None, error: FetchError | None = None):
        self.feed = feed
        self.error = error
        self.calls: list[StopIdentifier] = []

    def fetch_arrivals(self, stop: StopIdentifier) -> ArrivalFeed:
        self.calls.append(stop)
        if self.error is not None:
            raise self.error
        return self.feed or ArrivalFeed(stop=str(stop), arrivals=None)


@pytest.fixture
def uh_manoa_feed() -> ArrivalFeed:
    return ArrivalFeed(
        stop="214",
        timestamp="2/21/2016 10:38:28 AM",
        arrivals=(
            ArrivalRecord(
                route="1",
                headsign="UH Manoa",
                stop_time="9:35am",
                is_estimated_by_gps=True,
                cancellation_state=CancellationState.NOT_CANCELED,
            ),
        ),
    )


@pytest.fixture
def fake_provider(uh_manoa_feed) -> FakeProvider:
    return FakeProvider(feed=uh_manoa_feed)

import pytest

from conftest import FakeProvider
from thebus.agents.arrivals import MALFORMED_FEED, TRANSPORT_FAILURE, run_arrivals_agent
from thebus.domain import ArrivalFeed, StopIdentifier
from thebus.errors import FetchError, FetchErrorKind


def test_success_delegates_to_translator(fake_provider):
    result = run_arrivals_agent(fake_provider, StopIdentifier(214))
    assert fake_provider.calls == [StopIdentifier(214)]
    assert "Route 1 heading to University of Hawaii Manoa" in result.speech
    assert result.route_times == {"1": ("9:35am",)}


def test_transport_failure():
    provider = FakeProvider(error=FetchError(FetchErrorKind.TRANSPORT, "connection refused"))
    result = run_arrivals_agent(provider, StopIdentifier(214))
    assert result.speech == "Sorry there was an error contacting the bus service"
    assert result.speech == TRANSPORT_FAILURE
    assert result.card == result.speech
    assert "refused" not in result.speech


def test_malformed_feed():
    provider = FakeProvider(error=FetchError(FetchErrorKind.MALFORMED_FEED, "unexpected root element <html>"))
    result = run_arrivals_agent(provider, StopIdentifier(214))
    assert result.speech == MALFORMED_FEED
    assert "<html>" not in result.speech


def test_feed_narration_is_not_replaced():
    provider = FakeProvider(feed=ArrivalFeed(stop="4242", arrivals=None))
    result = run_arrivals_agent(provider, StopIdentifier(4242))
    assert result.speech == "Sorry, no arrivals found for stop 4242. Are you sure this is a valid stop?"


def test_other_errors_propagate():
    class Broken(FakeProvider):
        def fetch_arrivals(self, stop):
            raise RuntimeError("bug")

    with pytest.raises(RuntimeError):
        run_arrivals_agent(Broken(), StopIdentifier(1))

import logging

from thebus.agents.narration import translate
from thebus.domain import NarrationResult, StopIdentifier
from thebus.errors import FetchError, FetchErrorKind
from thebus.providers.base import ArrivalsProvider

logger = logging.getLogger(__name__)

TRANSPORT_FAILURE = "Sorry there was an error contacting the bus service"
MALFORMED_FEED = "Sorry there was an error reading the bus service response"

_FAILURES = {
    FetchErrorKind.TRANSPORT: TRANSPORT_FAILURE,
    FetchErrorKind.MALFORMED_FEED: MALFORMED_FEED,
}


def run_arrivals_agent(provider: ArrivalsProvider, stop: StopIdentifier) -> NarrationResult:
    try:
        feed = provider.fetch_arrivals(stop)
    except FetchError as e:
        logger.warning("Arrivals fetch failed for stop %s: %s", stop, e)
        text = _FAILURES[e.kind]
        return NarrationResult(speech=text, card=text)
    return translate(feed)

import logging
import re
from typing import Iterable

from thebus.domain import ArrivalFeed, ArrivalRecord, CancellationState, NarrationResult

logger = logging.getLogger(__name__)

MAX_TIMES_PER_ROUTE = 5

# headsign abbreviations read out in full
HEADSIGN_ABBREVIATIONS = {
    "UH": "University of Hawaii",
}

_ABBR_RE = re.compile(r"\b(" + "|".join(map(re.escape, HEADSIGN_ABBREVIATIONS)) + r")\b")


def expand_headsign(headsign: str) -> str:
    return _ABBR_RE.sub(lambda m: HEADSIGN_ABBREVIATIONS[m.group(1)], (headsign or "").strip())


def no_arrivals_found(stop: str) -> str:
    return f"Sorry, no arrivals found for stop {stop}. Are you sure this is a valid stop?"


def arrival_sentence(arrival: ArrivalRecord) -> str:
    estimate = "estimated by GPS" if arrival.is_estimated_by_gps else "based on the schedule"
    sentence = (
        f"Route {arrival.route} heading to {expand_headsign(arrival.headsign)} "
        f"arriving at {arrival.stop_time} {estimate}"
    )
    if arrival.cancellation_state is CancellationState.NO_LONGER_CANCELED:
        sentence += ", previously canceled but no longer canceled"
    return sentence + ".\n"


def group_times_by_route(arrivals: Iterable[ArrivalRecord], cap: int = MAX_TIMES_PER_ROUTE) -> dict[str, tuple[str, ...]]:
    """
    route -> arrival times in feed order, at most `cap` per route.
    Built fresh for every call; nothing is shared between requests.
    """
    routes: dict[str, list[str]] = {}
    for arrival in arrivals:
        times = routes.setdefault(arrival.route, [])
        if len(times) < cap:
            times.append(arrival.stop_time)
    return {route: tuple(times) for route, times in routes.items()}


def translate(feed: ArrivalFeed) -> NarrationResult:
    if feed.arrivals is None:
        text = no_arrivals_found(feed.stop)
        return NarrationResult(speech=text, card=text)

    logger.info("Feed for stop %s served at %s with %d arrivals", feed.stop, feed.timestamp, len(feed.arrivals))

    parts = [f"Here are the arrivals for bus stop {feed.stop}.\n"]
    narrated = 0
    saw_canceled = False

    for arrival in feed.arrivals:
        logger.debug(
            "%s - %s at %s (estimated=%s, canceled=%s)",
            arrival.route, arrival.headsign, arrival.stop_time,
            arrival.is_estimated_by_gps, arrival.cancellation_state.value,
        )
        if arrival.cancellation_state is CancellationState.CANCELED:
            saw_canceled = True
            continue
        parts.append(arrival_sentence(arrival))
        narrated += 1

    if not narrated:
        if saw_canceled:
            parts.append("Sorry, only canceled arrivals were found.\n")
        else:
            parts.append("Sorry, no arrivals were returned.\n")

    text = "".join(parts)
    return NarrationResult(speech=text, card=text, route_times=group_times_by_route(feed.arrivals))

from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from datetime import datetime
from typing import Optional

import requests
from dateutil import parser as dtparser

from thebus.domain import ArrivalFeed, ArrivalRecord, CancellationState, StopIdentifier
from thebus.errors import FetchError, FetchErrorKind
from thebus.providers.base import ArrivalsProvider

logger = logging.getLogger(__name__)


def _text(elem: ET.Element, tag: str) -> str:
    child = elem.find(tag)
    if child is None or child.text is None:
        return ""
    return child.text.strip()


def _parse_timestamp(text: str) -> Optional[datetime]:
    if not text:
        return None
    try:
        return dtparser.parse(text)
    except (ValueError, OverflowError):
        logger.debug("Unparseable feed timestamp %r", text)
        return None


def _cancellation(text: str) -> CancellationState:
    try:
        return CancellationState(int(text))
    except ValueError:
        # missing or unexpected flag reads as a normal arrival
        return CancellationState.NOT_CANCELED


def parse_arrival(elem: ET.Element) -> ArrivalRecord:
    return ArrivalRecord(
        route=_text(elem, "route"),
        headsign=_text(elem, "headsign"),
        stop_time=_text(elem, "stopTime"),
        is_estimated_by_gps=_text(elem, "estimated") == "1",
        cancellation_state=_cancellation(_text(elem, "canceled")),
    )


def parse_feed(body: str | bytes, requested_stop: StopIdentifier | None = None) -> ArrivalFeed:
    """
    Deserialize an arrivals document:

        <stopTimes>
          <stop>214</stop>
          <timestamp>2/21/2016 10:38:28 AM</timestamp>
          <arrival>...</arrival>*
        </stopTimes>

    A document without <arrival> elements yields `arrivals=None`.
    """
    try:
        root = ET.fromstring(body)
    except ET.ParseError as e:
        raise FetchError(FetchErrorKind.MALFORMED_FEED, f"XML parse error: {e}") from e

    if root.tag != "stopTimes":
        raise FetchError(FetchErrorKind.MALFORMED_FEED, f"unexpected root element <{root.tag}>")

    stop = _text(root, "stop") or (str(requested_stop) if requested_stop else "")
    timestamp = _text(root, "timestamp")
    elems = root.findall("arrival")

    return ArrivalFeed(
        stop=stop,
        timestamp=timestamp,
        served_at=_parse_timestamp(timestamp),
        arrivals=tuple(parse_arrival(e) for e in elems) if elems else None,
    )


class TheBusArrivalsProvider(ArrivalsProvider):
    """
    TheBus HEA arrivals API. One GET per stop, no retries.
    Transport problems and HTTP errors surface as FetchError(TRANSPORT).
    """

    BASE_URL = os.getenv("THEBUS_API_BASE", "http://api.thebus.org")

    def __init__(self, api_key: str, timeout: float = 15, session: requests.Session | None = None):
        self.api_key = api_key
        self.timeout = timeout
        self.http = session or requests.Session()

    def _get(self, path: str, params: dict) -> bytes:
        url = f"{self.BASE_URL}{path}"
        try:
            r = self.http.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Communications error: %s", e)
            raise FetchError(FetchErrorKind.TRANSPORT, str(e)) from e
        if r.status_code >= 400:
            logger.error("Arrivals API error %s: %s", r.status_code, r.text[:200])
            raise FetchError(FetchErrorKind.TRANSPORT, f"HTTP {r.status_code}")
        return r.content

    def fetch_arrivals(self, stop: StopIdentifier) -> ArrivalFeed:
        body = self._get("/arrivals/", params={"key": self.api_key, "stop": stop.value})
        return parse_feed(body, requested_stop=stop)

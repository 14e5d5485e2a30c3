import logging
import re
from typing import Any, Mapping, Optional

from thebus.domain import StopIdentifier
from thebus.errors import SlotError, SlotErrorKind

logger = logging.getLogger(__name__)

STOP_SLOT = "Stop"

# Same pair on both entry paths, whatever went wrong
STOP_REPROMPT_SPEECH = "sorry, I did not hear the stop, please say that again"
STOP_REPROMPT = "please say the stop again"

_INT_RE = re.compile(r"^[+-]?[0-9]+$")

# stop ids are short; longer digit runs are not a stop
MAX_STOP_DIGITS = 9


def validate_stop(raw: Optional[str]) -> StopIdentifier:
    if raw is None or not str(raw).strip():
        logger.info("Stop slot missing")
        raise SlotError(SlotErrorKind.MISSING, raw)

    text = str(raw).strip()
    if not _INT_RE.match(text):
        logger.warning("Invalid stop value = %r", raw)
        raise SlotError(SlotErrorKind.INVALID, raw)

    if len(text.lstrip("+-")) > MAX_STOP_DIGITS:
        logger.warning("Overlong stop value (%d chars)", len(text))
        raise SlotError(SlotErrorKind.INVALID, raw)

    try:
        value = int(text, 10)
    except ValueError:
        logger.warning("Invalid stop value = %r", raw)
        raise SlotError(SlotErrorKind.INVALID, raw) from None
    if value <= 0:
        logger.warning("Non-positive stop value = %r", raw)
        raise SlotError(SlotErrorKind.INVALID, raw)

    return StopIdentifier(value)


def stop_slot_value(slots: Mapping[str, Any]) -> Optional[str]:
    return (slots or {}).get(STOP_SLOT)

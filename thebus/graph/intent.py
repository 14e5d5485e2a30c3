import logging
from typing import Any, Optional

from thebus.domain import IntentName, Turn, TurnKind
from thebus.errors import EnvelopeError, InvalidApplicationError, UnknownIntentError

logger = logging.getLogger(__name__)

REQUEST_KINDS = {
    "LaunchRequest": TurnKind.LAUNCH,
    "IntentRequest": TurnKind.INTENT,
    "SessionEndedRequest": TurnKind.SESSION_ENDED,
    "SessionStartedRequest": TurnKind.SESSION_STARTED,
}


def parse_intent_name(name: Optional[str]) -> IntentName:
    try:
        return IntentName(name)
    except ValueError:
        raise UnknownIntentError(str(name)) from None


def parse_slots(raw: Any) -> dict[str, Optional[str]]:
    """
    {"Stop": {"name": "Stop", "value": "214"}} -> {"Stop": "214"}
    Slots without a value map to None.
    """
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise EnvelopeError("intent.slots must be an object")

    slots: dict[str, Optional[str]] = {}
    for key, slot in raw.items():
        if not isinstance(slot, dict):
            slots[key] = None
            continue
        value = slot.get("value")
        slots[slot.get("name") or key] = None if value is None else str(value)
    return slots


def verify_application(session: dict, app_id: Optional[str]) -> None:
    application = session.get("application") or {}
    if not isinstance(application, dict):
        raise EnvelopeError("session.application must be an object")
    if not app_id:
        return
    given = application.get("applicationId")
    if given != app_id:
        logger.error("The applicationIds don't match: %s and %s", given, app_id)
        raise InvalidApplicationError(given)


def parse_turn(envelope: Any, app_id: Optional[str] = None) -> Turn:
    """
    Turn a host request envelope into a typed Turn.
    Unknown request types raise EnvelopeError, unknown intents UnknownIntentError.
    """
    if not isinstance(envelope, dict):
        raise EnvelopeError("request body must be a JSON object")

    session = envelope.get("session") or {}
    request = envelope.get("request") or {}
    if not isinstance(session, dict) or not isinstance(request, dict):
        raise EnvelopeError("session and request must be objects")

    verify_application(session, app_id)

    kind = REQUEST_KINDS.get(request.get("type"))
    if kind is None:
        raise EnvelopeError(f"unsupported request type: {request.get('type')!r}")

    intent_name = None
    slots: dict[str, Optional[str]] = {}
    if kind is TurnKind.INTENT:
        intent = request.get("intent") or {}
        if not isinstance(intent, dict):
            raise EnvelopeError("request.intent must be an object")
        intent_name = parse_intent_name(intent.get("name"))
        slots = parse_slots(intent.get("slots"))

    attributes = session.get("attributes") or {}
    return Turn(
        kind=kind,
        session_id=str(session.get("sessionId") or ""),
        request_id=str(request.get("requestId") or ""),
        intent_name=intent_name,
        slots=slots,
        is_new_session=bool(session.get("new")),
        session_attributes=dict(attributes) if isinstance(attributes, dict) else {},
    )

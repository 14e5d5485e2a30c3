from typing import Any, Optional

from thebus.domain import Ask, DialogOutcome, Speech, SpeechType, Tell

CARD_TITLE = "TheBus"
RESPONSE_VERSION = "1.0"


def speech_payload(speech: Speech) -> dict[str, str]:
    # SSML goes through untouched
    if speech.type is SpeechType.SSML:
        return {"type": "SSML", "ssml": speech.text}
    return {"type": "PlainText", "text": speech.text}


def render(outcome: Optional[DialogOutcome]) -> dict[str, Any]:
    if outcome is None:
        return {"version": RESPONSE_VERSION, "response": {}}

    if not isinstance(outcome, (Ask, Tell)):
        raise TypeError(f"not a dialog outcome: {outcome!r}")

    response: dict[str, Any] = {"outputSpeech": speech_payload(outcome.speech)}

    if isinstance(outcome, Ask):
        response["reprompt"] = {"outputSpeech": speech_payload(outcome.reprompt)}
        response["shouldEndSession"] = False
    else:
        if outcome.card is not None:
            response["card"] = {"type": "Simple", "title": CARD_TITLE, "content": outcome.card}
        response["shouldEndSession"] = True

    return {
        "version": RESPONSE_VERSION,
        "sessionAttributes": dict(outcome.session_attributes),
        "response": response,
    }

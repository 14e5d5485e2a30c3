import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from thebus.agents.arrivals import run_arrivals_agent
from thebus.domain import Ask, DialogOutcome, DialogPhase, IntentName, Speech, Tell, Turn
from thebus.errors import SlotError
from thebus.graph.slots import STOP_REPROMPT, STOP_REPROMPT_SPEECH, stop_slot_value, validate_stop
from thebus.providers.base import ArrivalsProvider

logger = logging.getLogger(__name__)

IntentHandler = Callable[[Turn], DialogOutcome]

WHICH_STOP_PROMPT = "For which Bus Stop would you like to request bus information ?"
HELP_REPROMPT = "Which stop would you like bus information for?"
_HELP_BODY = (
    "I can lead you through providing a stop "
    "to get bus information, "
    "or you can simply open The Bus and ask a question like, "
    "when will bus arrive at stop 255. "
)
GOODBYE = "Goodbye"


def with_phase(turn: Turn, phase: DialogPhase) -> dict[str, Any]:
    attrs = dict(turn.session_attributes)
    attrs["phase"] = phase.value
    return attrs


# ---------------------------
# Lifecycle
# ---------------------------
def log_session_started(turn: Turn) -> None:
    logger.info("onSessionStarted requestId: %s, sessionId: %s", turn.request_id, turn.session_id)


def log_session_ended(turn: Turn) -> None:
    logger.info("onSessionEnded requestId: %s, sessionId: %s", turn.request_id, turn.session_id)


def welcome(turn: Turn) -> DialogOutcome:
    logger.info("onLaunch requestId: %s, sessionId: %s", turn.request_id, turn.session_id)
    return Ask(
        speech=Speech.ssml(f"<speak>Welcome to Hawaii's The Bus Arrival Service. {WHICH_STOP_PROMPT}</speak>"),
        reprompt=Speech(_HELP_BODY + WHICH_STOP_PROMPT),
        session_attributes=with_phase(turn, DialogPhase.AWAITING_STOP),
    )


@dataclass(frozen=True)
class LifecycleHooks:
    on_session_started: Callable[[Turn], None] = log_session_started
    on_launch: Callable[[Turn], DialogOutcome] = welcome
    on_session_ended: Callable[[Turn], None] = log_session_ended


# ---------------------------
# Intents
# ---------------------------
def help_request(turn: Turn) -> DialogOutcome:
    speech = _HELP_BODY + "Or you can say exit. " + HELP_REPROMPT
    return Ask(
        speech=Speech(speech),
        reprompt=Speech(HELP_REPROMPT),
        session_attributes=dict(turn.session_attributes),
    )


def goodbye(turn: Turn) -> DialogOutcome:
    return Tell(speech=Speech(GOODBYE), session_attributes=with_phase(turn, DialogPhase.ENDED))


def stop_reprompt(turn: Turn) -> DialogOutcome:
    return Ask(
        speech=Speech(STOP_REPROMPT_SPEECH),
        reprompt=Speech(STOP_REPROMPT),
        session_attributes=with_phase(turn, DialogPhase.AWAITING_STOP),
    )


def make_stop_handler(provider: ArrivalsProvider, expected_phase: Optional[DialogPhase] = None) -> IntentHandler:
    """
    Both the one-shot and the dialog path go through here:
    validate the Stop slot, then fetch and narrate, or re-prompt.
    """

    def handle(turn: Turn) -> DialogOutcome:
        if expected_phase is not None and turn.phase is not expected_phase:
            logger.info("%s received in phase %s", turn.intent_name, turn.phase.value)

        try:
            stop = validate_stop(stop_slot_value(turn.slots))
        except SlotError as e:
            logger.info("Re-prompting for stop (%s)", e.kind.value)
            return stop_reprompt(turn)

        narration = run_arrivals_agent(provider, stop)
        return Tell(
            speech=Speech(narration.speech),
            card=narration.card,
            session_attributes=with_phase(turn, DialogPhase.RESOLVED),
        )

    return handle


def default_handlers(provider: ArrivalsProvider) -> Mapping[IntentName, IntentHandler]:
    return {
        IntentName.ONESHOT_BUS: make_stop_handler(provider),
        IntentName.DIALOG_BUS: make_stop_handler(provider, expected_phase=DialogPhase.AWAITING_STOP),
        IntentName.HELP: help_request,
        IntentName.STOP: goodbye,
        IntentName.CANCEL: goodbye,
    }

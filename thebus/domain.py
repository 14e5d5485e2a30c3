from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional, Union


class TurnKind(str, Enum):
    SESSION_STARTED = "SessionStarted"
    SESSION_ENDED = "SessionEnded"
    LAUNCH = "Launch"
    INTENT = "Intent"


class IntentName(str, Enum):
    # names must match the interaction model exactly
    ONESHOT_BUS = "OneshotBusIntent"
    DIALOG_BUS = "DialogBusIntent"
    HELP = "AMAZON.HelpIntent"
    STOP = "AMAZON.StopIntent"
    CANCEL = "AMAZON.CancelIntent"


class DialogPhase(str, Enum):
    IDLE = "Idle"
    AWAITING_STOP = "AwaitingStop"
    RESOLVED = "Resolved"
    ENDED = "Ended"


class CancellationState(int, Enum):
    NOT_CANCELED = 0
    CANCELED = 1
    NO_LONGER_CANCELED = -1


class SpeechType(str, Enum):
    PLAIN_TEXT = "PlainText"
    SSML = "SSML"


@dataclass(frozen=True)
class Turn:
    kind: TurnKind
    session_id: str
    request_id: str = ""
    intent_name: Optional[IntentName] = None
    slots: Mapping[str, Optional[str]] = field(default_factory=dict)
    is_new_session: bool = False
    session_attributes: Mapping[str, Any] = field(default_factory=dict)

    @property
    def phase(self) -> DialogPhase:
        raw = self.session_attributes.get("phase")
        try:
            return DialogPhase(raw)
        except ValueError:
            return DialogPhase.IDLE


@dataclass(frozen=True)
class StopIdentifier:
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ArrivalRecord:
    route: str
    headsign: str
    stop_time: str
    is_estimated_by_gps: bool
    cancellation_state: CancellationState = CancellationState.NOT_CANCELED


@dataclass(frozen=True)
class ArrivalFeed:
    stop: str
    timestamp: str = ""
    served_at: Optional[datetime] = None
    # None means the document had no arrival elements at all
    arrivals: Optional[tuple[ArrivalRecord, ...]] = None


@dataclass(frozen=True)
class NarrationResult:
    speech: str
    card: Optional[str] = None
    route_times: Mapping[str, tuple[str, ...]] = field(default_factory=dict)


@dataclass(frozen=True)
class Speech:
    text: str
    type: SpeechType = SpeechType.PLAIN_TEXT

    @classmethod
    def ssml(cls, text: str) -> "Speech":
        return cls(text=text, type=SpeechType.SSML)


@dataclass(frozen=True)
class Ask:
    speech: Speech
    reprompt: Speech
    session_attributes: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Tell:
    speech: Speech
    card: Optional[str] = None
    session_attributes: Mapping[str, Any] = field(default_factory=dict)


DialogOutcome = Union[Ask, Tell]

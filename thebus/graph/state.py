from typing import TypedDict, Optional

from thebus.domain import DialogOutcome, Turn


class TurnState(TypedDict, total=False):
    turn: Turn

    # routing key picked for this turn: launch|session_ended|<intent node>
    route: str

    # outputs
    outcome: Optional[DialogOutcome]
    trace: list[dict]

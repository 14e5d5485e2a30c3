import logging
from typing import Mapping, Optional

from langgraph.graph import StateGraph, END

from thebus.domain import DialogOutcome, IntentName, Turn, TurnKind
from thebus.errors import UnknownIntentError
from thebus.graph.handlers import IntentHandler, LifecycleHooks
from thebus.graph.state import TurnState

logger = logging.getLogger(__name__)

DONE = "done"


# ---------------------------
# Utilities
# ---------------------------
def add_trace(state: TurnState, node: str, detail: dict):
    state.setdefault("trace", [])
    state["trace"].append({"node": node, "detail": detail})


def intent_node(intent: IntentName) -> str:
    return intent.name.lower()


# ---------------------------
# Build graph
# ---------------------------
def build_graph(handlers: Mapping[IntentName, IntentHandler], hooks: Optional[LifecycleHooks] = None):
    """
    Turn dispatcher: every intent in `handlers` gets its own node, reached
    through a conditional edge from the classifier. Lifecycle events go to
    the hooks. Intents missing from the table raise UnknownIntentError.
    """
    hooks = hooks or LifecycleHooks()

    def node_classify(state: TurnState) -> TurnState:
        turn = state["turn"]
        if turn.is_new_session or turn.kind is TurnKind.SESSION_STARTED:
            hooks.on_session_started(turn)

        if turn.kind is TurnKind.SESSION_STARTED:
            route = DONE
        elif turn.kind is TurnKind.SESSION_ENDED:
            route = "session_ended"
        elif turn.kind is TurnKind.LAUNCH:
            route = "launch"
        elif turn.intent_name in handlers:
            route = intent_node(turn.intent_name)
        else:
            name = turn.intent_name.value if turn.intent_name else None
            logger.error("No handler for intent %s (sessionId: %s)", name, turn.session_id)
            raise UnknownIntentError(str(name))

        state["route"] = route
        state["outcome"] = None
        add_trace(state, "classify", {"kind": turn.kind.value, "route": route, "phase": turn.phase.value})
        return state

    def node_route(state: TurnState) -> str:
        return state["route"]

    def node_launch(state: TurnState) -> TurnState:
        state["outcome"] = hooks.on_launch(state["turn"])
        add_trace(state, "launch", {})
        return state

    def node_session_ended(state: TurnState) -> TurnState:
        hooks.on_session_ended(state["turn"])
        add_trace(state, "session_ended", {})
        return state

    def make_intent_node(intent: IntentName, handler: IntentHandler):
        def node(state: TurnState) -> TurnState:
            outcome = handler(state["turn"])
            state["outcome"] = outcome
            add_trace(state, intent_node(intent), {"outcome": type(outcome).__name__})
            return state

        return node

    g = StateGraph(TurnState)

    g.add_node("classify", node_classify)
    g.add_node("launch", node_launch)
    g.add_node("session_ended", node_session_ended)

    path_map = {"launch": "launch", "session_ended": "session_ended", DONE: END}
    for intent, handler in handlers.items():
        name = intent_node(intent)
        g.add_node(name, make_intent_node(intent, handler))
        g.add_edge(name, END)
        path_map[name] = name

    g.set_entry_point("classify")
    g.add_conditional_edges("classify", node_route, path_map)

    g.add_edge("launch", END)
    g.add_edge("session_ended", END)

    return g.compile()


def run_turn(graph, turn: Turn) -> Optional[DialogOutcome]:
    """Run one turn to completion; lifecycle-only turns produce no outcome."""
    out = graph.invoke({"turn": turn, "trace": []})
    logger.debug("Turn trace: %s", out.get("trace"))
    return out.get("outcome")

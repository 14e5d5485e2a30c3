import logging

from flask import Flask, request, jsonify

from thebus import init_db
from thebus.config import Settings, load_settings
from thebus.db import SessionLocal
from thebus.domain import Speech, Tell, Turn
from thebus.errors import EnvelopeError, InvalidApplicationError, UnknownIntentError
from thebus.graph.graph import build_graph, run_turn
from thebus.graph.handlers import LifecycleHooks, default_handlers
from thebus.graph.intent import parse_turn
from thebus.models import SkillSession, TurnRecord
from thebus.providers.base import ArrivalsProvider
from thebus.providers.thebus_arrivals import TheBusArrivalsProvider
from thebus.render import render

logger = logging.getLogger(__name__)

UNSUPPORTED = "Sorry, I can't help with that. Goodbye"


def _record_turn(turn: Turn | None, envelope: dict, reply: dict):
    session_id = turn.session_id if turn else str(((envelope.get("session") or {}).get("sessionId")) or "")
    if not session_id:
        return

    response = reply.get("response") or {}
    speech = (response.get("outputSpeech") or {})
    db = SessionLocal()
    try:
        # Ensure session exists
        if not db.get(SkillSession, session_id):
            db.add(SkillSession(id=session_id))
            db.commit()

        db.add(TurnRecord(
            session_id=session_id,
            request_id=turn.request_id if turn else "",
            kind=turn.kind.value if turn else "Intent",
            intent=turn.intent_name.value if turn and turn.intent_name else (
                ((envelope.get("request") or {}).get("intent") or {}).get("name")
            ),
            speech=speech.get("text") or speech.get("ssml") or "",
            ended=bool(response.get("shouldEndSession")),
            meta={"sessionAttributes": reply.get("sessionAttributes", {})},
        ))
        db.commit()
    finally:
        db.close()


def create_app(settings: Settings | None = None, provider: ArrivalsProvider | None = None,
               hooks: LifecycleHooks | None = None) -> Flask:
    settings = settings or load_settings()
    provider = provider or TheBusArrivalsProvider(settings.api_key, timeout=settings.timeout)
    graph = build_graph(default_handlers(provider), hooks)

    # Create tables (simple dev mode)
    init_db()

    app = Flask(__name__)

    @app.get("/health")
    def health():
        return jsonify({"status": "ok"})

    @app.post("/skill")
    def skill():
        envelope = request.get_json(silent=True)
        turn = None
        try:
            turn = parse_turn(envelope, app_id=settings.app_id)
            reply = render(run_turn(graph, turn))
        except InvalidApplicationError:
            return jsonify({"error": "invalid applicationId"}), 403
        except EnvelopeError as e:
            logger.warning("Rejected request envelope: %s", e)
            return jsonify({"error": str(e)}), 400
        except UnknownIntentError as e:
            logger.warning("Unsupported intent %s", e.name)
            attributes = ((envelope.get("session") or {}).get("attributes")) or {}
            if not isinstance(attributes, dict):
                attributes = {}
            reply = render(Tell(speech=Speech(UNSUPPORTED), session_attributes=attributes))

        _record_turn(turn, envelope, reply)
        return jsonify(reply)

    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    create_app().run(host="0.0.0.0", port=5000, debug=True)

from flask import Flask, request, jsonify
from flask_cors import CORS
import os
import logging
import threading
import time
import uuid
from werkzeug.exceptions import HTTPException

from counters.counter_factory import get_counter, parse_exercise_type, default_target
from counters.landmarks import Frame
from counters.session import ExerciseSession

app = Flask(__name__)
CORS(app, resources={r"/*": {"origins": os.environ.get("CORS_ORIGINS", "*").split(",")}})
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

# Sessions idle longer than this are dropped; clients usually just stop sending frames.
SESSION_TTL_SECONDS = float(os.environ.get("SESSION_TTL_SECONDS", 300))
clock = time.monotonic

sessions = {}
sessions_lock = threading.Lock()


class SessionEntry:
    """A live session with the lock that serializes requests for it."""

    def __init__(self, session):
        self.session = session
        self.lock = threading.Lock()
        self.last_seen = clock()

    def touch(self):
        self.last_seen = clock()


class SessionNotFound(Exception):
    pass


def error_response(message, status):
    return jsonify({'status': 'error', 'message': message}), status


def evict_idle_sessions():
    """Drop sessions not seen within SESSION_TTL_SECONDS. Caller holds sessions_lock."""
    now = clock()
    expired = [sid for sid, entry in sessions.items() if now - entry.last_seen > SESSION_TTL_SECONDS]
    for sid in expired:
        del sessions[sid]
        logging.info(f"Session {sid} expired after {SESSION_TTL_SECONDS:.0f}s idle")


def get_entry(session_id):
    with sessions_lock:
        evict_idle_sessions()
        entry = sessions.get(session_id)
    if entry is None:
        raise SessionNotFound(session_id)
    return entry


def create_session(exercise, target=None, squat_strategy=None):
    exercise_type = parse_exercise_type(exercise)
    if target is None:
        target = default_target(exercise_type)
    elif isinstance(target, bool) or not isinstance(target, int):
        raise ValueError(f"Target must be an integer, got {target!r}")
    counter = get_counter(exercise_type, target=target, squat_strategy=squat_strategy)
    return ExerciseSession(counter, target, exercise=exercise_type.value)


@app.errorhandler(SessionNotFound)
def handle_session_not_found(e):
    return error_response(f"Session not found: {e}", 404)


@app.errorhandler(ValueError)
def handle_bad_request(e):
    logging.warning(f"Bad request on {request.path}: {e}")
    return error_response(str(e), 400)


@app.route('/health', methods=['GET'])
def health():
    return jsonify({'status': 'ok'})


@app.route('/sessions', methods=['POST'])
def start_session():
    body = request.get_json(silent=True) or {}
    if not (exercise := body.get('exercise')):
        return error_response("Missing 'exercise'", 400)

    session = create_session(exercise, body.get('target'), body.get('squat_strategy'))
    session_id = uuid.uuid4().hex
    summary = session.summary()
    with sessions_lock:
        evict_idle_sessions()
        sessions[session_id] = SessionEntry(session)
    logging.info(f"Session {session_id} created for {session.exercise}")
    return jsonify({'session_id': session_id, **summary}), 201


@app.route('/sessions/<session_id>/frames', methods=['POST'])
def submit_frame(session_id):
    entry = get_entry(session_id)
    body = request.get_json(silent=True)
    if body is None:
        return error_response("Request body must be JSON", 400)

    frame = Frame.from_dict(body)
    with entry.lock:
        entry.touch()
        entry.session.on_frame(frame)
        return jsonify(entry.session.summary())


@app.route('/sessions/<session_id>', methods=['GET'])
def session_status(session_id):
    entry = get_entry(session_id)
    with entry.lock:
        return jsonify(entry.session.summary())


@app.route('/sessions/<session_id>/reset', methods=['POST'])
def reset_session(session_id):
    entry = get_entry(session_id)
    with entry.lock:
        entry.touch()
        entry.session.reset()
        logging.info(f"Session {session_id} reset")
        return jsonify(entry.session.summary())


@app.route('/sessions/<session_id>', methods=['DELETE'])
def end_session(session_id):
    with sessions_lock:
        entry = sessions.pop(session_id, None)
    if entry is None:
        raise SessionNotFound(session_id)
    with entry.lock:
        summary = entry.session.summary()
    logging.info(f"Session {session_id} ended at {summary['progress']}/{summary['target']}")
    return jsonify(summary)


@app.errorhandler(Exception)
def handle_unexpected(e):
    if isinstance(e, HTTPException):
        return e
    logging.error(f"Error handling {request.path}: {e}", exc_info=True)
    return error_response('Internal server error', 500)


if __name__ == '__main__':
    port = int(os.environ.get("PORT", 8080))
    app.run(host='0.0.0.0', port=port)

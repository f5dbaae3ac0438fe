#!/usr/bin/env python3
"""
Task Board Server
-----------------
JSON API for the task store and the note store, backed by SQLite.
The board client (taskboard.client) talks to this.

Usage:
    python board_server.py                      # 127.0.0.1:5000, default DB
    python board_server.py --db /tmp/board.db --port 5001

API (all under /api):
    GET    /tasks/<owner_id>   → [task, ...]            newest first
    POST   /tasks              → task                   201; body needs title + assignedTo
    PUT    /tasks/<task_id>    → task                   partial update; 404 if absent
    DELETE /tasks/<task_id>    → { message }            idempotent
    GET    /notes/<owner_id>   → { content }            find-or-create
    PUT    /notes/<owner_id>   → { content }            upsert; body { content }
    GET    /health             → { status, db }

Mutating routes require X-API-Key when TASKBOARD_API_SECRET is set.
"""

import hmac
import os
from functools import wraps
from pathlib import Path

from flask import Flask, jsonify, request

from taskboard.config import setup_logging
from taskboard.errors import ValidationError
from taskboard.store import BoardStore, DEFAULT_DB_PATH

app = Flask(__name__)


# ── Auth ─────────────────────────────────────────────────────────────────────

def require_api_key(f):
    """Decorator: when TASKBOARD_API_SECRET is set, require a matching X-API-Key header."""
    @wraps(f)
    def decorated(*args, **kwargs):
        secret = os.environ.get("TASKBOARD_API_SECRET", "")
        if secret:
            provided = request.headers.get("X-API-Key", "").strip()
            if not hmac.compare_digest(provided, secret):
                code = 401 if not provided else 403
                return jsonify({"error": "Unauthorized"}), code
        return f(*args, **kwargs)
    return decorated


# ── Config ───────────────────────────────────────────────────────────────────

def get_db_path() -> Path:
    env = os.environ.get("TASKBOARD_DB")
    if env:
        return Path(env)
    return DEFAULT_DB_PATH


def get_store() -> BoardStore:
    return BoardStore(str(get_db_path()))


@app.errorhandler(ValidationError)
def handle_validation_error(e):
    return jsonify({"error": str(e)}), 400


@app.errorhandler(Exception)
def handle_unexpected(e):
    # Let Flask's own HTTP errors (404 for unknown routes, 405...) through
    if hasattr(e, "code") and hasattr(e, "description"):
        return jsonify({"error": e.description}), e.code
    app.logger.exception(f"Unhandled error on {request.method} {request.path}")
    return jsonify({"error": "Internal server error"}), 500


# ── Tasks ────────────────────────────────────────────────────────────────────

@app.route("/api/tasks/<owner_id>", methods=["GET"])
def api_list_tasks(owner_id):
    tasks = get_store().list_by_owner(owner_id)
    return jsonify([t.to_dict() for t in tasks])


@app.route("/api/tasks", methods=["POST"])
@require_api_key
def api_create_task():
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "JSON object body required"}), 400
    task = get_store().create(data)
    app.logger.info(f"Created task {task.id} for {task.assigned_to}")
    return jsonify(task.to_dict()), 201


@app.route("/api/tasks/<task_id>", methods=["PUT"])
@require_api_key
def api_update_task(task_id):
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "JSON object body required"}), 400
    task = get_store().update(task_id, data)
    if task is None:
        return jsonify({"error": "Task not found"}), 404
    return jsonify(task.to_dict())


@app.route("/api/tasks/<task_id>", methods=["DELETE"])
@require_api_key
def api_delete_task(task_id):
    get_store().delete(task_id)
    return jsonify({"message": "Task deleted"})


# ── Notes ────────────────────────────────────────────────────────────────────

@app.route("/api/notes/<owner_id>", methods=["GET"])
def api_get_note(owner_id):
    return jsonify({"content": get_store().get_note(owner_id)})


@app.route("/api/notes/<owner_id>", methods=["PUT"])
@require_api_key
def api_put_note(owner_id):
    data = request.get_json(force=True, silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "JSON object body required"}), 400
    content = data.get("content", data.get("notes", ""))
    if not isinstance(content, str):
        return jsonify({"error": "content must be a string"}), 400
    return jsonify({"content": get_store().upsert_note(owner_id, content)})


@app.route("/health")
def health():
    return jsonify({"status": "ok", "db": str(get_db_path())})


# ── Main ─────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Task Board Server")
    parser.add_argument("--host", default="127.0.0.1",
                        help="Bind address (use 0.0.0.0 to expose on network)")
    parser.add_argument("--port", type=int, default=5000)
    parser.add_argument("--db", help="Path to board.db (overrides TASKBOARD_DB env var)")
    parser.add_argument("--log-level", default=os.environ.get("TASKBOARD_LOG_LEVEL", "INFO"))
    args = parser.parse_args()

    if args.db:
        os.environ["TASKBOARD_DB"] = args.db

    setup_logging(args.log_level)
    db_path = get_db_path()
    get_store()  # create schema up front

    print(f"""
╔═══════════════════════════════════════╗
║  Task Board Server                    ║
╠═══════════════════════════════════════╣
║  URL:  http://{args.host}:{args.port:<20}║
║  DB:   {str(db_path):<31}║
╚═══════════════════════════════════════╝
""")

    app.run(host=args.host, port=args.port, debug=False, threaded=True)

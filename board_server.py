#!/usr/bin/env python3
"""
Task Board Server
-----------------
JSON API over a single in-memory board session. The rendering layer (any web
or terminal UI) reads the board and forwards form and drag gestures here.

Usage:
    python board_server.py --port 3000
    python board_server.py --db /tmp/board.db

API:
    GET    /api/board                    → { columns, statusLabels, counts, form, dragging }
    GET    /api/columns/<column>         → { column, tasks, count }
    DELETE /api/columns/<column>/<index> → { ok }            (?taskId= guards stale slots)
    GET    /api/form                     → form state
    POST   /api/form/create              → body { column }
    POST   /api/form/edit                → body { column, index }
    PATCH  /api/form/draft               → body { title, description, priority, ... }
    POST   /api/form/save                → { ok, form }
    POST   /api/form/cancel
    POST   /api/drag/start               → body { column, index }  → { ok, payload }
    POST   /api/drag/drop                → body { column, payload? }
    POST   /api/drag/end
    POST   /api/board/reset
    GET    /health

Mutating routes require an X-API-Key header when TASKBOARD_API_SECRET is set.
"""

import argparse
import hmac
import logging
import os
import sys
from functools import wraps

from flask import Flask, current_app, jsonify, request

from taskboard.board import TaskBoard
from taskboard.config import Config
from taskboard.drag import parse_payload
from taskboard.schema import Column

logger = logging.getLogger("taskboard.server")


# ── Auth ─────────────────────────────────────────────────────────────────────

def require_api_key(f):
    """Decorator: when a secret is configured, reject requests without it."""
    @wraps(f)
    def decorated(*args, **kwargs):
        secret = current_app.config.get("API_SECRET", "")
        if secret:
            provided = request.headers.get("X-API-Key", "").strip()
            if not hmac.compare_digest(provided, secret):
                code = 401 if not provided else 403
                return jsonify({"error": "Unauthorized"}), code
        return f(*args, **kwargs)
    return decorated


# ── Helpers ──────────────────────────────────────────────────────────────────

def _board() -> TaskBoard:
    return current_app.config["BOARD"]


def _body() -> dict:
    data = request.get_json(force=True, silent=True)
    return data if isinstance(data, dict) else {}


def _index(value) -> int:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValueError(f"Invalid index: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid index: {value!r}") from None


# ── App ──────────────────────────────────────────────────────────────────────

def create_app(board: TaskBoard, api_secret: str = "") -> Flask:
    app = Flask(__name__)
    app.config["BOARD"] = board
    app.config["API_SECRET"] = api_secret

    @app.errorhandler(ValueError)
    def bad_request(e):
        return jsonify({"error": str(e)}), 400

    @app.route("/api/board")
    def api_board():
        return jsonify(_board().to_dict())

    @app.route("/api/columns/<column>")
    def api_column(column):
        col = Column.from_str(column)
        tasks = [t.to_dict() for t in _board().columns.get(col)]
        return jsonify({"column": col.value, "tasks": tasks, "count": len(tasks)})

    @app.route("/api/columns/<column>/<index>", methods=["DELETE"])
    @require_api_key
    def api_delete(column, index):
        board = _board()
        ok = board.form.delete(Column.from_str(column), _index(index),
                               task_id=request.args.get("taskId"))
        return jsonify({"ok": ok, "counts": board.columns.counts()})

    # ── Form ────────────────────────────────────────────────────

    @app.route("/api/form", methods=["GET"])
    def api_form():
        return jsonify(_board().form.to_dict())

    @app.route("/api/form/create", methods=["POST"])
    @require_api_key
    def api_form_create():
        data = _body()
        form = _board().form
        form.open_for_create(Column.from_str(data.get("column", "todo")))
        return jsonify({"ok": True, "form": form.to_dict()})

    @app.route("/api/form/edit", methods=["POST"])
    @require_api_key
    def api_form_edit():
        data = _body()
        board = _board()
        column = Column.from_str(data.get("column", ""))
        index = _index(data.get("index"))
        task = board.columns.task_at(column, index)
        if task is None:
            return jsonify({"ok": False, "form": board.form.to_dict()})
        board.form.open_for_edit(task, column, index)
        return jsonify({"ok": True, "form": board.form.to_dict()})

    @app.route("/api/form/draft", methods=["PATCH"])
    @require_api_key
    def api_form_draft():
        data = _body()
        fields = {
            ("status_label" if k == "statusLabel" else k): v
            for k, v in data.items()
        }
        form = _board().form
        form.update_draft(**fields)
        return jsonify({"ok": True, "form": form.to_dict()})

    @app.route("/api/form/save", methods=["POST"])
    @require_api_key
    def api_form_save():
        board = _board()
        ok = board.form.save()
        return jsonify({"ok": ok, "form": board.form.to_dict(),
                        "counts": board.columns.counts()})

    @app.route("/api/form/cancel", methods=["POST"])
    @require_api_key
    def api_form_cancel():
        form = _board().form
        form.cancel()
        return jsonify({"ok": True, "form": form.to_dict()})

    # ── Drag ────────────────────────────────────────────────────

    @app.route("/api/drag/start", methods=["POST"])
    @require_api_key
    def api_drag_start():
        data = _body()
        payload = _board().drag.start(Column.from_str(data.get("column", "")),
                                      _index(data.get("index")))
        return jsonify({"ok": payload is not None, "payload": payload})

    @app.route("/api/drag/drop", methods=["POST"])
    @require_api_key
    def api_drag_drop():
        data = _body()
        board = _board()
        sent = data.get("payload")
        if sent is not None:
            echoed = parse_payload(sent)
            if echoed is None:
                raise ValueError("Malformed drag payload")
            if echoed != board.drag.context:
                logger.debug(f"Drop payload {echoed} differs from drag context {board.drag.context}")
        ok = board.drag.drop(Column.from_str(data.get("column", "")))
        return jsonify({"ok": ok, "counts": board.columns.counts()})

    @app.route("/api/drag/end", methods=["POST"])
    @require_api_key
    def api_drag_end():
        _board().drag.end()
        return jsonify({"ok": True})

    @app.route("/api/board/reset", methods=["POST"])
    @require_api_key
    def api_reset():
        board = _board()
        board.reset()
        return jsonify({"ok": True, "counts": board.columns.counts()})

    @app.route("/health")
    def health():
        board = _board()
        return jsonify({"status": "ok", "storage_key": board.persistence.key,
                        "counts": board.columns.counts()})

    return app


# ── Main ─────────────────────────────────────────────────────────────────────

def main(argv=None):
    parser = argparse.ArgumentParser(description="Task Board Server")
    parser.add_argument("--config", help="Path to taskboard.yaml (overrides TASKBOARD_CONFIG)")
    parser.add_argument("--host", help="Bind address (use 0.0.0.0 to expose on network)")
    parser.add_argument("--port", type=int)
    parser.add_argument("--db", help="Path to board.db (overrides TASKBOARD_DB env var)")
    parser.add_argument("--memory", action="store_true", help="Keep the board in memory only")
    args = parser.parse_args(argv)

    if args.db:
        os.environ["TASKBOARD_DB"] = args.db

    cfg = Config.load(args.config)
    if args.host:
        cfg.host = args.host
    if args.port:
        cfg.port = args.port
    if args.memory:
        cfg.storage_backend = "memory"
    cfg.validate()

    logging.basicConfig(
        level=getattr(logging, str(cfg.log_level).upper(), logging.INFO),
        format="%(asctime)s [taskboard] %(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    board = TaskBoard.from_config(cfg)
    app = create_app(board, os.environ.get("TASKBOARD_API_SECRET", ""))

    store_desc = cfg.db_path if cfg.storage_backend == "sqlite" else "memory"
    print(f"""
╔═══════════════════════════════════════╗
║  Task Board Server                    ║
╠═══════════════════════════════════════╣
║  URL:   http://{cfg.host}:{cfg.port:<19}║
║  Store: {store_desc:<30}║
╚═══════════════════════════════════════╝
""")

    # One request at a time: board mutations must never interleave
    app.run(host=cfg.host, port=cfg.port, debug=False, threaded=False)


if __name__ == "__main__":
    main()

"""
app.py
------

Flask web application exposing the trade journal commands. The app is a
thin caller of ``TradeJournal``: it turns requests into typed commands,
and journal results or errors into JSON responses. Rendering is left to
whatever front end consumes the JSON.

To run the application:
    1. Install the package (``pip install -e .``).
    2. Execute ``python -m tradelog.app``.
    3. Talk to http://localhost:5004 (``GET /`` lists trades and stats).

Environment variables (see ``JournalConfig.from_env``): TJ_DB, TJ_SCHEMA,
TJ_STRICT_RR, TJ_LOG_LEVEL, SECRET_KEY.

Note: The Flask development server is intended for local use.
"""
from typing import Any, Dict, Optional

from flask import Flask, Response, jsonify, request
from werkzeug.utils import secure_filename

from .config import JournalConfig
from .database import KeyValueStore
from .errors import (
    EmptyCollectionError,
    HeaderMismatchError,
    NotFoundError,
    ValidationError,
)
from .journal import TradeJournal
from .logger import setup_logger
from .models import Trade

ALLOWED_CSV = {"csv"}
FORM_FIELDS = ("setup", "ticker", "rr", "pnl", "active_mgmt", "execution", "note")


def allowed_file(filename: str) -> bool:
    return "." in filename and filename.rsplit(".", 1)[1].lower() in ALLOWED_CSV


def trade_to_json(trade: Trade) -> Dict[str, Any]:
    return {
        "id": trade.id,
        "date": trade.date.isoformat(),
        "setup": trade.setup,
        "ticker": trade.ticker,
        "rr": trade.rr,
        "pnl": trade.pnl,
        "active_mgmt": trade.active_mgmt,
        "execution": trade.execution,
        "note": trade.note,
    }


def _request_fields() -> Dict[str, Any]:
    """Read trade fields from a JSON body or a submitted form."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = request.form
    return {name: data.get(name) for name in FORM_FIELDS if data.get(name) is not None}


def create_app(config: Optional[JournalConfig] = None, store=None) -> Flask:
    config = config or JournalConfig.from_env()
    log = setup_logger(level=config.log_level)

    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.secret_key
    journal = TradeJournal(store if store is not None else KeyValueStore(config.db_path), config)
    app.extensions["trade_journal"] = journal

    def ok(payload: Dict[str, Any], status: int = 200):
        if journal.last_save_error:
            payload["warning"] = f"Error saving data to storage: {journal.last_save_error}"
        return jsonify(payload), status

    # ---------- errors ----------
    @app.errorhandler(ValidationError)
    def handle_validation(e: ValidationError):
        return jsonify({"error": str(e), "field": e.field}), 400

    @app.errorhandler(NotFoundError)
    def handle_not_found(e: NotFoundError):
        return jsonify({"error": str(e)}), 404

    # ---------- routes ----------
    @app.route("/")
    @app.route("/trades", methods=["GET"])
    def index():
        trades = journal.list_trades_newest_first()
        return ok({"trades": [trade_to_json(t) for t in trades], "stats": journal.stats()})

    @app.route("/stats")
    def stats():
        return ok(journal.stats())

    @app.route("/trades", methods=["POST"])
    def add_trade():
        trade = journal.add(_request_fields())
        return ok({"trade": trade_to_json(trade), "message": f"Trade #{trade.id} added successfully!"}, 201)

    @app.route("/trades/<int:trade_id>", methods=["GET"])
    def get_trade(trade_id: int):
        return ok({"trade": trade_to_json(journal.get(trade_id))})

    @app.route("/trades/<int:trade_id>", methods=["PUT", "POST"])
    def edit_trade(trade_id: int):
        trade = journal.update(trade_id, _request_fields())
        return ok({"trade": trade_to_json(trade), "message": f"Trade #{trade.id} updated"})

    @app.route("/trades/<int:trade_id>", methods=["DELETE"])
    def delete_trade(trade_id: int):
        journal.delete(trade_id)
        return ok({"message": f"Trade #{trade_id} deleted"})

    @app.route("/clear", methods=["POST"])
    def clear():
        data = request.get_json(silent=True)
        confirm = data.get("confirm") if isinstance(data, dict) else request.form.get("confirm")
        if str(confirm).lower() != "yes":
            return jsonify({"error": "Clearing all trades requires confirm=yes"}), 400
        journal.clear_all()
        return ok({"message": "All data cleared"})

    @app.route("/export", methods=["GET"], endpoint="export")
    def export_trades():
        try:
            text = journal.export_text()
        except EmptyCollectionError as e:
            return jsonify({"error": str(e)}), 404
        return Response(
            text,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={config.export_filename}"},
        )

    @app.route("/import", methods=["POST"])
    def import_trades():
        f = request.files.get("file")
        if f is not None:
            if f.filename == "" or not allowed_file(secure_filename(f.filename)):
                return jsonify({"error": "Only .csv files are supported."}), 400
            content = f.read().decode("utf-8", errors="ignore")
        else:
            content = request.get_data(as_text=True)
        if not content.strip():
            return jsonify({"error": "CSV file appears to be empty"}), 400

        try:
            result = journal.import_text(content)
        except HeaderMismatchError as e:
            return jsonify({"error": str(e), "expected": e.expected}), 400
        payload = result.to_dict()
        payload["message"] = f"Imported {result.imported} trades. Skipped {result.skipped} invalid rows."
        log.info(payload["message"])
        return ok(payload)

    return app


# Run directly
if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=5004, debug=True, use_reloader=False)

from __future__ import annotations

from pathlib import Path

from flask import Flask, jsonify, make_response, request, send_from_directory

from core.config import AppConfig, configure_logging
from core.mpl_backend import configure_headless_matplotlib
from core.sequences import ValidationError
from core.service import (
    DEMO_EDITED,
    DEMO_ORIGINAL,
    EXPORT_FORMATS,
    comparison_from_payload,
    export_comparison,
    render_comparison_svg,
    report_to_payload,
)
from core.verification import LocalLedgerSubmitter, VerificationQueue, VerificationRecord

configure_headless_matplotlib()

BASE_DIR = Path(__file__).resolve().parent
STATIC_DIR = BASE_DIR / "static"

CONFIG = AppConfig.from_env()
configure_logging(CONFIG.log_level)

app = Flask(__name__, static_folder=str(STATIC_DIR), static_url_path="/static")
app.config["SEQCOMPARE"] = CONFIG
app.extensions["verification_queue"] = VerificationQueue(
    LocalLedgerSubmitter(
        CONFIG.explorer_url,
        CONFIG.network,
        delay_seconds=CONFIG.submit_delay_seconds,
    ),
    job_ttl_seconds=CONFIG.job_ttl_seconds,
    approval_window_seconds=CONFIG.approval_window_seconds,
)


def _queue() -> VerificationQueue:
    return app.extensions["verification_queue"]


def _error_response(exc: Exception):
    if isinstance(exc, ValidationError):
        app.logger.info("Rejected comparison input: %s", exc)
        return jsonify(exc.to_dict()), 400
    return jsonify({"error": str(exc)}), 400


def _json_body() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValueError("Request body must be a JSON object")
    return payload


def _comparison_from_request():
    return comparison_from_payload(_json_body(), max_length=app.config["SEQCOMPARE"].max_length)


@app.get("/")
def index():
    return send_from_directory(STATIC_DIR, "index.html")


@app.get("/api/demo")
def api_demo():
    return jsonify({"original": DEMO_ORIGINAL, "edited": DEMO_EDITED})


@app.post("/api/compare")
def api_compare():
    try:
        report = _comparison_from_request()
    except Exception as exc:
        return _error_response(exc)
    return jsonify(report_to_payload(report))


@app.post("/api/render")
def api_render():
    try:
        report = _comparison_from_request()
        svg = render_comparison_svg(report)
    except Exception as exc:
        return _error_response(exc)

    body = report_to_payload(report)
    body["svg"] = svg
    return jsonify(body)


@app.post("/api/export")
def api_export():
    try:
        fmt = str(_json_body().get("format", "svg")).strip().lower()
        if fmt not in EXPORT_FORMATS:
            raise ValueError("Export format must be 'svg' or 'png'")
        report = _comparison_from_request()
        blob = export_comparison(report, fmt)
    except Exception as exc:
        return _error_response(exc)

    response = make_response(blob)
    response.headers["Content-Type"] = EXPORT_FORMATS[fmt]
    response.headers["Content-Disposition"] = f"attachment; filename=sequence_comparison.{fmt}"
    return response


@app.post("/api/verify/start")
def api_verify_start():
    _queue().cleanup_expired()
    try:
        report = _comparison_from_request()
        record = VerificationRecord.from_result(report.result)
        job_id = _queue().start(record)
    except Exception as exc:
        return _error_response(exc)
    return jsonify({"job_id": job_id, "record": record.to_dict()})


@app.get("/api/verify/jobs/<job_id>")
def api_verify_job_status(job_id: str):
    try:
        status = _queue().get(job_id)
    except Exception as exc:
        return _error_response(exc)
    return jsonify(status)


@app.post("/api/verify/jobs/<job_id>/cancel")
def api_verify_job_cancel(job_id: str):
    try:
        payload = _queue().cancel(job_id)
    except Exception as exc:
        return _error_response(exc)
    return jsonify(payload)


if __name__ == "__main__":
    app.run(host="127.0.0.1", port=5000, debug=True, threaded=True)

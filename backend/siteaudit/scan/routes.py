from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request

from siteaudit.scanner import ScanOrchestrator, ScanRequestError

logger = logging.getLogger(__name__)

scan_bp = Blueprint("scan", __name__)


def get_orchestrator() -> ScanOrchestrator:
    injected = current_app.config.get("SCAN_ORCHESTRATOR")
    if injected is not None:
        return injected
    return ScanOrchestrator(configs=current_app.config.get("SCANNER_CONFIG"))


@scan_bp.post("/scan")
def run_scan():
    body = request.get_json(silent=True) or {}
    if not isinstance(body, dict):
        return jsonify(error="request body must be a JSON object"), 400

    url = body.get("url")
    scan_types = body.get("scanTypes")

    try:
        report = get_orchestrator().execute(url, scan_types)
    except ScanRequestError as e:
        logger.info(f"Rejected scan request: {e}")
        return jsonify(error=str(e)), 400

    return jsonify(report.to_dict()), 200


@scan_bp.get("/scan/scanners")
def list_scanners():
    scanners = get_orchestrator().scanners
    return jsonify(scanners=[
        {"name": tag, "scannerType": scanner.scanner_type}
        for tag, scanner in scanners.items()
    ]), 200

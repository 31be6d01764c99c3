#!/usr/bin/env python3
"""
Plan Engine HTTP API

Flask JSON API over the plan engine for calendar and UI consumers.
"""

import os

from flask import Flask, jsonify, request

from plan_engine.config_loader import get_config
from plan_engine.hiit_templates import build_workout_templates
from plan_engine.logger import get_logger
from plan_engine.models import UserProfile, events_to_dicts
from plan_engine.plan_generator import PlanRequest
from plan_engine.plan_service import PlanService
from plan_engine.plan_store import JsonFilePlanStore
from plan_engine.reporting import LoggingNotifier
from plan_engine.zones import resolve_zones

app = Flask(__name__)


# Security headers
@app.after_request
def set_security_headers(response):
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
    if os.environ.get('FLASK_ENV') == 'production':
        response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
    return response


def get_service() -> PlanService:
    """Service from app config; file-backed store from paths.store_dir by default."""
    service = app.config.get('PLAN_SERVICE')
    if service is None:
        store = JsonFilePlanStore(get_config().get_store_dir())
        service = PlanService(store, LoggingNotifier())
        app.config['PLAN_SERVICE'] = service
    return service


# =============================================================================
# API ROUTES
# =============================================================================

@app.route('/api/health')
def api_health():
    return jsonify({"status": "ok"})


@app.route('/api/zones')
def api_zones():
    """Zones for ?ftp=; a missing or invalid FTP falls back to the default."""
    ftp = request.args.get('ftp', type=float)
    return jsonify(resolve_zones(ftp).to_dict())


@app.route('/api/workouts')
def api_workouts():
    profile = UserProfile(
        ftp=request.args.get('ftp', type=float),
        experience=request.args.get('level', 'intermediate'),
    )
    return jsonify(build_workout_templates(profile).to_dict())


@app.route('/api/plan', methods=['POST'])
def api_generate_plan():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Expected a JSON object"}), 400

    result = get_service().regenerate(PlanRequest.from_dict(data))
    if not result.ok:
        return jsonify({"error": "Invalid plan request", "errors": result.errors}), 400

    get_logger().info("Plan generated via API", weeks=result.plan.duration_weeks)
    return jsonify(result.to_dict())


@app.route('/api/plan', methods=['GET'])
def api_current_plan():
    plan = get_service().current_plan()
    if plan is None:
        return jsonify({"error": "No plan generated yet"}), 404
    return jsonify(plan.to_dict())


@app.route('/api/plan', methods=['DELETE'])
def api_reset_plan():
    removed = get_service().reset()
    return jsonify({"reset": True, "removed": removed})


@app.route('/api/calendar', methods=['POST'])
def api_calendar():
    """Calendar events for the stored plan; an empty list when there is none."""
    data = request.get_json(silent=True) or {}
    start_date = data.get('start_date') if isinstance(data, dict) else None
    events = get_service().export_calendar(start_date)
    return jsonify({"events": events_to_dicts(events), "count": len(events)})


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.errorhandler(404)
def not_found(e):
    return jsonify({"error": "Not found"}), 404


@app.errorhandler(405)
def method_not_allowed(e):
    return jsonify({"error": "Method not allowed"}), 405


@app.errorhandler(500)
def server_error(e):
    get_logger().error(f"Unhandled error: {e}")
    return jsonify({"error": "Internal server error"}), 500


# =============================================================================
# MAIN
# =============================================================================

if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    # Default to false in production, true only if explicitly set
    debug = os.environ.get('FLASK_DEBUG', 'false').lower() == 'true'
    app.run(host='0.0.0.0', port=port, debug=debug)

"""
Administrative routes: reminders, settings and audit log
"""

from flask import Blueprint, request, jsonify

from taps.services import AuditTrail, get_workflow
from taps.utils import ValidationError, log_error, create_response
from taps.workflow.results import SETTINGS_UPDATED

admin_bp = Blueprint('admin', __name__)

audit = AuditTrail()


@admin_bp.route('/reminders/send', methods=['POST'])
def send_reminders():
    """Run the reminder sweep (also callable from a scheduler)"""
    result = get_workflow().send_reminder_sweep()
    if result.success:
        return jsonify(create_response(True, "Reminder emails processed successfully", result.data))
    return jsonify(create_response(False, result.message or "Failed to process reminder emails",
                                   {'reason': result.reason.value})), 400


@admin_bp.route('/settings', methods=['GET'])
def get_settings():
    """Get notification settings with secrets masked"""
    try:
        row = get_workflow().settings.load_row()
        return jsonify(create_response(True, "Settings retrieved", row.to_dict()))
    except Exception as e:
        log_error("Get settings error", e)
        return jsonify(create_response(False, "Failed to fetch settings")), 500


@admin_bp.route('/settings', methods=['PATCH'])
def update_settings():
    """Update notification settings and drop the cached copy"""
    try:
        data = request.get_json(silent=True)
        if not data:
            return jsonify(create_response(False, "No data provided")), 400

        row = get_workflow().settings.update(data)
        changed = sorted(key for key in data if key != 'email_password')
        audit.append(SETTINGS_UPDATED, {'fields': changed}, user_id=data.get('user_id'))
        return jsonify(create_response(True, "Settings updated", row.to_dict()))

    except ValidationError as e:
        return jsonify(create_response(False, str(e))), 400
    except Exception as e:
        log_error("Update settings error", e)
        return jsonify(create_response(False, "Failed to update settings")), 500


@admin_bp.route('/audit', methods=['GET'])
def list_audit():
    """List audit events, newest first"""
    try:
        limit = min(int(request.args.get('limit', 100)), 500)
        events = audit.list_events(
            request_id=request.args.get('request_id'),
            action=request.args.get('action'),
            limit=limit,
        )
        return jsonify(create_response(True, "Audit events retrieved", [e.to_dict() for e in events]))
    except ValueError:
        return jsonify(create_response(False, "limit must be a number")), 400
    except Exception as e:
        log_error("Get audit log error", e)
        return jsonify(create_response(False, "Failed to fetch audit log")), 500

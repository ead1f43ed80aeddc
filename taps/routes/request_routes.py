"""
Transcript request routes
"""

from flask import Blueprint, request, jsonify

from taps.models import db
from taps.services import AuditTrail, RequestStore, get_workflow
from taps.services.request_store import UPDATABLE_FIELDS
from taps.utils import (
    ValidationError, NotFoundError, log_error, log_info, create_response,
    validate_required, validate_string_length, validate_email
)
from taps.workflow import Department
from taps.workflow.results import REQUEST_CREATED, REQUEST_UPDATED

request_bp = Blueprint('requests', __name__)

MAX_PAGE_SIZE = 100

store = RequestStore()
audit = AuditTrail()


def _results_to_dict(results):
    return {name: result.to_dict() for name, result in results.items()}


@request_bp.route('/requests', methods=['GET'])
def list_requests():
    """List transcript requests"""
    try:
        department = request.args.get('department')
        if department:
            Department.parse(department)
        page = max(1, int(request.args.get('page', 1)))
        limit = max(1, min(int(request.args.get('limit', 20)), MAX_PAGE_SIZE))

        requests, total = store.find_many(
            status=request.args.get('status'),
            pending_department=department,
            student_email=request.args.get('student_email'),
            page=page,
            limit=limit,
        )

        return jsonify(create_response(True, "Requests retrieved", {
            'requests': [req.to_dict() for req in requests],
            'pagination': {
                'page': page,
                'limit': limit,
                'total': total,
                'pages': (total + limit - 1) // limit if limit else 1,
            },
        }))

    except ValueError as e:
        return jsonify(create_response(False, str(e))), 400
    except Exception as e:
        log_error("Get requests error", e)
        return jsonify(create_response(False, "Failed to fetch requests")), 500


@request_bp.route('/requests/<request_id>', methods=['GET'])
def get_request(request_id):
    """Get a single request with its audit timeline"""
    try:
        transcript_request = store.get_or_404(request_id)
        data = transcript_request.to_dict()
        data['audit_logs'] = [entry.to_dict() for entry in audit.list_events(request_id=request_id)]
        return jsonify(create_response(True, "Request retrieved", data))

    except NotFoundError as e:
        return jsonify(create_response(False, str(e))), 404
    except Exception as e:
        log_error("Get request error", e)
        return jsonify(create_response(False, "Failed to fetch request")), 500


@request_bp.route('/requests', methods=['POST'])
def create_request():
    """Create new transcript request"""
    try:
        data = request.get_json(silent=True)
        if not data:
            return jsonify(create_response(False, "No data provided")), 400

        # Validate required fields
        validate_required(data.get('student_id'), 'Student ID')
        validate_required(data.get('student_email'), 'Student email')
        validate_required(data.get('program'), 'Program')
        validate_string_length(data['program'], max_length=200, field_name='Program')
        if not validate_email(data['student_email']):
            raise ValidationError("Invalid email format")

        transcript_request = store.create(
            request_id=data.get('request_id') or None,
            student_id=str(data['student_id']).strip(),
            student_email=data['student_email'].strip().lower(),
            requestor=data.get('requestor'),
            program=data['program'],
        )
        audit.append(REQUEST_CREATED, {'requestId': transcript_request.id},
                     request_id=transcript_request.id, user_id=data.get('user_id'))
        log_info(f"Transcript request {transcript_request.display_id} created")

        notifications = get_workflow().handle_request_created(transcript_request)

        payload = transcript_request.to_dict()
        payload['notifications'] = _results_to_dict(notifications)
        return jsonify(create_response(True, "Transcript request created", payload)), 201

    except ValidationError as e:
        return jsonify(create_response(False, str(e))), 400
    except Exception as e:
        log_error("Create request error", e)
        db.session.rollback()
        return jsonify(create_response(False, "Failed to create request")), 500


@request_bp.route('/requests/<request_id>', methods=['PATCH'])
def update_request(request_id):
    """Update department statuses and notes, then fire workflow notifications"""
    try:
        data = request.get_json(silent=True)
        if not data:
            return jsonify(create_response(False, "No data provided")), 400

        transcript_request = store.get_or_404(request_id)
        changes = {field: data[field] for field in UPDATABLE_FIELDS if field in data}
        if not changes:
            return jsonify(create_response(False, "No updatable fields provided")), 400

        # Snapshot before mutating so transitions can be detected
        before = transcript_request.status_snapshot()
        store.update(transcript_request, changes)
        audit.append(REQUEST_UPDATED, changes, request_id=transcript_request.id,
                     user_id=data.get('user_id'))

        notifications = get_workflow().handle_request_updated(transcript_request, before)

        payload = transcript_request.to_dict()
        payload['notifications'] = _results_to_dict(notifications)
        return jsonify(create_response(True, "Request updated", payload))

    except NotFoundError as e:
        return jsonify(create_response(False, str(e))), 404
    except Exception as e:
        log_error("Update request error", e)
        db.session.rollback()
        return jsonify(create_response(False, "Failed to update request")), 500

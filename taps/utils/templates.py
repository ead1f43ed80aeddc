"""
Email template variable substitution
"""

from typing import Any, Mapping, Optional


def _first(*values: Any) -> Optional[str]:
    for value in values:
        if value:
            return str(value)
    return None


def replace_template_variables(template: Optional[str], data: Mapping[str, Any]) -> str:
    """
    Replace the fixed placeholder tokens in a template

    Recognised tokens are {{REQUEST_ID}}, {{STUDENT_NAME}}, {{STUDENT_ID}},
    {{STUDENT_EMAIL}} and {{PROGRAM}}. Matching is case-sensitive and every
    occurrence is replaced. Any other {{...}} token is left as-is.

    Args:
        template: Template text
        data: Values keyed by request_id, id, student_name, requestor,
            student_id, student_email, program

    Returns:
        Rendered text, or '' for an empty template
    """
    if not template:
        return ''

    record_id = data.get('id')
    replacements = {
        '{{REQUEST_ID}}': _first(data.get('request_id'),
                                 str(record_id)[:8] if record_id else None) or 'N/A',
        '{{STUDENT_NAME}}': _first(data.get('student_name'), data.get('requestor')) or 'Student',
        '{{STUDENT_ID}}': _first(data.get('student_id')) or 'N/A',
        '{{STUDENT_EMAIL}}': _first(data.get('student_email')) or 'N/A',
        '{{PROGRAM}}': _first(data.get('program')) or 'N/A',
    }

    result = template
    for token, value in replacements.items():
        result = result.replace(token, value)
    return result


def template_data(request) -> dict:
    """Template values for a transcript request"""
    return {
        'id': request.id,
        'request_id': request.request_id,
        'student_name': request.requestor,
        'student_id': request.student_id,
        'student_email': request.student_email,
        'program': request.program,
    }

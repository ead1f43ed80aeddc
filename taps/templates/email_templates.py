"""
HTML wrappers and default wording for workflow emails
"""

from html import escape

FOOTER_TEXT = "This is an automated message from the TAPS - Transcript Automation and Processing Service."

DEFAULT_QUEUE_BODY = (
    "Dear colleagues,\n\n"
    "A transcript request has been submitted by {{STUDENT_NAME}} {{STUDENT_ID}}.\n\n"
    "Please indicate if {{STUDENT_NAME}} is cleared for processing.\n\n"
    "Regards,"
)

DEFAULT_TEMPLATES = {
    'library_queue': (
        'Library Department Review Pending - {{REQUEST_ID}}',
        DEFAULT_QUEUE_BODY,
    ),
    'bursar_queue': (
        'Bursar Department Review Pending - {{REQUEST_ID}}',
        DEFAULT_QUEUE_BODY,
    ),
    'academic_queue': (
        'Academic corrections required: {{REQUEST_ID}}',
        "Dear Academic Department,\n\n"
        "{{STUDENT_NAME}} {{STUDENT_ID}} has submitted a request for a transcript. "
        "Based on our review of the student's academic history, we noticed missing "
        "details for the following:\n\n\n\n"
        "Please submit the updated GPA Guide and the relevant documents as per the "
        "details provided above.\n\n"
        "These submissions must be uploaded by 3 working days from notification date.\n\n"
        "Regards,",
    ),
    'academic_completed': (
        'Transcript Request for Academic Verification Completed - {{REQUEST_ID}}',
        "Dear Transcript Processor,\n\n"
        "Transcript request - {{REQUEST_ID}} - {{STUDENT_ID}} has been verified and "
        "there are no corrections.\n\n"
        "Regards,",
    ),
    'academic_correction': (
        'Academic corrections required: {{REQUEST_ID}}',
        "Dear Transcript Processor,\n\n"
        "Transcript request - {{REQUEST_ID}} - {{STUDENT_ID}} has been reviewed and "
        "corrections are required.\n\n"
        "Regards,",
    ),
}


def get_plain_email_template(body: str) -> str:
    """Wrap rendered plain text in a minimal HTML layout"""
    content = escape(body).replace('\n', '<br>')
    return f"""
<html>
  <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
    <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
      {content}
    </div>
  </body>
</html>
"""


def get_status_update_template(title: str, greeting: str, summary: str, fields: list,
                               closing: str = '') -> str:
    """
    Status update email with a heading, label/value rows and the TAPS footer

    Args:
        title: Heading text
        greeting: Opening line, e.g. "Dear Bursar Department,"
        summary: One sentence describing the change
        fields: (label, value) pairs rendered as bold label rows
        closing: Optional final paragraph
    """
    rows = ''.join(
        f'<p><strong>{escape(label)}:</strong> {escape(str(value))}</p>'
        for label, value in fields
    )
    closing_html = f'<p>{escape(closing)}</p>' if closing else ''
    return f"""
<html>
  <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
    <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
      <h2 style="color: #2563eb;">{escape(title)}</h2>
      <p>{escape(greeting)}</p>
      <p>{escape(summary)}</p>
      {rows}
      {closing_html}
      <hr style="margin: 20px 0; border: none; border-top: 1px solid #eee;" />
      <p style="color: #666; font-size: 12px;">
        {FOOTER_TEXT}
      </p>
    </div>
  </body>
</html>
"""


def get_status_update_text(greeting: str, summary: str, fields: list, closing: str = '') -> str:
    """Plain-text twin of get_status_update_template"""
    lines = [greeting, '', summary, '']
    lines.extend(f'{label}: {value}' for label, value in fields)
    if closing:
        lines.extend(['', closing])
    lines.extend(['', 'Regards,', 'TAPS System'])
    return '\n'.join(lines)

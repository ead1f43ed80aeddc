"""
Services package initialization
"""

from flask import current_app

from taps.services.audit_service import AuditTrail
from taps.services.email_service import EmailService
from taps.services.request_store import RequestStore
from taps.services.settings_service import NotificationSettings, SettingsProvider
from taps.services.workflow_service import WorkflowService

EXTENSION_KEY = 'taps_workflow'


def init_workflow(app, channel=None, clock=None) -> WorkflowService:
    """Build the workflow service for an app and register it as an extension"""
    settings = SettingsProvider(app.config.get('DEFAULT_REMINDER_HOURS', 48))
    kwargs = {
        'channel': channel or EmailService.from_config(app.config, sender_settings=settings.get),
        'settings': settings,
        'suppression_hours': app.config.get('REMINDER_SUPPRESSION_HOURS', 24),
    }
    if clock is not None:
        kwargs['clock'] = clock
    workflow = WorkflowService(**kwargs)
    app.extensions[EXTENSION_KEY] = workflow
    return workflow


def get_workflow() -> WorkflowService:
    """Workflow service of the current app"""
    return current_app.extensions[EXTENSION_KEY]


__all__ = [
    'AuditTrail', 'EmailService', 'RequestStore', 'NotificationSettings',
    'SettingsProvider', 'WorkflowService', 'init_workflow', 'get_workflow'
]

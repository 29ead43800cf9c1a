"""
Webhook handling: event dispatch and the background worker that runs it
"""

from .webhook_dispatcher import WebhookDispatcher
from .webhook_worker import WebhookWorker, WorkerUnavailable

__all__ = ['WebhookDispatcher', 'WebhookWorker', 'WorkerUnavailable']

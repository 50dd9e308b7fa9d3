# webhooks/tasks.py
from celery import shared_task
import logging

log = logging.getLogger(__name__)


@shared_task
def deliver_webhook(webhook_id, payload, attempt=1):
	"""
	Deliver one consent event and log the attempt.

	Runs detached from the consent request; errors writing the log entry are
	left to fail the task.
	"""
	from .models import Webhook
	from .notifier import deliver

	try:
		webhook = Webhook.objects.get(pk=webhook_id)
	except Webhook.DoesNotExist:
		log.warning(f"Webhook {webhook_id} no longer exists, dropping delivery")
		return None

	if not webhook.enabled:
		log.info(f"Webhook {webhook_id} disabled since it was queued, dropping delivery")
		return None

	entry = deliver(webhook, payload, attempt=attempt)
	return {"status": entry.status, "status_code": entry.status_code, "log_id": entry.id}

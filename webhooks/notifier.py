"""
Consent event delivery to site-owner webhooks.

``notify`` is called from the consent intake and never blocks it: the HTTP
attempt runs in a Celery task, and the only trace a failed delivery leaves
is its row in the delivery log.
"""
from typing import Optional
import hashlib
import hmac
import json
import logging

import requests
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from engine.activity import check_target as check_url
from .models import Webhook, WebhookDeliveryLog
from .tasks import deliver_webhook

log = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Signature"
MAX_RESPONSE_BODY = 2000


def serialize_payload(payload: dict) -> bytes:
	return json.dumps(payload, separators=(",", ":"), default=str).encode("utf-8")


def sign_payload(body: bytes, secret: str) -> str:
	"""Hex HMAC-SHA256 of the raw request body."""
	return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_signature(body: bytes, signature: str, secret: str) -> bool:
	"""Check an ``X-Signature`` value against the body a receiver got."""
	if not signature or not secret:
		return False
	return hmac.compare_digest(sign_payload(body, secret), signature.strip().lower())


def check_target(url: str) -> Optional[str]:
	"""Why ``url`` may not receive deliveries, or None when it may."""
	return check_url(url, getattr(settings, "WEBHOOK_LOCAL_HOSTS", []))


def build_payload(domain, choice: str, consent_data: dict, request_info: dict) -> dict:
	return {
		"event": f"consent.{choice}",
		"timestamp": timezone.now().isoformat(),
		"siteId": str(domain.id),
		"userId": request_info.get("user_id"),
		"sessionId": request_info.get("session_id"),
		"consent": consent_data,
		"ip": request_info.get("ip"),
		"userAgent": request_info.get("user_agent"),
	}


def build_test_payload(webhook: Webhook) -> dict:
	return {
		"event": "test_webhook",
		"timestamp": timezone.now().isoformat(),
		"test": True,
		"webhook_id": webhook.id,
		"data": {"message": "This is a test webhook"},
	}


def record_delivery(webhook: Webhook, payload: dict, status: str, attempt: int = 1, is_test: bool = False,
					status_code=None, error_message=None, response_body=None) -> WebhookDeliveryLog:
	return WebhookDeliveryLog.objects.create(
		webhook=webhook,
		status=status,
		status_code=status_code,
		attempt=attempt,
		is_test=is_test,
		error_message=error_message,
		request_payload=payload,
		response_body=response_body,
	)


def deliver(webhook: Webhook, payload: dict, attempt: int = 1, is_test: bool = False) -> WebhookDeliveryLog:
	"""
	One HTTP attempt plus its log entry.

	Every outcome (rejected target, network failure, timeout, non-2xx) is
	recorded rather than raised. A failure to write the log entry itself does
	propagate.
	"""
	rejected = check_target(webhook.url)
	if rejected:
		log.warning(f"Webhook {webhook.id} not delivered: {rejected}")
		return record_delivery(webhook, payload, WebhookDeliveryLog.ERROR, attempt, is_test, error_message=rejected)

	body = serialize_payload(payload)
	headers = {"Content-Type": "application/json"}
	if webhook.secret:
		headers[SIGNATURE_HEADER] = sign_payload(body, webhook.secret)

	timeout = settings.WEBHOOK_TIMEOUT_SECONDS
	outcome = {"status": WebhookDeliveryLog.ERROR}
	try:
		response = requests.post(webhook.url, data=body, headers=headers, timeout=timeout, allow_redirects=False)
	except requests.Timeout:
		outcome["error_message"] = f"Request timed out after {timeout:g}s"
	except requests.RequestException as e:
		outcome["error_message"] = f"Request failed: {e}"
	else:
		outcome["status_code"] = response.status_code
		outcome["response_body"] = (response.text or "")[:MAX_RESPONSE_BODY] or None
		if 200 <= response.status_code < 300:
			outcome["status"] = WebhookDeliveryLog.SUCCESS
		elif 300 <= response.status_code < 400:
			outcome["error_message"] = f"Redirect not followed: {response.status_code} to {response.headers.get('Location', '?')}"
		else:
			outcome["error_message"] = f"HTTP error: {response.status_code} {response.reason or ''}".strip()

	if outcome["status"] == WebhookDeliveryLog.SUCCESS:
		log.info(f"Webhook {webhook.id} delivered {payload.get('event')} ({outcome['status_code']})")
	else:
		log.error(f"Webhook {webhook.id} delivery failed: {outcome['error_message']}")

	with transaction.atomic():
		return record_delivery(webhook, payload, attempt=attempt, is_test=is_test, **outcome)


def notify(domain, choice: str, consent_data: dict, request_info: dict):
	"""
	Queue a consent event for the site's webhook.

	Returns None when the site has no usable webhook, an error log entry when
	the target is refused or the task could not be queued, and the Celery
	result otherwise.
	"""
	webhook = Webhook.objects.filter(domain=domain).first()
	if webhook is None or not webhook.enabled or not webhook.url:
		return None

	payload = build_payload(domain, choice, consent_data, request_info)

	rejected = check_target(webhook.url)
	if rejected:
		log.warning(f"Webhook {webhook.id} refused for {domain.url}: {rejected}")
		return record_delivery(webhook, payload, WebhookDeliveryLog.ERROR, error_message=rejected)

	try:
		return deliver_webhook.delay(webhook.id, payload)
	except Exception as e:
		log.exception(f"Could not queue webhook delivery for {domain.url}: {e}")
		return record_delivery(webhook, payload, WebhookDeliveryLog.ERROR, error_message=f"Could not queue delivery: {e}")

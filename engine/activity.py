"""
Activity, consent and ping reports sent from the page to the collection API,
plus the site owner's decision webhook.

Reporting is best effort: a failed report is logged and never disturbs the
page.
"""
from datetime import timedelta
from typing import Optional
from urllib.parse import urlparse
import logging
import secrets

import requests

log = logging.getLogger(__name__)

ACTIVITY_PATH = "/api/analytics/activity/"
CONSENT_PATH = "/api/consents/create/"
PING_INTERVAL = timedelta(seconds=60)
REQUEST_TIMEOUT = 5

VISITOR_KEY = "cg_visitor_id"
SESSION_KEY = "cg_session_id"

LOCAL_HOSTS = {"localhost", "127.0.0.1", "::1", "0.0.0.0"}


def is_local_host(host: str, extra_hosts=()) -> bool:
	host = (host or "").lower()
	return host in LOCAL_HOSTS or host.endswith(".localhost") or host in extra_hosts


def check_target(url: str, extra_hosts=()) -> Optional[str]:
	"""Why ``url`` may not receive consent events, or None when it may."""
	try:
		parsed = urlparse(url or "")
	except ValueError as e:
		return f"Invalid webhook URL: {e}"
	if not parsed.hostname:
		return "Invalid webhook URL: missing host"
	if parsed.scheme == "https":
		return None
	if parsed.scheme == "http" and is_local_host(parsed.hostname, extra_hosts):
		return None
	return "Webhook URL must use HTTPS (plain http is only allowed for local development hosts)"


def http_post(url: str, payload: dict):
	# only the checked URL may receive the body, never a Location it points at
	response = requests.post(url, json=payload, timeout=REQUEST_TIMEOUT, allow_redirects=False)
	response.raise_for_status()
	if 300 <= response.status_code < 400:
		raise requests.HTTPError(f"Redirect not followed: {response.status_code}", response=response)
	return response


class ActivityReporter:
	def __init__(self, page, config, transport=http_post, ping_interval: timedelta = PING_INTERVAL):
		self.page = page
		self.config = config
		self.transport = transport
		self.ping_interval = ping_interval
		self.last_ping = None

	@property
	def visitor_id(self) -> str:
		storage = self.page.local_storage
		if VISITOR_KEY not in storage:
			storage[VISITOR_KEY] = f"cg_{secrets.token_hex(8)}"
		return storage[VISITOR_KEY]

	@property
	def session_id(self) -> str:
		if self.config.session_id:
			return self.config.session_id
		storage = self.page.session_storage
		if SESSION_KEY not in storage:
			storage[SESSION_KEY] = f"cg_{secrets.token_hex(6)}"
		return storage[SESSION_KEY]

	def activity_payload(self, action: str) -> dict:
		return {
			"scriptId": self.config.script_id,
			"action": action,
			"domain": self.page.hostname,
			"url": self.page.url,
			"timestamp": self.page.now().isoformat(),
			"visitorId": self.visitor_id,
			"sessionId": self.session_id,
			"userAgent": self.page.user_agent,
			"language": self.page.language,
		}

	def consent_payload(self, record) -> dict:
		return {
			"embed_key": self.config.script_id,
			"choice": record.choice,
			"preferences": dict(record.preferences),
			"sessionId": self.session_id,
			"userId": self.config.user_id,
		}

	def send(self, path: str, payload: dict) -> bool:
		if self.config.test_mode:
			log.info(f"Test mode, not reporting {payload.get('action') or payload.get('choice')}")
			return False
		if not self.config.script_id:
			log.debug("No script id configured, skipping report")
			return False
		url = self.config.api_base_url.rstrip("/") + path
		try:
			self.transport(url, payload)
		except Exception as e:
			log.error(f"Failed to report to {url}: {e}")
			return False
		return True

	def record(self, action: str) -> bool:
		return self.send(ACTIVITY_PATH, self.activity_payload(action))

	def report_consent(self, record) -> bool:
		return self.send(CONSENT_PATH, self.consent_payload(record))

	def webhook_payload(self, record) -> dict:
		return {
			"scriptId": self.config.script_id,
			"choice": record.choice,
			"preferences": dict(record.preferences),
			"timestamp": self.page.now().isoformat(),
		}

	def notify_webhook(self, record) -> bool:
		"""POST the decision to the configured ``webhookUrl``, if any."""
		url = self.config.webhook_url
		if not url:
			return False
		if self.config.test_mode:
			log.info(f"Test mode, not notifying webhook of {record.choice}")
			return False
		refused = check_target(url)
		if refused:
			log.warning(f"Not notifying webhook {url}: {refused}")
			return False
		try:
			self.transport(url, self.webhook_payload(record))
		except Exception as e:
			log.error(f"Error notifying webhook {url}: {e}")
			return False
		return True

	def maybe_ping(self) -> bool:
		"""Send a ping when the interval has elapsed since the last one."""
		now = self.page.now()
		if self.last_ping is not None and now - self.last_ping < self.ping_interval:
			return False
		self.last_ping = now
		return self.record("ping")

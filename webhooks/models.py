# webhooks/models.py
from django.db import models
from django.utils import timezone
from domains.models import Domain


class Webhook(models.Model):
	"""Endpoint a site owner wants consent decisions pushed to."""
	domain = models.OneToOneField(Domain, on_delete=models.CASCADE, related_name="webhook")
	url = models.URLField(max_length=1000)
	secret = models.CharField(max_length=255, blank=True, default="", help_text="Signs each delivery (X-Signature)")
	enabled = models.BooleanField(default=True)
	retry_count = models.PositiveSmallIntegerField(default=3)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	def __str__(self):
		return f"Webhook {self.url} ({self.domain.url})"


class AppendOnlyError(Exception):
	pass


class WebhookDeliveryLog(models.Model):
	SUCCESS = "success"
	ERROR = "error"
	STATUS_CHOICES = [
		(SUCCESS, "Success"),
		(ERROR, "Error"),
	]

	webhook = models.ForeignKey(Webhook, on_delete=models.CASCADE, related_name="delivery_logs")
	status = models.CharField(max_length=10, choices=STATUS_CHOICES)
	status_code = models.PositiveSmallIntegerField(null=True, blank=True)
	attempt = models.PositiveSmallIntegerField(default=1)
	is_test = models.BooleanField(default=False)
	error_message = models.TextField(null=True, blank=True)
	request_payload = models.JSONField(default=dict)
	response_body = models.TextField(null=True, blank=True)
	created_at = models.DateTimeField(default=timezone.now)

	class Meta:
		ordering = ["-created_at", "-id"]
		indexes = [
			models.Index(fields=["webhook", "-created_at"], name="webhooks_we_webhook_3c1f0e_idx"),
		]

	def save(self, *args, **kwargs):
		# one row per attempt, never rewritten
		if not self._state.adding:
			raise AppendOnlyError("Webhook delivery log entries cannot be modified")
		return super().save(*args, **kwargs)

	def __str__(self):
		return f"{self.status} ({self.status_code or '-'}) {self.webhook.url} @ {self.created_at:%Y-%m-%d %H:%M}"

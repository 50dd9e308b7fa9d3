from django.db import models
from django.utils import timezone
from domains.models import Domain


class ScriptActivity(models.Model):
	"""One report from an embedded engine: a page view, a decision or a keep-alive ping."""
	ACTIONS = [
		("view", "View"),
		("accept", "Accept"),
		("reject", "Reject"),
		("partial", "Partial"),
		("ping", "Ping"),
	]

	domain = models.ForeignKey(Domain, on_delete=models.CASCADE, related_name="activity")
	action = models.CharField(max_length=20, choices=ACTIONS)
	page_domain = models.CharField(max_length=255, blank=True, default="")
	url = models.TextField(blank=True, default="")
	visitor_id = models.CharField(max_length=120, blank=True, default="")
	session_id = models.CharField(max_length=120, blank=True, default="")
	user_agent = models.TextField(blank=True, default="")
	language = models.CharField(max_length=35, blank=True, default="")
	reported_at = models.DateTimeField(null=True, blank=True)  # page clock
	created_at = models.DateTimeField(default=timezone.now)

	class Meta:
		ordering = ["-created_at"]
		indexes = [
			models.Index(fields=["domain", "created_at"], name="analytics_s_domain__8e2b4a_idx"),
		]

	def __str__(self):
		return f"{self.action} on {self.page_domain or self.domain.url} ({self.created_at:%Y-%m-%d %H:%M})"

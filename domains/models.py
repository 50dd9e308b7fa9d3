# domains/models.py
import secrets
import uuid
from django.core.exceptions import ValidationError
from django.db import models
from django.contrib.auth import get_user_model

User = get_user_model()


def new_embed_key() -> str:
	return secrets.token_urlsafe(24)[:40]


class Domain(models.Model):
	"""A customer site running the consent engine."""
	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	url = models.URLField(max_length=500, unique=False)
	embed_key = models.CharField(max_length=40, unique=True, default="", blank=True)
	user = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name="domains")
	is_active = models.BooleanField(default=True)
	secure_flags = models.BooleanField(default=True, help_text="Mark consent cookies Secure on https pages")
	language = models.CharField(max_length=10, default="en")
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	def save(self, *args, **kwargs):
		if not self.embed_key:
			self.embed_key = new_embed_key()
		return super().save(*args, **kwargs)

	def __str__(self):
		return self.url


class ScriptDescriptor(models.Model):
	"""One third-party script the engine releases once its category is granted."""
	CATEGORY_CHOICES = [
		('functional', 'Functional / Necessary'),
		('analytics', 'Analytics'),
		('advertising', 'Advertising'),
		('social', 'Social'),
	]

	domain = models.ForeignKey(Domain, on_delete=models.CASCADE, related_name='script_descriptors')
	category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
	script_id = models.CharField(max_length=120, help_text="Element id, unique per site (e.g. google-analytics-4)")
	name = models.CharField(max_length=200, blank=True, help_text="e.g., Google Analytics, Facebook Pixel")
	src = models.URLField(max_length=1000, blank=True, default="")
	content = models.TextField(blank=True, default="")
	is_async = models.BooleanField(default=True)
	attributes = models.JSONField(default=dict, blank=True)
	position = models.PositiveIntegerField(default=0)
	created_at = models.DateTimeField(auto_now_add=True)

	class Meta:
		unique_together = ['domain', 'script_id']
		ordering = ['category', 'position', 'id']

	def clean(self):
		if bool(self.src) == bool(self.content):
			raise ValidationError("Provide either an external src or inline content, not both.")

	def __str__(self):
		return f"{self.script_id} ({self.category}) - {self.domain.url}"

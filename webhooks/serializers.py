from rest_framework import serializers
from domains.models import Domain
from .models import Webhook, WebhookDeliveryLog
from .notifier import check_target


class WebhookSerializer(serializers.ModelSerializer):
	domain = serializers.PrimaryKeyRelatedField(queryset=Domain.objects.all())
	has_secret = serializers.SerializerMethodField()

	class Meta:
		model = Webhook
		fields = ["id", "domain", "url", "secret", "has_secret", "enabled", "retry_count", "created_at", "updated_at"]
		read_only_fields = ["id", "created_at", "updated_at"]
		extra_kwargs = {"secret": {"write_only": True}}

	def get_has_secret(self, obj) -> bool:
		return bool(obj.secret)

	def validate_domain(self, domain):
		request = self.context.get("request")
		if request and domain.user_id != request.user.id:
			raise serializers.ValidationError("Domain not found.")
		if self.instance is None and Webhook.objects.filter(domain=domain).exists():
			raise serializers.ValidationError("This domain already has a webhook.")
		if self.instance is not None and domain.pk != self.instance.domain_id:
			raise serializers.ValidationError("A webhook cannot be moved to another domain.")
		return domain

	def validate_url(self, url):
		problem = check_target(url)
		if problem:
			raise serializers.ValidationError(problem)
		return url

	def validate_retry_count(self, value):
		if value > 10:
			raise serializers.ValidationError("Retry count cannot exceed 10.")
		return value


class WebhookDeliveryLogSerializer(serializers.ModelSerializer):
	class Meta:
		model = WebhookDeliveryLog
		fields = [
			"id",
			"webhook",
			"status",
			"status_code",
			"attempt",
			"is_test",
			"error_message",
			"request_payload",
			"response_body",
			"created_at",
		]
		read_only_fields = fields

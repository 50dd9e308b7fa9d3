from rest_framework import serializers
from .models import ScriptActivity


class ActivityReportSerializer(serializers.Serializer):
	"""Wire format of the engine's activity/ping reports."""
	scriptId = serializers.CharField(max_length=40)
	action = serializers.ChoiceField(choices=[a for a, _ in ScriptActivity.ACTIONS])
	domain = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
	url = serializers.CharField(required=False, allow_blank=True, default="")
	timestamp = serializers.DateTimeField(required=False, allow_null=True, default=None)
	visitorId = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")
	sessionId = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")
	userAgent = serializers.CharField(required=False, allow_blank=True, default="")
	language = serializers.CharField(max_length=35, required=False, allow_blank=True, default="")

	def to_activity(self, domain) -> ScriptActivity:
		d = self.validated_data
		return ScriptActivity(
			domain=domain,
			action=d["action"],
			page_domain=d["domain"],
			url=d["url"],
			visitor_id=d["visitorId"],
			session_id=d["sessionId"],
			user_agent=d["userAgent"],
			language=d["language"],
			reported_at=d["timestamp"],
		)

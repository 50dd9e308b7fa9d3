from rest_framework import serializers
from engine.preferences import resolve_preferences
from .models import ConsentLog


class ConsentLogSerializer(serializers.ModelSerializer):
	class Meta:
		model = ConsentLog
		fields = [
			"consent_id",
			"domain",
			"choice",
			"categories",
			"session_id",
			"user_id",
			"truncated_ip",
			"user_agent",
			"created_at",
		]
		read_only_fields = ["consent_id", "created_at"]

	def validate_categories(self, value):
		if value is not None and not isinstance(value, dict):
			raise serializers.ValidationError("Preferences must be an object of category/boolean pairs.")
		return value

	def validate(self, attrs):
		# store the decision the engine applied, with functional always on
		raw = attrs.get("categories")
		try:
			attrs["categories"] = resolve_preferences(attrs["choice"], raw)
		except ValueError as e:
			raise serializers.ValidationError({"categories": [str(e)]})
		return attrs

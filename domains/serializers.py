from rest_framework import serializers
from .models import ScriptDescriptor


class ScriptDescriptorSerializer(serializers.ModelSerializer):
	"""Descriptor rows in the shape the consent engine reads (id/src/content/async/attributes)."""

	class Meta:
		model = ScriptDescriptor
		fields = ["script_id", "category", "src", "content", "is_async", "attributes"]

	def to_representation(self, instance):
		data = {"id": instance.script_id, "async": instance.is_async}
		if instance.src:
			data["src"] = instance.src
		elif instance.content:
			data["content"] = instance.content
		if instance.attributes:
			data["attributes"] = instance.attributes
		return data


class ScriptDescriptorWriteSerializer(serializers.ModelSerializer):
	class Meta:
		model = ScriptDescriptor
		fields = ["id", "category", "script_id", "name", "src", "content", "is_async", "attributes", "position", "created_at"]
		read_only_fields = ["id", "created_at"]

	def validate_script_id(self, value):
		value = value.strip()
		domain = self.context.get("domain")
		if domain and ScriptDescriptor.objects.filter(domain=domain, script_id=value).exists():
			raise serializers.ValidationError("A script with this id already exists for the domain.")
		return value

	def validate_attributes(self, value):
		if not isinstance(value, dict):
			raise serializers.ValidationError("Attributes must be an object of name/value pairs.")
		return value

	def validate(self, attrs):
		if bool(attrs.get("src")) == bool(attrs.get("content")):
			raise serializers.ValidationError("Provide either an external src or inline content, not both.")
		return attrs

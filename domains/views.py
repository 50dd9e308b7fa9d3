# domains/views.py
import logging
import re
from django.conf import settings
from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiParameter

from engine.categories import CATEGORIES
from engine.config import merge_configs
from users.permissions import ActiveAccount
from .models import Domain, ScriptDescriptor, new_embed_key
from .serializers import ScriptDescriptorSerializer, ScriptDescriptorWriteSerializer

log = logging.getLogger(__name__)

URL_RE = re.compile(r"^(https?://)?([a-z0-9-]+\.)+[a-z]{2,}(:\d+)?(/.*)?$", re.I)
LANGUAGE_RE = re.compile(r"^[a-z]{2}(-[a-z]{2})?$", re.I)


def _serialize(d: Domain):
	return {
		"id": str(d.id),
		"url": d.url,
		"embed_key": d.embed_key,
		"is_active": d.is_active,
		"secure_flags": d.secure_flags,
		"language": d.language,
		"created_at": d.created_at.isoformat(),
		"updated_at": d.updated_at.isoformat(),
		"user": d.user_id and str(d.user_id),
	}


def _get_owned(request, **kwargs) -> Domain:
	return get_object_or_404(Domain, user=request.user, **kwargs)


def build_config(domain: Domain) -> dict:
	"""Engine configuration document for a site, validated the way the engine reads it."""
	raw_scripts = {c: [] for c in CATEGORIES}
	for row in domain.script_descriptors.all():
		raw_scripts.setdefault(row.category, []).append(ScriptDescriptorSerializer(row).data)

	config = merge_configs({
		"scriptId": domain.embed_key,
		"secureFlags": domain.secure_flags,
		"language": domain.language,
		"apiBaseUrl": settings.CONSENT_API_BASE_URL,
		"scripts": raw_scripts,
	})
	dropped = sum(len(v) for v in raw_scripts.values()) - sum(len(v) for v in config.scripts.values())
	if dropped:
		log.warning(f"{dropped} invalid script descriptor(s) left out of config for {domain.url}")
	return config.to_dict()


@extend_schema(
	parameters=[
		OpenApiParameter(name="scriptId", type=str, location=OpenApiParameter.QUERY, required=True),
	],
	responses={200: {"type": "object"}, 400: {"type": "object"}, 404: {"type": "object"}},
	description="Consent engine configuration for an embedded site (public)",
	tags=["Consent config"]
)
@api_view(["GET"])
@authentication_classes([])
@permission_classes([AllowAny])
def consent_config(request):
	script_id = request.query_params.get("scriptId")
	if not script_id:
		return Response({"error": "Script ID parameter required"}, status=status.HTTP_400_BAD_REQUEST)

	try:
		domain = Domain.objects.get(embed_key=script_id, is_active=True)
	except Domain.DoesNotExist:
		return Response({"error": "Configuration not found"}, status=status.HTTP_404_NOT_FOUND)

	return Response(build_config(domain))


@extend_schema(
	methods=["GET"],
	responses={200: {"type": "array", "items": {"type": "object"}}},
	description="List all domains for the current user",
	tags=["Domains"]
)
@extend_schema(
	methods=["POST"],
	request={"application/json": {"type": "object", "properties": {
		"url": {"type": "string"},
		"secure_flags": {"type": "boolean"},
		"language": {"type": "string"},
	}, "required": ["url"]}},
	responses={201: {"type": "object"}},
	description="Create a new domain",
	tags=["Domains"]
)
@api_view(["GET", "POST"])
@permission_classes([ActiveAccount])
def domains_list(request):
	if request.method == "GET":
		qs = Domain.objects.filter(user=request.user).order_by("-created_at")
		return Response([_serialize(d) for d in qs])

	url = (request.data.get("url") or "").strip().rstrip("/")
	if not URL_RE.match(url):
		return Response({"url": ["Enter a valid URL like https://example.com"]}, status=400)

	language = (request.data.get("language") or "en").strip()
	if not LANGUAGE_RE.match(language):
		return Response({"language": ["Use a language code like en or pt-br."]}, status=400)

	d = Domain.objects.create(
		user=request.user,
		url=url,
		language=language.lower(),
		secure_flags=bool(request.data.get("secure_flags", True)),
	)
	log.info(f"Domain {d.url} created for {request.user.email}")
	return Response(_serialize(d), status=status.HTTP_201_CREATED)


@extend_schema(
	methods=["GET"],
	responses={200: {"type": "object"}},
	description="Get domain details",
	tags=["Domains"]
)
@extend_schema(
	methods=["PATCH"],
	request={"application/json": {"type": "object", "properties": {
		"url": {"type": "string"},
		"is_active": {"type": "boolean"},
		"secure_flags": {"type": "boolean"},
		"language": {"type": "string"},
	}}},
	responses={200: {"type": "object"}},
	description="Update domain",
	tags=["Domains"]
)
@extend_schema(
	methods=["DELETE"],
	responses={204: None},
	description="Delete domain",
	tags=["Domains"]
)
@api_view(["GET", "PATCH", "DELETE"])
@permission_classes([ActiveAccount])
def domain_detail(request, id):
	d = _get_owned(request, id=id)

	if request.method == "GET":
		return Response(_serialize(d))

	if request.method == "PATCH":
		updated_fields = []

		if "url" in request.data:
			url = (request.data.get("url") or "").strip().rstrip("/")
			if not url:
				return Response({"url": ["This field may not be blank."]}, status=400)
			if not URL_RE.match(url):
				return Response({"url": ["Enter a valid URL like https://example.com"]}, status=400)
			d.url = url
			updated_fields += ["url"]

		if "language" in request.data:
			language = (request.data.get("language") or "").strip()
			if not LANGUAGE_RE.match(language):
				return Response({"language": ["Use a language code like en or pt-br."]}, status=400)
			d.language = language.lower()
			updated_fields += ["language"]

		for flag in ("is_active", "secure_flags"):
			if flag in request.data:
				setattr(d, flag, bool(request.data.get(flag)))
				updated_fields += [flag]

		if updated_fields:
			updated_fields.append("updated_at")
			d.save(update_fields=updated_fields)

		return Response(_serialize(d))

	d.delete()
	return Response(status=204)


@extend_schema(
	responses={200: {"type": "object", "properties": {"embed_key": {"type": "string"}}}},
	description="Rotate the embed key for a domain",
	tags=["Domains"]
)
@api_view(["POST"])
@permission_classes([ActiveAccount])
def rotate_key(request, id):
	d = _get_owned(request, id=id)
	d.embed_key = new_embed_key()
	d.save(update_fields=["embed_key", "updated_at"])
	return Response({"embed_key": d.embed_key})


@extend_schema(
	methods=["GET"],
	responses={200: ScriptDescriptorWriteSerializer(many=True)},
	description="List the scripts the consent engine manages for a domain",
	tags=["Scripts"]
)
@extend_schema(
	methods=["POST"],
	request=ScriptDescriptorWriteSerializer,
	responses={201: ScriptDescriptorWriteSerializer},
	description="Register a script under a consent category",
	tags=["Scripts"]
)
@api_view(["GET", "POST"])
@permission_classes([ActiveAccount])
def script_descriptors(request, id):
	d = _get_owned(request, id=id)

	if request.method == "GET":
		rows = ScriptDescriptor.objects.filter(domain=d)
		return Response(ScriptDescriptorWriteSerializer(rows, many=True).data)

	serializer = ScriptDescriptorWriteSerializer(data=request.data, context={"domain": d})
	serializer.is_valid(raise_exception=True)
	serializer.save(domain=d)
	return Response(serializer.data, status=status.HTTP_201_CREATED)


@extend_schema(
	responses={204: None},
	description="Remove a script from a domain",
	tags=["Scripts"]
)
@api_view(["DELETE"])
@permission_classes([ActiveAccount])
def script_descriptor_delete(request, id, script_pk):
	d = _get_owned(request, id=id)
	row = get_object_or_404(ScriptDescriptor, domain=d, pk=script_pk)
	row.delete()
	return Response(status=204)

import csv
import json
import logging
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework import status
from rest_framework.pagination import PageNumberPagination
from django.http import HttpResponse
from drf_spectacular.utils import extend_schema, OpenApiParameter
from ipaddress import ip_address, IPv4Address, IPv6Address

from domains.models import Domain
from users.permissions import ActiveAccount
from webhooks.notifier import notify
from .models import ConsentLog
from .serializers import ConsentLogSerializer

log = logging.getLogger(__name__)

# banner/button names -> stored choice
CHOICE_ALIASES = {
	"accept_all": "accept",
	"reject_all": "reject",
	"preferences_saved": "partial",
	"prefs": "partial",
}


def truncate_ip(ip_str: str) -> str:
	"""Return anonymized IP (e.g., 192.168.54.203 -> 192.168.54.0)."""
	if not ip_str:
		return ""
	try:
		ip_obj = ip_address(ip_str)
	except ValueError:
		return ""
	if isinstance(ip_obj, IPv4Address):
		return ".".join(ip_str.split(".")[:3] + ["0"])
	if isinstance(ip_obj, IPv6Address):
		return ":".join(ip_obj.exploded.split(":")[:3]) + "::"
	return ""


def client_ip(request) -> str:
	xff = request.META.get("HTTP_X_FORWARDED_FOR")
	return xff.split(",")[0].strip() if xff else request.META.get("REMOTE_ADDR", "")


@extend_schema(
	request={"application/json": {"type": "object", "properties": {
		"embed_key": {"type": "string"},
		"choice": {"type": "string", "enum": ["accept", "reject", "partial"]},
		"preferences": {"type": "object"},
		"sessionId": {"type": "string"},
		"userId": {"type": "string"},
	}, "required": ["embed_key", "choice"]}},
	responses={201: {"type": "object"}, 400: {"type": "object"}},
	description="Record a visitor's consent decision reported by the embedded engine (public)",
	tags=["Consents"]
)
@api_view(["POST"])
@authentication_classes([])
@permission_classes([AllowAny])
def log_consent(request):
	"""
	Logs a consent event from the embedded engine.
	Links the site via embed_key, stores anonymized IP & user agent, maps
	choice aliases and hands the decision to the site's webhook.
	"""
	data = request.data

	embed_key = data.get("embed_key")
	try:
		domain = Domain.objects.get(embed_key=embed_key, is_active=True)
	except Domain.DoesNotExist:
		return Response(
			{"success": False, "error": "Invalid embed_key"},
			status=status.HTTP_400_BAD_REQUEST,
		)

	choice = data.get("choice")
	if isinstance(choice, str):
		choice = CHOICE_ALIASES.get(choice, choice)

	real_ip = client_ip(request)
	payload = {
		"domain": domain.id,
		"choice": choice,
		"session_id": data.get("sessionId") or "",
		"user_id": data.get("userId") or "",
		"truncated_ip": truncate_ip(real_ip) or None,
		"user_agent": request.META.get("HTTP_USER_AGENT", ""),
	}
	if "preferences" in data:
		payload["categories"] = data["preferences"]

	serializer = ConsentLogSerializer(data=payload)
	if not serializer.is_valid():
		return Response(
			{"success": False, "errors": serializer.errors},
			status=status.HTTP_400_BAD_REQUEST,
		)
	entry = serializer.save()
	log.info(f"Consent {entry.choice} recorded for {domain.url}")

	try:
		notify(domain, entry.choice, entry.categories, {
			"user_id": entry.user_id or None,
			"session_id": entry.session_id or None,
			"ip": entry.truncated_ip,
			"user_agent": entry.user_agent,
		})
	except Exception as e:
		log.exception(f"Webhook notification for {domain.url} failed: {e}")

	return Response(
		{
			"success": True,
			"consent_id": str(entry.consent_id),
			"choice": entry.choice,
			"categories": entry.categories,
			"domain": domain.url,
			"timestamp": entry.created_at,
		},
		status=status.HTTP_201_CREATED,
	)


def _owned_logs(request):
	logs = ConsentLog.objects.filter(domain__user=request.user).select_related("domain")

	domain_id = request.query_params.get("domain")
	if domain_id:
		logs = logs.filter(domain_id=domain_id)

	choice = request.query_params.get("choice")
	if choice:
		logs = logs.filter(choice=choice)
	return logs


@extend_schema(
	parameters=[
		OpenApiParameter(name="domain", type=str, location=OpenApiParameter.QUERY, required=False),
		OpenApiParameter(name="choice", type=str, location=OpenApiParameter.QUERY, required=False),
		OpenApiParameter(name="page", type=int, location=OpenApiParameter.QUERY, required=False),
	],
	responses={200: {"type": "object"}},
	description="Consent logs for the current user's domains, newest first",
	tags=["Consents"]
)
@api_view(["GET"])
@permission_classes([ActiveAccount])
def list_consents(request):
	logs = _owned_logs(request)

	paginator = PageNumberPagination()
	paginator.page_size = 50
	page = paginator.paginate_queryset(logs, request)

	data = [
		{
			"id": str(entry.consent_id),
			"domain": entry.domain.url,
			"choice": entry.choice,
			"categories": entry.categories,
			"session_id": entry.session_id,
			"truncated_ip": entry.truncated_ip,
			"user_agent": entry.user_agent,
			"created_at": entry.created_at,
		}
		for entry in page
	]

	return paginator.get_paginated_response(data)


@extend_schema(
	parameters=[
		OpenApiParameter(name="domain", type=str, location=OpenApiParameter.QUERY, required=False),
	],
	responses={(200, "text/csv"): {"type": "string"}},
	description="Export consent logs as CSV",
	tags=["Consents"]
)
@api_view(["GET"])
@permission_classes([ActiveAccount])
def export_consents_csv(request):
	consents = _owned_logs(request)

	response = HttpResponse(content_type="text/csv")
	response["Content-Disposition"] = 'attachment; filename="consentguard_consents.csv"'

	writer = csv.writer(response)
	writer.writerow(["Date", "Domain", "Choice", "Categories", "Session", "IP", "User Agent"])

	for c in consents:
		writer.writerow([
			c.created_at.isoformat(),
			c.domain.url,
			c.choice,
			json.dumps(c.categories) if c.categories else "",
			c.session_id,
			c.truncated_ip or "",
			c.user_agent or "",
		])

	return response

import logging
from django.db.models import Count, Q
from django.db.models.functions import TruncDate

from rest_framework.views import APIView
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiParameter

from consents.models import ConsentLog
from domains.models import Domain
from users.permissions import ActiveAccount
from .models import ScriptActivity
from .serializers import ActivityReportSerializer

log = logging.getLogger(__name__)


@extend_schema(
	request=ActivityReportSerializer,
	responses={201: {"type": "object"}, 400: {"type": "object"}},
	description="Activity, decision and ping reports from the embedded engine (public)",
	tags=["Analytics"]
)
@api_view(["POST"])
@authentication_classes([])
@permission_classes([AllowAny])
def record_activity(request):
	serializer = ActivityReportSerializer(data=request.data)
	if not serializer.is_valid():
		return Response({"success": False, "errors": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

	try:
		domain = Domain.objects.get(embed_key=serializer.validated_data["scriptId"], is_active=True)
	except Domain.DoesNotExist:
		return Response({"success": False, "error": "Invalid scriptId"}, status=status.HTTP_400_BAD_REQUEST)

	activity = serializer.to_activity(domain)
	activity.save()
	log.debug(f"{activity.action} recorded for {domain.url}")
	return Response({"success": True}, status=status.HTTP_201_CREATED)


class ConsentAnalyticsView(APIView):
	"""
	Returns daily consent stats for the logged-in user's domains.

	Example:
	GET /api/analytics/consents/
	GET /api/analytics/consents/?domain_id=<uuid>
	"""

	permission_classes = [ActiveAccount]

	@extend_schema(
		parameters=[
			OpenApiParameter(name='domain_id', type=str, location=OpenApiParameter.QUERY, required=False),
		],
		responses={200: {"type": "array", "items": {"type": "object", "properties": {
			"date": {"type": "string", "format": "date"},
			"total": {"type": "integer"},
			"accepts": {"type": "integer"},
			"rejects": {"type": "integer"},
			"partials": {"type": "integer"},
			"accept_rate": {"type": "number", "nullable": True},
			"reject_rate": {"type": "number", "nullable": True}
		}}}},
		description="Get daily consent analytics for the authenticated user's domains",
		tags=["Analytics"]
	)
	def get(self, request):
		qs = ConsentLog.objects.filter(domain__user=request.user)

		domain_id = request.query_params.get("domain_id")
		if domain_id:
			qs = qs.filter(domain_id=domain_id)

		data = (
			qs.annotate(date=TruncDate("created_at"))
			.values("date")
			.annotate(
				total=Count("id"),
				accepts=Count("id", filter=Q(choice="accept")),
				rejects=Count("id", filter=Q(choice="reject")),
				partials=Count("id", filter=Q(choice="partial")),
			)
			.order_by("-date")
		)

		result = []
		for row in data:
			total = row["total"]
			result.append({
				"date": row["date"],
				"total": total,
				"accepts": row["accepts"],
				"rejects": row["rejects"],
				"partials": row["partials"],
				"accept_rate": row["accepts"] / total if total else None,
				"reject_rate": row["rejects"] / total if total else None,
			})

		return Response(result)


class ActivityAnalyticsView(APIView):
	"""Daily views, pings and distinct visitors reported by the engine."""

	permission_classes = [ActiveAccount]

	@extend_schema(
		parameters=[
			OpenApiParameter(name='domain_id', type=str, location=OpenApiParameter.QUERY, required=False),
		],
		responses={200: {"type": "array", "items": {"type": "object", "properties": {
			"date": {"type": "string", "format": "date"},
			"views": {"type": "integer"},
			"pings": {"type": "integer"},
			"visitors": {"type": "integer"},
		}}}},
		description="Get daily engine activity for the authenticated user's domains",
		tags=["Analytics"]
	)
	def get(self, request):
		qs = ScriptActivity.objects.filter(domain__user=request.user)

		domain_id = request.query_params.get("domain_id")
		if domain_id:
			qs = qs.filter(domain_id=domain_id)

		data = (
			qs.annotate(date=TruncDate("created_at"))
			.values("date")
			.annotate(
				views=Count("id", filter=Q(action="view")),
				pings=Count("id", filter=Q(action="ping")),
				visitors=Count("visitor_id", distinct=True, filter=~Q(visitor_id="")),
			)
			.order_by("-date")
		)
		return Response(list(data))

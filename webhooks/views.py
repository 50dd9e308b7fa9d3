# webhooks/views.py
import logging
from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiParameter

from users.permissions import ActiveAccount
from .models import Webhook, WebhookDeliveryLog
from .notifier import build_test_payload, deliver
from .serializers import WebhookSerializer, WebhookDeliveryLogSerializer

log = logging.getLogger(__name__)


def _get_owned(request, **kwargs) -> Webhook:
	return get_object_or_404(Webhook.objects.select_related("domain"), domain__user=request.user, **kwargs)


@extend_schema(
	methods=["GET"],
	responses={200: WebhookSerializer(many=True)},
	description="List webhooks across the current user's domains",
	tags=["Webhooks"]
)
@extend_schema(
	methods=["POST"],
	request=WebhookSerializer,
	responses={201: WebhookSerializer},
	description="Attach a webhook to one of the user's domains",
	tags=["Webhooks"]
)
@api_view(["GET", "POST"])
@permission_classes([ActiveAccount])
def webhooks_list(request):
	if request.method == "GET":
		qs = Webhook.objects.filter(domain__user=request.user).select_related("domain").order_by("-created_at")
		return Response(WebhookSerializer(qs, many=True).data)

	serializer = WebhookSerializer(data=request.data, context={"request": request})
	serializer.is_valid(raise_exception=True)
	webhook = serializer.save()
	log.info(f"Webhook {webhook.id} created for {webhook.domain.url}")
	return Response(WebhookSerializer(webhook).data, status=status.HTTP_201_CREATED)


@extend_schema(
	methods=["GET"],
	responses={200: WebhookSerializer},
	description="Get a webhook",
	tags=["Webhooks"]
)
@extend_schema(
	methods=["PATCH"],
	request=WebhookSerializer,
	responses={200: WebhookSerializer},
	description="Update a webhook (url, secret, enabled, retry_count)",
	tags=["Webhooks"]
)
@extend_schema(
	methods=["DELETE"],
	responses={204: None},
	description="Delete a webhook and its delivery log",
	tags=["Webhooks"]
)
@api_view(["GET", "PATCH", "DELETE"])
@permission_classes([ActiveAccount])
def webhook_detail(request, id):
	webhook = _get_owned(request, id=id)

	if request.method == "GET":
		return Response(WebhookSerializer(webhook).data)

	if request.method == "PATCH":
		serializer = WebhookSerializer(webhook, data=request.data, partial=True, context={"request": request})
		serializer.is_valid(raise_exception=True)
		serializer.save()
		return Response(serializer.data)

	webhook.delete()
	return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(
	request=None,
	responses={200: {"type": "object", "properties": {
		"success": {"type": "boolean"},
		"status": {"type": "string"},
		"status_code": {"type": "integer", "nullable": True},
		"error": {"type": "string", "nullable": True},
		"log_id": {"type": "integer"},
	}}},
	description="Send a test event to the webhook now and log it as a test delivery",
	tags=["Webhooks"]
)
@api_view(["POST"])
@permission_classes([ActiveAccount])
def test_webhook(request, id):
	webhook = _get_owned(request, id=id)
	log.info(f"Testing webhook {webhook.id} for {request.user.email}")

	entry = deliver(webhook, build_test_payload(webhook), is_test=True)
	return Response({
		"success": entry.status == WebhookDeliveryLog.SUCCESS,
		"status": entry.status,
		"status_code": entry.status_code,
		"error": entry.error_message,
		"log_id": entry.id,
	})


@extend_schema(
	parameters=[
		OpenApiParameter(name="status", type=str, location=OpenApiParameter.QUERY, required=False),
		OpenApiParameter(name="page", type=int, location=OpenApiParameter.QUERY, required=False),
	],
	responses={200: WebhookDeliveryLogSerializer(many=True)},
	description="Delivery attempts for a webhook, newest first",
	tags=["Webhooks"]
)
@api_view(["GET"])
@permission_classes([ActiveAccount])
def webhook_logs(request, id):
	webhook = _get_owned(request, id=id)
	logs = WebhookDeliveryLog.objects.filter(webhook=webhook)

	status_filter = request.query_params.get("status")
	if status_filter:
		logs = logs.filter(status=status_filter)

	paginator = PageNumberPagination()
	paginator.page_size = 50
	page = paginator.paginate_queryset(logs, request)
	return paginator.get_paginated_response(WebhookDeliveryLogSerializer(page, many=True).data)

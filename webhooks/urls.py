from django.urls import path
from . import views

urlpatterns = [
	path("", views.webhooks_list, name="webhooks_list"),
	path("<int:id>/", views.webhook_detail, name="webhook_detail"),
	path("<int:id>/test/", views.test_webhook, name="test_webhook"),  # POST /api/webhooks/<id>/test/
	path("<int:id>/logs/", views.webhook_logs, name="webhook_logs"),  # GET /api/webhooks/<id>/logs/
]

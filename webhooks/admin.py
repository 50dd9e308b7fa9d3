from django.contrib import admin
from .models import Webhook, WebhookDeliveryLog


@admin.register(Webhook)
class WebhookAdmin(admin.ModelAdmin):
	list_display = ("id", "domain", "url", "enabled", "retry_count", "created_at")
	list_filter = ("enabled",)
	search_fields = ("url", "domain__url")
	readonly_fields = ("created_at", "updated_at")


@admin.register(WebhookDeliveryLog)
class WebhookDeliveryLogAdmin(admin.ModelAdmin):
	list_display = ("id", "webhook", "status", "status_code", "attempt", "is_test", "created_at")
	list_filter = ("status", "is_test", "created_at")
	search_fields = ("webhook__url", "error_message")
	readonly_fields = [f.name for f in WebhookDeliveryLog._meta.fields]

	def has_add_permission(self, request):
		return False

	def has_change_permission(self, request, obj=None):
		return False

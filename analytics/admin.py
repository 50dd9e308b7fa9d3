from django.contrib import admin
from .models import ScriptActivity


@admin.register(ScriptActivity)
class ScriptActivityAdmin(admin.ModelAdmin):
	list_display = ("id", "domain", "action", "page_domain", "visitor_id", "created_at")
	list_filter = ("action", "created_at")
	search_fields = ("domain__url", "page_domain", "visitor_id", "session_id")
	readonly_fields = ("created_at",)

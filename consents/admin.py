from django.contrib import admin
from .models import ConsentLog


@admin.register(ConsentLog)
class ConsentLogAdmin(admin.ModelAdmin):
	list_display = ("consent_id", "domain", "choice", "granted", "session_id", "truncated_ip", "created_at")
	list_filter = ("choice", "created_at")
	list_select_related = ("domain",)
	search_fields = ("domain__url", "session_id", "user_id", "truncated_ip")
	date_hierarchy = "created_at"
	readonly_fields = [f.name for f in ConsentLog._meta.fields]

	@admin.display(description="Granted categories")
	def granted(self, obj):
		return ", ".join(k for k, v in (obj.categories or {}).items() if v)

	def has_add_permission(self, request):
		return False

from django.contrib import admin
from .models import Domain, ScriptDescriptor


class ScriptDescriptorInline(admin.TabularInline):
	model = ScriptDescriptor
	extra = 1
	fields = ("category", "script_id", "name", "src", "content", "is_async", "position")


@admin.register(Domain)
class DomainAdmin(admin.ModelAdmin):
	list_display = ("url", "embed_key", "user", "is_active", "created_at")
	list_filter = ("is_active", "secure_flags")
	search_fields = ("url", "embed_key", "user__email")
	ordering = ("-created_at",)
	readonly_fields = ("embed_key", "created_at", "updated_at")
	inlines = [ScriptDescriptorInline]


@admin.register(ScriptDescriptor)
class ScriptDescriptorAdmin(admin.ModelAdmin):
	list_display = ("script_id", "category", "domain", "position", "created_at")
	list_filter = ("category", "created_at")
	search_fields = ("script_id", "name", "src", "domain__url")
	ordering = ("-created_at",)
	readonly_fields = ("created_at",)
	autocomplete_fields = ("domain",)

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from domains.models import Domain
from .models import User


class OwnedDomainInline(admin.TabularInline):
	model = Domain
	fields = ('url', 'embed_key', 'is_active', 'created_at')
	readonly_fields = ('embed_key', 'created_at')
	extra = 0
	show_change_link = True


@admin.register(User)
class UserAdmin(BaseUserAdmin):
	model = User
	list_display = ('email', 'is_blocked', 'is_staff', 'domain_count', 'date_joined')
	list_filter = ('is_blocked', 'is_staff', 'is_active')
	search_fields = ('email',)
	ordering = ('-date_joined',)
	readonly_fields = ('date_joined', 'last_login')
	inlines = [OwnedDomainInline]
	actions = ['block_accounts', 'unblock_accounts']

	fieldsets = (
		(None, {'fields': ('email', 'password')}),
		('Access', {'fields': ('is_active', 'is_blocked')}),
		('Permissions', {'fields': ('is_staff', 'is_superuser', 'groups', 'user_permissions')}),
		('Dates', {'fields': ('last_login', 'date_joined')}),
	)
	add_fieldsets = (
		(None, {
			'classes': ('wide',),
			'fields': ('email', 'password1', 'password2'),
		}),
	)

	@admin.display(description='Domains')
	def domain_count(self, obj):
		return obj.domains.count()

	@admin.action(description='Suspend selected accounts')
	def block_accounts(self, request, queryset):
		queryset.update(is_blocked=True)

	@admin.action(description='Restore selected accounts')
	def unblock_accounts(self, request, queryset):
		queryset.update(is_blocked=False)

from django.urls import path
from . import views

urlpatterns = [
	path("", views.domains_list, name="domains_list"),
	path("<uuid:id>/", views.domain_detail, name="domain_detail"),
	path("<uuid:id>/rotate-key/", views.rotate_key, name="rotate_key"),
	path("<uuid:id>/scripts/", views.script_descriptors, name="script_descriptors"),
	path("<uuid:id>/scripts/<int:script_pk>/", views.script_descriptor_delete, name="script_descriptor_delete"),
]

config_urlpatterns = [
	path("", views.consent_config, name="consent_config"),  # GET /api/consent-config/?scriptId=...
]

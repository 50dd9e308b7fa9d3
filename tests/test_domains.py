"""Tests for the consent-config document and domain/script management."""

from __future__ import annotations

import pytest
from django.conf import settings

from domains.models import Domain, ScriptDescriptor
from engine.config import merge_configs
from engine.engine import ConsentEngine
from engine.page import HostPage
from engine.state import ConsentState

from tests.conftest import GA_SRC, PIXEL_SRC

pytestmark = pytest.mark.django_db

CONFIG_URL = "/api/consent-config/"


@pytest.fixture
def descriptors(domain):
	ScriptDescriptor.objects.create(domain=domain, category="analytics", script_id="google-analytics-4", src=GA_SRC)
	ScriptDescriptor.objects.create(
		domain=domain, category="advertising", script_id="fb-pixel", src=PIXEL_SRC, position=1,
	)
	ScriptDescriptor.objects.create(
		domain=domain, category="advertising", script_id="ads-init", content="window.ads = [];", is_async=False,
	)
	# neither src nor content; saved without validation
	ScriptDescriptor.objects.create(domain=domain, category="social", script_id="broken")
	return domain


class TestConsentConfig:
	def test_document_shape(self, api_client, descriptors) -> None:
		response = api_client.get(CONFIG_URL, {"scriptId": descriptors.embed_key})

		assert response.status_code == 200
		body = response.json()
		assert body["scriptId"] == descriptors.embed_key
		assert body["apiBaseUrl"] == settings.CONSENT_API_BASE_URL
		assert body["secureFlags"] is True
		assert body["language"] == "en"
		assert body["scripts"]["analytics"] == [{"id": "google-analytics-4", "async": True, "src": GA_SRC}]
		assert [d["id"] for d in body["scripts"]["advertising"]] == ["ads-init", "fb-pixel"]
		assert body["scripts"]["advertising"][0] == {"id": "ads-init", "async": False, "content": "window.ads = [];"}

	def test_invalid_rows_left_out(self, api_client, descriptors) -> None:
		body = api_client.get(CONFIG_URL, {"scriptId": descriptors.embed_key}).json()

		assert body["scripts"]["social"] == []

	def test_missing_script_id(self, api_client) -> None:
		assert api_client.get(CONFIG_URL).status_code == 400

	def test_unknown_script_id(self, api_client) -> None:
		assert api_client.get(CONFIG_URL, {"scriptId": "nope"}).status_code == 404

	def test_inactive_site(self, api_client, domain) -> None:
		domain.is_active = False
		domain.save()

		assert api_client.get(CONFIG_URL, {"scriptId": domain.embed_key}).status_code == 404

	def test_document_drives_an_engine(self, api_client, descriptors, clock, transport) -> None:
		body = api_client.get(CONFIG_URL, {"scriptId": descriptors.embed_key}).json()
		page = HostPage(url="https://shop.example.com/", clock=clock)

		engine = ConsentEngine(page, config=merge_configs(body), transport=transport)

		assert engine.boot() is ConsentState.PROMPTED
		assert page.requests == [GA_SRC]
		engine.accept()
		assert PIXEL_SRC in page.requests


class TestDomainAPI:
	def test_create(self, auth_client, user) -> None:
		response = auth_client.post("/api/domains/", {"url": "https://new.example.com/", "language": "PT-BR"}, format="json")

		assert response.status_code == 201
		d = Domain.objects.get(url="https://new.example.com")
		assert d.user == user
		assert d.language == "pt-br"
		assert d.embed_key

	def test_create_rejects_bad_url(self, auth_client) -> None:
		assert auth_client.post("/api/domains/", {"url": "not a url"}, format="json").status_code == 400

	def test_list_own_only(self, auth_client, domain, other_user) -> None:
		Domain.objects.create(user=other_user, url="https://other.example.com")

		assert [d["url"] for d in auth_client.get("/api/domains/").json()] == [domain.url]

	def test_patch_flags(self, auth_client, domain) -> None:
		response = auth_client.patch(f"/api/domains/{domain.id}/", {"secure_flags": False}, format="json")

		assert response.status_code == 200
		assert response.json()["secure_flags"] is False

	def test_rotate_key(self, auth_client, domain) -> None:
		old = domain.embed_key

		response = auth_client.post(f"/api/domains/{domain.id}/rotate-key/")

		domain.refresh_from_db()
		assert response.json()["embed_key"] == domain.embed_key != old

	def test_foreign_domain_is_404(self, api_client, other_user, domain) -> None:
		api_client.force_authenticate(user=other_user)

		assert api_client.get(f"/api/domains/{domain.id}/").status_code == 404


class TestScriptAPI:
	def test_add_script(self, auth_client, domain) -> None:
		response = auth_client.post(f"/api/domains/{domain.id}/scripts/", {
			"category": "analytics",
			"script_id": "hotjar",
			"src": "https://static.hotjar.com/c/hotjar-1.js",
		}, format="json")

		assert response.status_code == 201
		assert ScriptDescriptor.objects.get(domain=domain).script_id == "hotjar"

	def test_src_or_content_required(self, auth_client, domain) -> None:
		response = auth_client.post(f"/api/domains/{domain.id}/scripts/", {
			"category": "analytics",
			"script_id": "empty",
		}, format="json")

		assert response.status_code == 400

	def test_not_both_src_and_content(self, auth_client, domain) -> None:
		response = auth_client.post(f"/api/domains/{domain.id}/scripts/", {
			"category": "analytics",
			"script_id": "both",
			"src": "https://cdn.example.org/a.js",
			"content": "a()",
		}, format="json")

		assert response.status_code == 400

	def test_duplicate_script_id(self, auth_client, descriptors) -> None:
		response = auth_client.post(f"/api/domains/{descriptors.id}/scripts/", {
			"category": "social",
			"script_id": "fb-pixel",
			"content": "x()",
		}, format="json")

		assert response.status_code == 400
		assert "script_id" in response.json()

	def test_unknown_category(self, auth_client, domain) -> None:
		response = auth_client.post(f"/api/domains/{domain.id}/scripts/", {
			"category": "tracking",
			"script_id": "t",
			"content": "t()",
		}, format="json")

		assert response.status_code == 400

	def test_delete_script(self, auth_client, descriptors) -> None:
		row = ScriptDescriptor.objects.get(script_id="fb-pixel")

		response = auth_client.delete(f"/api/domains/{descriptors.id}/scripts/{row.pk}/")

		assert response.status_code == 204
		assert not ScriptDescriptor.objects.filter(pk=row.pk).exists()

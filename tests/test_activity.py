"""Tests for page-side activity, consent and ping reporting."""

from __future__ import annotations

from unittest.mock import Mock, patch

import pytest
import requests

from engine.activity import ACTIVITY_PATH, VISITOR_KEY, ActivityReporter, check_target, http_post
from engine.config import merge_configs
from engine.engine import ConsentEngine
from engine.preferences import ConsentRecord


class TestReports:
	def test_view_reported_on_boot(self, page, config, transport) -> None:
		ConsentEngine(page, config=config, transport=transport).boot()

		url, payload = transport.sent[0]
		assert url == "https://api.consentguard.app" + ACTIVITY_PATH
		assert payload["action"] == "view"
		assert payload["scriptId"] == "embed-key-1"
		assert payload["domain"] == "shop.example.com"
		assert payload["url"] == "https://shop.example.com/cart"
		assert payload["userAgent"] == "pytest-agent"
		assert payload["visitorId"].startswith("cg_")

	def test_decision_sends_activity_and_consent(self, page, config, transport) -> None:
		engine = ConsentEngine(page, config=config, transport=transport)
		engine.boot()
		engine.accept()

		actions = [p.get("action") or p.get("choice") for _, p in transport.sent]
		assert actions == ["view", "accept", "accept"]
		assert transport.sent[-1][0].endswith("/api/consents/create/")

	def test_visitor_id_survives_page_loads(self, page, config, transport) -> None:
		ConsentEngine(page, config=config, transport=transport).boot()
		ConsentEngine(page, config=config, transport=transport).boot()

		first, second = (p["visitorId"] for _, p in transport.sent)
		assert first == second == page.local_storage[VISITOR_KEY]

	def test_configured_session_id_is_used(self, page, scripts_config, transport) -> None:
		config = merge_configs(scripts_config, {"sessionId": "sess-9", "userId": "user-3"})
		engine = ConsentEngine(page, config=config, transport=transport)
		engine.boot()
		engine.reject()

		assert all(p["sessionId"] == "sess-9" for _, p in transport.sent)
		assert transport.sent[-1][1]["userId"] == "user-3"

	def test_test_mode_sends_nothing(self, page, scripts_config, transport) -> None:
		config = merge_configs(scripts_config, {"testMode": True})
		engine = ConsentEngine(page, config=config, transport=transport)
		engine.boot()
		engine.accept()

		assert transport.sent == []

	def test_no_script_id_sends_nothing(self, page, transport) -> None:
		reporter = ActivityReporter(page, merge_configs(), transport=transport)

		assert reporter.record("view") is False
		assert transport.sent == []

	def test_transport_failure_is_swallowed(self, page, config) -> None:
		failing = Mock(side_effect=requests.ConnectionError("offline"))
		engine = ConsentEngine(page, config=config, transport=failing)

		engine.boot()
		engine.accept()

		assert failing.call_count == 3


class TestPing:
	def test_ping_waits_for_interval(self, page, config, transport, clock) -> None:
		engine = ConsentEngine(page, config=config, transport=transport)
		engine.boot()

		assert engine.tick() is False
		clock.advance(seconds=59)
		assert engine.tick() is False
		clock.advance(seconds=2)
		assert engine.tick() is True
		assert transport.sent[-1][1]["action"] == "ping"

	def test_interval_restarts_after_ping(self, page, config, transport, clock) -> None:
		engine = ConsentEngine(page, config=config, transport=transport)
		engine.boot()
		clock.advance(seconds=60)
		engine.tick()
		clock.advance(seconds=30)

		assert engine.tick() is False


class TestHttpPost:
	def test_posts_json_with_timeout(self) -> None:
		with patch("engine.activity.requests.post") as post:
			post.return_value.status_code = 201
			http_post("https://api.example.com/x", {"a": 1})

		post.assert_called_once_with(
			"https://api.example.com/x", json={"a": 1}, timeout=5, allow_redirects=False,
		)
		post.return_value.raise_for_status.assert_called_once()

	def test_redirect_is_a_failure(self) -> None:
		with patch("engine.activity.requests.post") as post:
			post.return_value.status_code = 307
			with pytest.raises(requests.HTTPError):
				http_post("https://hooks.example.com/consent", {"a": 1})


class TestCheckTarget:
	def test_https_allowed(self) -> None:
		assert check_target("https://hooks.example.com/x") is None

	def test_plain_http_only_for_local_hosts(self) -> None:
		assert check_target("http://127.0.0.1:9000/x") is None
		assert check_target("http://app.localhost/x") is None
		assert check_target("http://hooks.example.com/x")
		assert check_target("http://hooks.internal/x", extra_hosts=["hooks.internal"]) is None


class TestDecisionWebhook:
	def test_decision_posted_to_webhook_url(self, page, scripts_config, transport, clock) -> None:
		config = merge_configs(scripts_config, {"webhookUrl": "https://hooks.example.com/consent"})
		engine = ConsentEngine(page, config=config, transport=transport)
		engine.boot()
		engine.reject()

		url, payload = transport.sent[-1]
		assert url == "https://hooks.example.com/consent"
		assert payload == {
			"scriptId": "embed-key-1",
			"choice": "reject",
			"preferences": {"functional": True, "analytics": False, "advertising": False, "social": False},
			"timestamp": clock().isoformat(),
		}

	def test_no_webhook_url_means_no_post(self, page, config, transport) -> None:
		reporter = ActivityReporter(page, config, transport=transport)

		assert reporter.notify_webhook(ConsentRecord.create("accept")) is False
		assert transport.sent == []

	def test_plain_http_webhook_is_refused(self, page, scripts_config, transport) -> None:
		config = merge_configs(scripts_config, {"webhookUrl": "http://hooks.example.com/consent"})
		reporter = ActivityReporter(page, config, transport=transport)

		assert reporter.notify_webhook(ConsentRecord.create("accept")) is False
		assert transport.sent == []

	def test_local_http_webhook_is_allowed(self, page, scripts_config, transport) -> None:
		config = merge_configs(scripts_config, {"webhookUrl": "http://localhost:9000/hook"})
		reporter = ActivityReporter(page, config, transport=transport)

		assert reporter.notify_webhook(ConsentRecord.create("accept")) is True
		assert transport.sent[0][0] == "http://localhost:9000/hook"

	def test_replayed_decision_is_not_posted(self, page, scripts_config, transport) -> None:
		config = merge_configs(scripts_config, {"webhookUrl": "https://hooks.example.com/consent"})
		first = ConsentEngine(page, config=config, transport=transport)
		first.boot()
		first.accept()
		transport.sent.clear()

		ConsentEngine(page, config=config, transport=transport).boot()

		assert all(url != "https://hooks.example.com/consent" for url, _ in transport.sent)

"""Tests for loading the Google tag before a decision in denied mode."""

from __future__ import annotations

import pytest

from engine.config import ScriptDescriptor, merge_configs
from engine.early_release import is_early_release
from engine.engine import ConsentEngine
from engine.signals import DEFAULT_DENIED

from tests.conftest import GA_SRC, HOTJAR_SRC


@pytest.fixture
def ga_config(scripts_config):
	scripts_config["scripts"]["analytics"] = [
		{"id": "google-analytics-4", "src": GA_SRC},
		{"id": "hotjar", "src": HOTJAR_SRC},
	]
	return merge_configs(scripts_config)


class TestDetection:
	"""Which descriptors count as the regulated analytics base library."""

	@pytest.mark.parametrize("descriptor", [
		ScriptDescriptor(id="google-analytics", src="https://cdn.example.org/a.js"),
		ScriptDescriptor(id="gtag-config", content="window.dataLayer = [];"),
		ScriptDescriptor(id="ga4", src="https://cdn.example.org/a.js"),
		ScriptDescriptor(id="tag", src="https://www.googletagmanager.com/gtag/js?id=G-ZZZ9876543"),
		ScriptDescriptor(id="tag", src="//www.googletagmanager.com/gtag/js?id=G-ZZZ9876543"),
		ScriptDescriptor(id="inline", content="gtag('config', 'G-ZZZ9876543');"),
	])
	def test_recognized(self, descriptor) -> None:
		assert is_early_release(descriptor)

	@pytest.mark.parametrize("descriptor", [
		ScriptDescriptor(id="hotjar", src=HOTJAR_SRC),
		ScriptDescriptor(id="gtm", src="https://www.googletagmanager.com/gtm.js?id=GTM-ABC"),
		ScriptDescriptor(id="pixel", content="fbq('track', 'PageView');"),
	])
	def test_not_recognized(self, descriptor) -> None:
		assert not is_early_release(descriptor)


class TestBoot:
	"""Early release during engine boot."""

	def test_google_tag_loads_before_decision(self, page, ga_config, transport) -> None:
		engine = ConsentEngine(page, config=ga_config, transport=transport)
		engine.boot()

		assert page.requests == [GA_SRC]
		assert [el.id for el in engine.early_released] == ["google-analytics-4"]

	def test_default_state_is_all_denied(self, page, ga_config, transport) -> None:
		ConsentEngine(page, config=ga_config, transport=transport).boot()

		assert page.globals["dataLayer"][0] == ["consent", "default", DEFAULT_DENIED]

	def test_decision_only_updates_signals(self, page, ga_config, transport) -> None:
		engine = ConsentEngine(page, config=ga_config, transport=transport)
		engine.boot()
		engine.reject()

		assert page.requests.count(GA_SRC) == 1
		assert HOTJAR_SRC not in page.requests
		assert page.globals["dataLayer"][-1] == ["consent", "update", DEFAULT_DENIED]

	def test_accept_releases_rest_of_category(self, page, ga_config, transport) -> None:
		engine = ConsentEngine(page, config=ga_config, transport=transport)
		engine.boot()
		engine.accept()

		assert page.requests.count(GA_SRC) == 1
		assert HOTJAR_SRC in page.requests

	def test_no_provider_configured(self, page, config, transport) -> None:
		engine = ConsentEngine(page, config=config, transport=transport)
		engine.boot()

		assert engine.early_released == []
		assert "dataLayer" not in page.globals

"""Tests for the script gatekeeper.

Covers holding tracker insertions until consent, replay order on release,
discarding denied insertions and the allow-on-doubt fallback.
"""

from __future__ import annotations

from unittest.mock import Mock

from engine.categories import ANALYTICS, CategoryRegistry
from engine.engine import ConsentEngine
from engine.interceptor import ScriptGatekeeper
from engine.page import ScriptElement

from tests.conftest import HOTJAR_SRC, PIXEL_SRC, WIDGET_SRC


def _engine(page, config, transport):
	engine = ConsentEngine(page, config=config, transport=transport)
	engine.boot()
	return engine


class TestHolding:
	"""Insertions made before a decision."""

	def test_configured_tracker_is_held_inert(self, page, config, transport) -> None:
		engine = _engine(page, config, transport)
		element = engine.insert_script(ScriptElement(src=HOTJAR_SRC))

		assert element.inert
		assert element.src is None
		assert element in page.elements
		assert HOTJAR_SRC not in page.requests
		assert [b.intended_src for b in engine.gatekeeper.blocked] == [HOTJAR_SRC]
		assert engine.gatekeeper.blocked[0].category == ANALYTICS

	def test_known_tracking_domain_is_held_without_config(self, page, transport) -> None:
		engine = _engine(page, None, transport)
		engine.insert_script(ScriptElement(src="https://www.google-analytics.com/analytics.js"))

		assert page.requests == []
		assert len(engine.gatekeeper.blocked) == 1

	def test_protocol_relative_source_matches_configured_script(self, page, config, transport) -> None:
		engine = _engine(page, config, transport)
		engine.insert_script(ScriptElement(src="//connect.facebook.net/en_US/fbevents.js"))

		assert engine.gatekeeper.blocked[0].category == "advertising"

	def test_unknown_script_goes_straight_through(self, page, config, transport) -> None:
		engine = _engine(page, config, transport)
		element = engine.insert_script(ScriptElement(src="https://cdn.example.org/lib.js"))

		assert not element.inert
		assert page.requests == ["https://cdn.example.org/lib.js"]
		assert engine.gatekeeper.blocked == []

	def test_functional_script_is_never_held(self, page, config, transport) -> None:
		engine = _engine(page, config, transport)
		engine.insert_script(ScriptElement(id="chat", src="https://cdn.chat.example.com/widget.js"))

		assert page.requests == ["https://cdn.chat.example.com/widget.js"]

	def test_nothing_tracking_loads_before_decision(self, page, config, transport) -> None:
		engine = _engine(page, config, transport)
		for src in (HOTJAR_SRC, PIXEL_SRC, WIDGET_SRC):
			engine.insert_script(ScriptElement(src=src))

		assert page.requests == []
		assert page.banner_visible


class TestRelease:
	"""What happens to held insertions once the visitor decides."""

	def test_accept_replays_in_insertion_order(self, page, config, transport) -> None:
		engine = _engine(page, config, transport)
		for src in (PIXEL_SRC, WIDGET_SRC, HOTJAR_SRC):
			engine.insert_script(ScriptElement(src=src))

		engine.accept()

		assert page.requests[:3] == [PIXEL_SRC, WIDGET_SRC, HOTJAR_SRC]
		assert engine.gatekeeper.blocked == []

	def test_partial_releases_only_granted_categories(self, page, config, transport) -> None:
		engine = _engine(page, config, transport)
		analytics = engine.insert_script(ScriptElement(src=HOTJAR_SRC))
		pixel = engine.insert_script(ScriptElement(src=PIXEL_SRC))

		engine.save_preferences({"analytics": True, "advertising": False})

		assert not analytics.inert
		assert pixel.inert
		assert PIXEL_SRC not in page.requests
		# denied insertions are discarded, not kept for a later retry
		assert engine.gatekeeper.blocked == []

	def test_reject_keeps_everything_inert(self, page, config, transport) -> None:
		engine = _engine(page, config, transport)
		held = [engine.insert_script(ScriptElement(src=src)) for src in (HOTJAR_SRC, PIXEL_SRC)]

		engine.reject()

		assert all(el.inert for el in held)
		assert HOTJAR_SRC not in page.requests
		assert PIXEL_SRC not in page.requests

	def test_denied_insertion_after_decision_is_not_queued(self, page, config, transport) -> None:
		engine = _engine(page, config, transport)
		engine.reject()

		element = engine.insert_script(ScriptElement(src=PIXEL_SRC))

		assert element.inert
		assert engine.gatekeeper.blocked == []

	def test_granted_insertion_after_decision_loads(self, page, config, transport) -> None:
		engine = _engine(page, config, transport)
		engine.accept()
		page.requests.clear()

		engine.insert_script(ScriptElement(src="https://www.google-analytics.com/analytics.js"))

		assert page.requests == ["https://www.google-analytics.com/analytics.js"]


class TestClassificationFailure:
	"""The gatekeeper never breaks the page."""

	def test_classification_error_allows_script(self, page) -> None:
		registry = Mock()
		registry.category_for_id.side_effect = RuntimeError("boom")
		gatekeeper = ScriptGatekeeper(page, registry)

		element = gatekeeper.insert(ScriptElement(id="x", src="https://cdn.example.org/x.js"))

		assert not element.inert
		assert page.requests == ["https://cdn.example.org/x.js"]

	def test_bypass_skips_classification(self, page, config) -> None:
		gatekeeper = ScriptGatekeeper(page, CategoryRegistry(config.scripts))

		gatekeeper.insert(ScriptElement(src=HOTJAR_SRC), bypass=True)

		assert page.requests == [HOTJAR_SRC]
		assert gatekeeper.blocked == []

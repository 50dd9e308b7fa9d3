"""Tests for the cookie-backed preference store."""

from __future__ import annotations

import json
from datetime import timedelta
from urllib.parse import unquote

from engine.page import HostPage
from engine.preferences import (
	CONSENT_COOKIE,
	PREFERENCES_COOKIE,
	ConsentRecord,
	PreferenceStore,
	normalize_preferences,
)


class TestNormalize:
	def test_missing_categories_default_off(self) -> None:
		assert normalize_preferences({"analytics": True}) == {
			"functional": True, "analytics": True, "advertising": False, "social": False,
		}

	def test_unknown_keys_are_dropped(self) -> None:
		assert "tracking" not in normalize_preferences({"tracking": True})

	def test_non_mapping_means_nothing_granted(self) -> None:
		assert normalize_preferences(["analytics"]) == normalize_preferences(None)

	def test_only_real_booleans_grant(self) -> None:
		prefs = normalize_preferences({"analytics": "false", "advertising": "0", "social": 1})

		assert prefs == {"functional": True, "analytics": False, "advertising": False, "social": False}


class TestSave:
	def test_accept_writes_single_cookie(self, page, clock) -> None:
		PreferenceStore(page).save(ConsentRecord.create("accept"))

		cookie = page.cookies.get_cookie(CONSENT_COOKIE)
		assert cookie.value == "accept"
		assert cookie.expires == clock() + timedelta(days=180)
		assert cookie.path == "/"
		assert cookie.same_site == "Lax"
		assert page.cookies.get(PREFERENCES_COOKIE) is None

	def test_partial_writes_encoded_map(self, page) -> None:
		PreferenceStore(page).save(ConsentRecord.create("partial", {"social": True}))

		raw = page.cookies.get(PREFERENCES_COOKIE)
		assert "{" not in raw
		assert json.loads(unquote(raw)) == {
			"functional": True, "analytics": False, "advertising": False, "social": True,
		}

	def test_secure_on_https_with_secure_flags(self, page) -> None:
		PreferenceStore(page, secure_flags=True).save(ConsentRecord.create("reject"))

		assert page.cookies.get_cookie(CONSENT_COOKIE).secure

	def test_not_secure_when_flags_disabled(self, page) -> None:
		PreferenceStore(page, secure_flags=False).save(ConsentRecord.create("reject"))

		assert not page.cookies.get_cookie(CONSENT_COOKIE).secure

	def test_not_secure_on_plain_http(self, clock) -> None:
		page = HostPage(url="http://shop.example.com/", clock=clock)
		PreferenceStore(page, secure_flags=True).save(ConsentRecord.create("reject"))

		assert not page.cookies.get_cookie(CONSENT_COOKIE).secure

	def test_custom_max_age(self, page, clock) -> None:
		PreferenceStore(page, max_age=timedelta(days=30)).save(ConsentRecord.create("accept"))

		assert page.cookies.get_cookie(CONSENT_COOKIE).expires == clock() + timedelta(days=30)


class TestLoad:
	def test_round_trip_partial(self, page) -> None:
		store = PreferenceStore(page)
		saved = ConsentRecord.create("partial", {"analytics": True})
		store.save(saved)

		assert store.load() == saved

	def test_nothing_stored(self, page) -> None:
		assert PreferenceStore(page).load() is None

	def test_partial_without_map_is_absent(self, page) -> None:
		page.cookies.set(CONSENT_COOKIE, "partial")

		assert PreferenceStore(page).load() is None

	def test_map_that_is_not_an_object_is_absent(self, page) -> None:
		page.cookies.set(CONSENT_COOKIE, "partial")
		page.cookies.set(PREFERENCES_COOKIE, "%5B1%2C2%5D")

		assert PreferenceStore(page).load() is None

	def test_expired(self, page, clock) -> None:
		store = PreferenceStore(page)
		store.save(ConsentRecord.create("accept"))
		clock.advance(days=180, seconds=1)

		assert store.load() is None

	def test_clear(self, page) -> None:
		store = PreferenceStore(page)
		store.save(ConsentRecord.create("partial", {"analytics": True}))
		store.clear()

		assert page.cookies.get(CONSENT_COOKIE) is None
		assert page.cookies.get(PREFERENCES_COOKIE) is None
		assert store.load() is None

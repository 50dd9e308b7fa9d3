"""
Durable per-visitor consent decision, kept in two cookies on the host page.
"""
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional
from urllib.parse import quote, unquote
import json
import logging

from .categories import CATEGORIES, REQUIRED_CATEGORY, canonical_category

log = logging.getLogger(__name__)

CONSENT_COOKIE = "consentguard_consent"
PREFERENCES_COOKIE = "consentguard_preferences"
CONSENT_MAX_AGE = timedelta(days=180)

ACCEPT = "accept"
REJECT = "reject"
PARTIAL = "partial"
CHOICES = (ACCEPT, REJECT, PARTIAL)


def normalize_preferences(raw) -> dict:
	"""
	Category map with every category present and the required one forced on.

	Only a literal ``True`` grants a category; strings such as ``"false"`` do not.
	"""
	prefs = {c: False for c in CATEGORIES}
	if isinstance(raw, dict):
		for key, value in raw.items():
			category = canonical_category(key)
			if category:
				prefs[category] = prefs[category] or value is True
	prefs[REQUIRED_CATEGORY] = True
	return prefs


def resolve_preferences(choice: str, preferences: Optional[dict] = None) -> dict:
	if choice == ACCEPT:
		return {c: True for c in CATEGORIES}
	if choice == REJECT:
		return normalize_preferences(None)
	if choice == PARTIAL:
		if preferences is None:
			raise ValueError("A partial choice needs an explicit preference map")
		return normalize_preferences(preferences)
	raise ValueError(f"Unknown consent choice: {choice!r}")


@dataclass(frozen=True)
class ConsentRecord:
	choice: str
	preferences: dict

	@classmethod
	def create(cls, choice: str, preferences: Optional[dict] = None) -> "ConsentRecord":
		return cls(choice=choice, preferences=resolve_preferences(choice, preferences))

	def granted(self, category: str) -> bool:
		return bool(self.preferences.get(category))

	@property
	def granted_categories(self) -> list:
		return [c for c in CATEGORIES if self.preferences.get(c)]


class PreferenceStore:
	def __init__(self, page, secure_flags: bool = True, max_age: timedelta = CONSENT_MAX_AGE):
		self.page = page
		self.secure_flags = secure_flags
		self.max_age = max_age

	def load(self) -> Optional[ConsentRecord]:
		"""The stored decision, or None when absent, expired or unreadable."""
		choice = self.page.cookies.get(CONSENT_COOKIE)
		if not choice:
			return None
		if choice in (ACCEPT, REJECT):
			return ConsentRecord.create(choice)
		if choice == PARTIAL:
			raw = self.page.cookies.get(PREFERENCES_COOKIE)
			if not raw:
				log.warning("Partial consent without stored preferences, prompting again")
				return None
			try:
				parsed = json.loads(unquote(raw))
			except ValueError as e:
				log.warning(f"Unreadable preferences cookie, prompting again: {e}")
				return None
			if not isinstance(parsed, dict):
				log.warning("Preferences cookie is not a category map, prompting again")
				return None
			return ConsentRecord.create(PARTIAL, parsed)
		log.warning(f"Unknown stored consent choice {choice!r}, prompting again")
		return None

	def save(self, record: ConsentRecord):
		self.clear()
		expires = self.page.now() + self.max_age
		secure = bool(self.secure_flags and self.page.is_secure)
		self.page.cookies.set(CONSENT_COOKIE, record.choice, expires=expires, secure=secure)
		if record.choice == PARTIAL:
			value = quote(json.dumps(record.preferences, separators=(",", ":")))
			self.page.cookies.set(PREFERENCES_COOKIE, value, expires=expires, secure=secure)

	def clear(self):
		self.page.cookies.delete(CONSENT_COOKIE)
		self.page.cookies.delete(PREFERENCES_COOKIE)

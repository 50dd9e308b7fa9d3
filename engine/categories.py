"""
Consent categories and the registry of which scripts belong to which one.
"""
from typing import Iterator, Optional
from urllib.parse import urlparse
from tldextract import TLDExtract
import logging

log = logging.getLogger(__name__)

FUNCTIONAL = "functional"
ANALYTICS = "analytics"
ADVERTISING = "advertising"
SOCIAL = "social"

CATEGORIES = (FUNCTIONAL, ANALYTICS, ADVERTISING, SOCIAL)

# functional doubles as the "strictly necessary" category
REQUIRED_CATEGORY = FUNCTIONAL

CATEGORY_ALIASES = {
	"necessary": FUNCTIONAL,
	"preferences": FUNCTIONAL,
	"marketing": ADVERTISING,
	"ads": ADVERTISING,
}

# Substrings of host+path, checked in order (more specific first).
TRACKING_DOMAINS = (
	("google-analytics.com", ANALYTICS),
	("googletagmanager.com", ANALYTICS),
	("analytics.tiktok.com", ADVERTISING),
	("hotjar.com", ANALYTICS),
	("clarity.ms", ANALYTICS),
	("cdn.segment.com", ANALYTICS),
	("mixpanel.com", ANALYTICS),
	("matomo", ANALYTICS),
	("doubleclick.net", ADVERTISING),
	("googlesyndication.com", ADVERTISING),
	("googleadservices.com", ADVERTISING),
	("connect.facebook.net", ADVERTISING),
	("facebook.net", ADVERTISING),
	("snap.licdn.com", ADVERTISING),
	("ads-twitter.com", ADVERTISING),
	("amazon-adsystem.com", ADVERTISING),
	("criteo.", ADVERTISING),
	("adnxs.com", ADVERTISING),
	("platform.twitter.com", SOCIAL),
	("platform.linkedin.com", SOCIAL),
	("addthis.com", SOCIAL),
	("sharethis.com", SOCIAL),
	("disqus.com", SOCIAL),
)

# Bundled public suffix snapshot only; the engine never goes to the network for it.
extract = TLDExtract(suffix_list_urls=())


def canonical_category(name) -> Optional[str]:
	if not isinstance(name, str):
		return None
	key = name.strip().lower()
	key = CATEGORY_ALIASES.get(key, key)
	return key if key in CATEGORIES else None


def base_domain(host: str) -> str:
	parts = extract(host or "")
	return f"{parts.domain}.{parts.suffix}" if parts.suffix else parts.domain


def source_key(src: str) -> Optional[tuple]:
	"""(registered domain, path) for a script URL; protocol-relative URLs allowed."""
	if not src:
		return None
	if src.startswith("//"):
		src = "https:" + src
	parsed = urlparse(src)
	if not parsed.hostname:
		return None
	return base_domain(parsed.hostname.lower()), parsed.path.rstrip("/") or "/"


class CategoryRegistry:
	"""Lookup of configured script descriptors by category, id and source."""

	def __init__(self, scripts: dict, tracking_domains=TRACKING_DOMAINS):
		self._scripts = {c: list(scripts.get(c, [])) for c in CATEGORIES}
		self._tracking_domains = tracking_domains
		self._by_id = {}
		self._by_source = {}
		for category, descriptor in self.all_descriptors():
			self._by_id.setdefault(descriptor.id, category)
			key = source_key(descriptor.src) if descriptor.src else None
			if key:
				self._by_source.setdefault(key, category)

	def descriptors(self, category: str) -> list:
		return list(self._scripts.get(category, []))

	def all_descriptors(self) -> Iterator[tuple]:
		for category in CATEGORIES:
			for descriptor in self._scripts[category]:
				yield category, descriptor

	def category_for_id(self, element_id) -> Optional[str]:
		return self._by_id.get(element_id)

	def classify(self, src: str) -> Optional[str]:
		"""
		Category owning a script source, or None when it is not a known tracker.

		Configured sources win over the built-in tracking-domain table.
		"""
		if not src:
			return None
		key = source_key(src)
		if key and key in self._by_source:
			return self._by_source[key]

		parsed = urlparse("https:" + src if src.startswith("//") else src)
		target = f"{(parsed.hostname or '').lower()}{parsed.path.lower()}"
		for pattern, category in self._tracking_domains:
			if pattern in target:
				return category
		return None

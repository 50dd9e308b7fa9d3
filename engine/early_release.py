"""
Early release of regulated analytics base libraries.

Google's tag must be present on every load so their tooling can see the
integration, so it is loaded before the visitor decides. Collection stays
off because the default consent state is registered as all denied first;
a decision later only updates that state.
"""
from urllib.parse import urlparse
import logging
import re

from .categories import base_domain
from .signals import set_default_denied

log = logging.getLogger(__name__)

EARLY_RELEASE_ID_RE = re.compile(r"^(ga4|gtag)([-_]|$)|google-analytics", re.I)
EARLY_RELEASE_HOSTS = {"googletagmanager.com"}
EARLY_RELEASE_PATH = "/gtag/js"
INLINE_CALL_RE = re.compile(r"\bgtag\s*\(")


def is_early_release(descriptor) -> bool:
	if EARLY_RELEASE_ID_RE.search(descriptor.id or ""):
		return True
	if descriptor.src:
		parsed = urlparse("https:" + descriptor.src if descriptor.src.startswith("//") else descriptor.src)
		if base_domain(parsed.hostname or "") in EARLY_RELEASE_HOSTS and parsed.path.startswith(EARLY_RELEASE_PATH):
			return True
	if descriptor.content and INLINE_CALL_RE.search(descriptor.content):
		return True
	return False


def early_release(registry, loader, page) -> list:
	"""Load every early-release descriptor now; returns the injected elements."""
	matches = [d for _, d in registry.all_descriptors() if is_early_release(d)]
	if not matches:
		log.info("No early-release analytics scripts configured")
		return []

	set_default_denied(page)
	injected = []
	for descriptor in matches:
		element = loader.inject(descriptor, bypass=True)
		if element is not None:
			injected.append(element)
	log.info(f"Early-released {len(injected)} analytics script(s) in denied mode")
	return injected

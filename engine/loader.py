from typing import Optional
import logging
import re

from .config import ScriptDescriptor
from .page import ScriptElement
from .signals import update_signals

log = logging.getLogger(__name__)

PREFERENCES_EVENT = "consentguardPreferencesUpdated"

# Values left unfilled from preset snippets (G-XXXXXXXXXX, YOUR_PIXEL_ID, {{id}} ...)
PLACEHOLDER_RE = re.compile(
	r"X{4,}|YOUR_[A-Z0-9_]+|GA_MEASUREMENT_ID|\bPIXEL_ID\b|\{\{[^}]*\}\}",
)


def has_placeholder(descriptor: ScriptDescriptor) -> bool:
	return any(
		PLACEHOLDER_RE.search(value)
		for value in (descriptor.src, descriptor.content)
		if value
	)


def build_element(descriptor: ScriptDescriptor) -> ScriptElement:
	element = ScriptElement(
		id=descriptor.id,
		is_async=descriptor.is_async,
		attributes=dict(descriptor.attributes),
	)
	if descriptor.src:
		element.src = descriptor.src
	else:
		element.content = descriptor.content or ""
	return element


class CategoryLoader:
	"""Injects the configured scripts of granted categories, once each."""

	def __init__(self, page, registry, gatekeeper):
		self.page = page
		self.registry = registry
		self.gatekeeper = gatekeeper
		self.released: set = set()

	def inject(self, descriptor: ScriptDescriptor, bypass: bool = False) -> Optional[ScriptElement]:
		if self.page.get_element(descriptor.id) is not None:
			return None
		if has_placeholder(descriptor):
			log.warning(f"Skipping script {descriptor.id}: unresolved placeholder")
			return None
		element = self.gatekeeper.insert(build_element(descriptor), bypass=bypass)
		log.info(f"Injected script {descriptor.id}")
		return element

	def release(self, category: str, preferences: dict) -> list:
		if not preferences.get(category) or category in self.released:
			return []
		self.released.add(category)
		injected = []
		for descriptor in self.registry.descriptors(category):
			element = self.inject(descriptor)
			if element is not None:
				injected.append(element)
		return injected

	def apply(self, preferences: dict) -> list:
		"""Release every granted category and update consent signals."""
		injected = []
		for category, granted in preferences.items():
			if granted:
				injected.extend(self.release(category, preferences))
			elif category in self.released:
				log.info(f"Consent for {category} withdrawn; loaded scripts stay active until reload")
		update_signals(self.page, preferences)
		self.page.dispatch(PREFERENCES_EVENT, {"preferences": dict(preferences)})
		return injected

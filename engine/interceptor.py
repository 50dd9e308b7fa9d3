"""
Script gatekeeper: the one path every script insertion on the page takes.

Insertions of known trackers are held inert until the owning category is
granted; anything the gatekeeper cannot classify goes straight through.
"""
from dataclasses import dataclass
from typing import Optional
import logging

from .categories import REQUIRED_CATEGORY
from .page import ScriptElement

log = logging.getLogger(__name__)


@dataclass
class BlockedInsertion:
	element: ScriptElement
	intended_src: Optional[str]
	category: str


class ScriptGatekeeper:
	def __init__(self, page, registry):
		self.page = page
		self.registry = registry
		self.preferences: Optional[dict] = None  # None until the visitor decides
		self.blocked: list[BlockedInsertion] = []

	@property
	def decided(self) -> bool:
		return self.preferences is not None

	def classify(self, element: ScriptElement) -> Optional[str]:
		category = self.registry.category_for_id(element.id) if element.id else None
		if category is None and element.src:
			category = self.registry.classify(element.src)
		return category

	def is_granted(self, category: str) -> bool:
		if category == REQUIRED_CATEGORY:
			return True
		return bool(self.preferences and self.preferences.get(category))

	def insert(self, element: ScriptElement, bypass: bool = False) -> ScriptElement:
		"""
		Insert ``element`` into the page, holding it back if it needs consent.

		``bypass`` is reserved for the early-release path, which loads a
		provider's base library before any decision on purpose.
		"""
		if bypass:
			return self.page.append(element)
		try:
			category = self.classify(element)
		except Exception as e:
			log.warning(f"Could not classify script {element.src or element.id}, allowing it: {e}")
			category = None
		if category is None or self.is_granted(category):
			return self.page.append(element)
		return self._hold(element, category)

	def _hold(self, element: ScriptElement, category: str) -> ScriptElement:
		intended = element.src
		element.src = None
		element.inert = True
		self.page.append(element)
		if self.decided:
			log.info(f"Blocked {intended or element.id}: no consent for {category}")
		else:
			self.blocked.append(BlockedInsertion(element=element, intended_src=intended, category=category))
			log.info(f"Holding {intended or element.id} until {category} consent is decided")
		return element

	def resolve(self, preferences: dict) -> list:
		"""
		Apply a decision to the held insertions, in the order they were made.

		Every pending insertion is consumed: granted ones are released, the
		rest stay inert and are not retried.
		"""
		self.preferences = dict(preferences)
		pending, self.blocked = self.blocked, []
		released = []
		for held in pending:
			if not self.is_granted(held.category):
				continue
			if held.intended_src:
				self.page.activate(held.element, held.intended_src)
			else:
				held.element.inert = False
			released.append(held)
		if pending:
			log.info(f"Released {len(released)} of {len(pending)} held script(s)")
		return released

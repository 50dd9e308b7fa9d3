"""
Consent state machine: unknown -> prompted -> decided.

``decided`` is terminal for a page load. Reopening the settings starts a
SettingsSession whose draft only replaces the decision once saved.
"""
from enum import Enum
from typing import Callable, Optional
import logging

from .categories import REQUIRED_CATEGORY, canonical_category
from .exceptions import InvalidTransition
from .preferences import ACCEPT, PARTIAL, REJECT, ConsentRecord, normalize_preferences

log = logging.getLogger(__name__)


class ConsentState(str, Enum):
	UNKNOWN = "unknown"
	PROMPTED = "prompted"
	DECIDED = "decided"


class BannerPrompt:
	"""Shows and hides the consent banner; rendering itself lives elsewhere."""

	def __init__(self, page):
		self.page = page

	def show(self):
		self.page.banner_visible = True

	def hide(self):
		self.page.banner_visible = False
		self.page.settings_button_visible = True


class ConsentStateMachine:
	def __init__(self, store, on_decided: Callable[[ConsentRecord, bool], None], prompt=None):
		self.store = store
		self.on_decided = on_decided
		self.prompt = prompt
		self.state = ConsentState.UNKNOWN
		self.record: Optional[ConsentRecord] = None

	def start(self) -> ConsentState:
		if self.state is not ConsentState.UNKNOWN:
			raise InvalidTransition(f"Cannot start from {self.state.value}")
		try:
			record = self.store.load()
		except Exception as e:
			log.warning(f"Stored consent could not be read, prompting: {e}")
			record = None

		if record is None:
			self.state = ConsentState.PROMPTED
			if self.prompt:
				self.prompt.show()
			log.info("No saved preferences, showing banner")
			return self.state

		self.state = ConsentState.DECIDED
		self.record = record
		if self.prompt:
			self.prompt.hide()
		log.info(f"Replaying saved consent: {record.choice}")
		self.on_decided(record, True)
		return self.state

	def decide(self, choice: str, preferences: Optional[dict] = None) -> ConsentRecord:
		if self.state is not ConsentState.PROMPTED:
			raise InvalidTransition(f"Cannot decide from {self.state.value}")
		return self._commit(choice, preferences)

	def accept(self) -> ConsentRecord:
		return self.decide(ACCEPT)

	def reject(self) -> ConsentRecord:
		return self.decide(REJECT)

	def save_preferences(self, preferences: dict) -> ConsentRecord:
		return self.decide(PARTIAL, preferences)

	def open_settings(self) -> "SettingsSession":
		if self.state is ConsentState.UNKNOWN:
			raise InvalidTransition("Settings opened before the engine started")
		return SettingsSession(self)

	def _commit(self, choice: str, preferences: Optional[dict]) -> ConsentRecord:
		record = ConsentRecord.create(choice, preferences)
		self.store.save(record)
		self.state = ConsentState.DECIDED
		self.record = record
		if self.prompt:
			self.prompt.hide()
		log.info(f"Consent decided: {choice}")
		self.on_decided(record, False)
		return record


class SettingsSession:
	def __init__(self, machine: ConsentStateMachine):
		self.machine = machine
		current = machine.record.preferences if machine.record else None
		self.draft = normalize_preferences(current)
		self.closed = False

	def set(self, category: str, granted: bool):
		key = canonical_category(category)
		if key is None:
			raise ValueError(f"Unknown consent category: {category!r}")
		if key == REQUIRED_CATEGORY:
			return
		self.draft[key] = bool(granted)

	def save(self) -> ConsentRecord:
		return self._finish(PARTIAL, self.draft)

	def accept_all(self) -> ConsentRecord:
		return self._finish(ACCEPT, None)

	def reject_all(self) -> ConsentRecord:
		return self._finish(REJECT, None)

	def cancel(self):
		self.closed = True

	def _finish(self, choice, preferences) -> ConsentRecord:
		if self.closed:
			raise InvalidTransition("Settings session already closed")
		self.closed = True
		return self.machine._commit(choice, preferences)

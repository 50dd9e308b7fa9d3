from datetime import timedelta
from typing import Optional
import logging

from .activity import ActivityReporter, http_post
from .categories import CategoryRegistry
from .config import DEFAULT_CONFIG, EngineConfig, load_config
from .early_release import early_release
from .interceptor import ScriptGatekeeper
from .loader import CategoryLoader
from .page import HostPage, ScriptElement
from .preferences import CONSENT_MAX_AGE, ConsentRecord, PreferenceStore
from .state import BannerPrompt, ConsentState, ConsentStateMachine

log = logging.getLogger(__name__)

PREFERENCES_GLOBAL = "ConsentGuardPreferences"


class ConsentEngine:
	"""
	Everything the consent layer knows about one page load.

	Build one per page load and call ``boot()`` once. Host code must insert
	scripts through ``insert_script`` so they can be held until consent.
	"""

	def __init__(
			self,
			page: HostPage,
			config: Optional[EngineConfig] = None,
			transport=http_post,
			max_age: timedelta = CONSENT_MAX_AGE,
	):
		self.page = page
		if config is None:
			try:
				config = load_config(page)
			except Exception as e:
				log.error(f"Falling back to default configuration: {e}")
				config = DEFAULT_CONFIG
		self.config = config

		self.registry = CategoryRegistry(config.scripts)
		self.store = PreferenceStore(page, secure_flags=config.secure_flags, max_age=max_age)
		self.gatekeeper = ScriptGatekeeper(page, self.registry)
		self.loader = CategoryLoader(page, self.registry, self.gatekeeper)
		self.reporter = ActivityReporter(page, config, transport=transport)
		self.machine = ConsentStateMachine(self.store, self._on_decided, prompt=BannerPrompt(page))
		self.early_released: list = []
		self._booted = False

	@property
	def state(self) -> ConsentState:
		return self.machine.state

	@property
	def record(self) -> Optional[ConsentRecord]:
		return self.machine.record

	def boot(self) -> ConsentState:
		if self._booted:
			return self.machine.state
		self._booted = True
		log.info("Initializing consent engine")
		self.early_released = early_release(self.registry, self.loader, self.page)
		state = self.machine.start()
		self.reporter.record("view")
		self.reporter.last_ping = self.page.now()
		return state

	def insert_script(self, element: ScriptElement) -> ScriptElement:
		return self.gatekeeper.insert(element)

	def accept(self) -> ConsentRecord:
		return self.machine.accept()

	def reject(self) -> ConsentRecord:
		return self.machine.reject()

	def save_preferences(self, preferences: dict) -> ConsentRecord:
		return self.machine.save_preferences(preferences)

	def open_settings(self):
		return self.machine.open_settings()

	def tick(self) -> bool:
		return self.reporter.maybe_ping()

	def _on_decided(self, record: ConsentRecord, replay: bool):
		# the gatekeeper must know the decision before the loader injects through it
		self.gatekeeper.resolve(record.preferences)
		self.loader.apply(record.preferences)
		self.page.globals[PREFERENCES_GLOBAL] = dict(record.preferences)
		if replay:
			return
		self.reporter.record(record.choice)
		self.reporter.report_consent(record)
		self.reporter.notify_webhook(record)

"""
In-process model of the host page the engine runs in.

Only the surface the engine touches is modelled: executable script
elements, cookies, window globals, storage, dispatched events and the
network requests issued by script elements.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional
from urllib.parse import urlparse
import logging

log = logging.getLogger(__name__)


def utcnow() -> datetime:
	return datetime.now(timezone.utc)


@dataclass
class ScriptElement:
	id: Optional[str] = None
	src: Optional[str] = None
	content: str = ""
	is_async: bool = False
	attributes: dict = field(default_factory=dict)
	inert: bool = False  # held back, src not applied

	@property
	def is_external(self) -> bool:
		return bool(self.src)


@dataclass
class StoredCookie:
	name: str
	value: str
	expires: Optional[datetime] = None
	path: str = "/"
	secure: bool = False
	same_site: str = "Lax"


class CookieJar:
	"""Cookies visible to the page (document.cookie)."""

	def __init__(self, clock: Callable[[], datetime] = utcnow):
		self._clock = clock
		self._cookies: dict[str, StoredCookie] = {}

	def set(self, name, value, expires=None, path="/", secure=False, same_site="Lax"):
		self._cookies[name] = StoredCookie(
			name=name, value=value, expires=expires, path=path, secure=secure, same_site=same_site,
		)

	def get_cookie(self, name) -> Optional[StoredCookie]:
		cookie = self._cookies.get(name)
		if cookie is None:
			return None
		if cookie.expires is not None and cookie.expires <= self._clock():
			del self._cookies[name]
			return None
		return cookie

	def get(self, name) -> Optional[str]:
		cookie = self.get_cookie(name)
		return cookie.value if cookie else None

	def delete(self, name):
		self._cookies.pop(name, None)


class HostPage:
	def __init__(
			self,
			url: str = "https://example.com/",
			user_agent: str = "",
			language: str = "en-US",
			loader_attributes: Optional[dict] = None,
			globals: Optional[dict] = None,
			clock: Callable[[], datetime] = utcnow,
	):
		self.url = url
		parsed = urlparse(url)
		self.hostname = (parsed.hostname or "").lower()
		self.is_secure = parsed.scheme == "https"
		self.user_agent = user_agent
		self.language = language
		# attributes of the <script> tag that loaded the engine (data-config, data-user-id ...)
		self.loader_attributes = dict(loader_attributes or {})
		self.globals = dict(globals or {})
		self.clock = clock

		self.cookies = CookieJar(clock)
		self.local_storage: dict[str, str] = {}
		self.session_storage: dict[str, str] = {}

		self.elements: list[ScriptElement] = []
		self.requests: list[str] = []
		self.events: list[tuple[str, dict]] = []

		self.banner_visible = False
		self.settings_button_visible = False

	def now(self) -> datetime:
		return self.clock()

	def get_element(self, element_id) -> Optional[ScriptElement]:
		if not element_id:
			return None
		for el in self.elements:
			if el.id == element_id:
				return el
		return None

	def append(self, element: ScriptElement) -> ScriptElement:
		self.elements.append(element)
		if element.src and not element.inert:
			self.requests.append(element.src)
		return element

	def activate(self, element: ScriptElement, src: str):
		"""Give a held element its real source, which starts the load."""
		element.src = src
		element.inert = False
		self.requests.append(src)

	def dispatch(self, name: str, detail: dict):
		self.events.append((name, detail))
		for listener in list(self.globals.get("__listeners__", {}).get(name, [])):
			try:
				listener(detail)
			except Exception as e:
				log.error(f"Listener for {name} failed: {e}")

	def add_listener(self, name: str, callback):
		self.globals.setdefault("__listeners__", {}).setdefault(name, []).append(callback)

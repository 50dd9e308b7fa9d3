"""
Typed engine configuration.

Three layers are merged, highest precedence first:

1. inline config on the loader tag (``data-config`` / ``data-*`` attributes)
2. remote config (window-global injection by the dashboard, or a fetch)
3. built-in defaults

Malformed input never stops the engine: bad fields are dropped with a
warning and the defaults stay in place.
"""
from dataclasses import dataclass, field, replace
from typing import Any, Optional
import json
import logging

from .categories import CATEGORIES, canonical_category
from .exceptions import ConfigurationError

log = logging.getLogger(__name__)

WINDOW_CONFIG_KEY = "ConsentGuardConfig"


@dataclass(frozen=True)
class ScriptDescriptor:
	id: str
	src: Optional[str] = None
	content: Optional[str] = None
	is_async: bool = True
	attributes: dict = field(default_factory=dict)

	@property
	def is_external(self) -> bool:
		return bool(self.src)

	@classmethod
	def from_dict(cls, raw: dict) -> "ScriptDescriptor":
		if not isinstance(raw, dict):
			raise ConfigurationError(f"Script descriptor must be an object, got {type(raw).__name__}")
		script_id = raw.get("id")
		if not isinstance(script_id, str) or not script_id.strip():
			raise ConfigurationError("Script descriptor is missing an id")
		src = raw.get("src") or None
		content = raw.get("content") or None
		if src is not None and not isinstance(src, str):
			raise ConfigurationError(f"Script {script_id}: src must be a string")
		if content is not None and not isinstance(content, str):
			raise ConfigurationError(f"Script {script_id}: content must be a string")
		if not src and not content:
			raise ConfigurationError(f"Script {script_id} has neither src nor content")
		if src and content:
			log.warning(f"Script {script_id} has both src and content; using src")
			content = None
		attributes = raw.get("attributes") or {}
		if not isinstance(attributes, dict):
			raise ConfigurationError(f"Script {script_id}: attributes must be an object")
		return cls(
			id=script_id.strip(),
			src=src,
			content=content,
			is_async=bool(raw.get("async", True)),
			attributes={str(k): str(v) for k, v in attributes.items()},
		)

	def to_dict(self) -> dict:
		data = {"id": self.id, "async": self.is_async}
		if self.src:
			data["src"] = self.src
		if self.content:
			data["content"] = self.content
		if self.attributes:
			data["attributes"] = dict(self.attributes)
		return data


def empty_scripts() -> dict:
	return {c: [] for c in CATEGORIES}


@dataclass(frozen=True)
class EngineConfig:
	banner: dict = field(default_factory=dict)  # appearance, passed through untouched
	secure_flags: bool = True
	webhook_url: str = ""
	language: str = "en"
	script_id: str = ""
	user_id: Optional[str] = None
	session_id: Optional[str] = None
	test_mode: bool = False
	api_base_url: str = "https://api.consentguard.app"
	scripts: dict = field(default_factory=empty_scripts)

	def descriptors(self, category: str) -> list:
		return list(self.scripts.get(category, []))

	def to_dict(self) -> dict:
		return {
			"banner": dict(self.banner),
			"secureFlags": self.secure_flags,
			"webhookUrl": self.webhook_url,
			"language": self.language,
			"scriptId": self.script_id,
			"userId": self.user_id,
			"sessionId": self.session_id,
			"testMode": self.test_mode,
			"apiBaseUrl": self.api_base_url,
			"scripts": {c: [d.to_dict() for d in self.scripts.get(c, [])] for c in CATEGORIES},
		}


DEFAULT_CONFIG = EngineConfig()

# raw key -> (field name, expected type)
_SCALAR_FIELDS = {
	"secureFlags": ("secure_flags", bool),
	"webhookUrl": ("webhook_url", str),
	"language": ("language", str),
	"scriptId": ("script_id", str),
	"userId": ("user_id", str),
	"sessionId": ("session_id", str),
	"testMode": ("test_mode", bool),
	"apiBaseUrl": ("api_base_url", str),
}


def parse_scripts(raw: Any, seen_ids: Optional[set] = None) -> dict:
	"""Category -> descriptors, dropping invalid entries and duplicate ids (first wins)."""
	scripts = empty_scripts()
	if not isinstance(raw, dict):
		log.warning(f"Ignoring scripts config of type {type(raw).__name__}")
		return scripts
	seen = seen_ids if seen_ids is not None else set()
	for name, items in raw.items():
		category = canonical_category(name)
		if category is None:
			log.warning(f"Ignoring unknown script category {name!r}")
			continue
		if not isinstance(items, list):
			log.warning(f"Ignoring scripts for {category}: expected a list")
			continue
		for item in items:
			try:
				descriptor = ScriptDescriptor.from_dict(item)
			except ConfigurationError as e:
				log.warning(f"Skipping script descriptor: {e}")
				continue
			if descriptor.id in seen:
				log.warning(f"Duplicate script id {descriptor.id!r} ignored")
				continue
			seen.add(descriptor.id)
			scripts[category].append(descriptor)
	return scripts


def overrides_from_dict(raw: Any) -> dict:
	"""Field overrides for EngineConfig from a raw JSON document."""
	if raw is None:
		return {}
	if not isinstance(raw, dict):
		log.warning(f"Ignoring configuration of type {type(raw).__name__}")
		return {}

	overrides = {}
	for key, (attr, kind) in _SCALAR_FIELDS.items():
		if key not in raw or raw[key] is None:
			continue
		value = raw[key]
		if kind is bool and isinstance(value, str):
			value = value.lower() in ("1", "true", "yes")
		if not isinstance(value, kind):
			log.warning(f"Ignoring config field {key}: expected {kind.__name__}")
			continue
		overrides[attr] = value

	banner = raw.get("banner")
	if isinstance(banner, dict):
		overrides["banner"] = dict(banner)

	if "scripts" in raw:
		overrides["scripts"] = parse_scripts(raw["scripts"])
	return overrides


def merge_configs(*layers: Optional[dict], base: EngineConfig = DEFAULT_CONFIG) -> EngineConfig:
	"""
	Apply raw layers on top of ``base``, lowest precedence first.

	A layer that carries ``scripts`` replaces the whole scripts mapping.
	"""
	config = base
	for layer in layers:
		overrides = overrides_from_dict(layer)
		if overrides:
			config = replace(config, **overrides)
	return config


def inline_config(page) -> Optional[dict]:
	attrs = page.loader_attributes
	raw = attrs.get("data-config")
	if raw:
		try:
			parsed = json.loads(raw)
		except (TypeError, ValueError) as e:
			log.error(f"Failed to parse data-config: {e}")
		else:
			if isinstance(parsed, dict):
				return parsed
			log.error("data-config is not a JSON object")

	fallback = {}
	if attrs.get("data-user-id"):
		fallback["userId"] = attrs["data-user-id"]
	if attrs.get("data-session-id"):
		fallback["sessionId"] = attrs["data-session-id"]
	if attrs.get("data-script-id"):
		fallback["scriptId"] = attrs["data-script-id"]
	return fallback or None


def injected_config(page) -> Optional[dict]:
	raw = page.globals.get(WINDOW_CONFIG_KEY)
	if raw is None:
		return None
	if isinstance(raw, str):
		try:
			raw = json.loads(raw)
		except ValueError as e:
			log.error(f"Failed to parse injected configuration: {e}")
			return None
	return raw if isinstance(raw, dict) else None


def fetch_remote_config(script_id: str) -> Optional[dict]:
	# Deliberately disabled: pages rely on inline or injected configuration.
	log.debug(f"Remote configuration fetch skipped for {script_id or 'unknown script'}")
	return None


def load_config(page, base: EngineConfig = DEFAULT_CONFIG) -> EngineConfig:
	inline = inline_config(page)
	remote = injected_config(page)
	if remote is None:
		script_id = (inline or {}).get("scriptId") or ""
		remote = fetch_remote_config(script_id)
	config = merge_configs(remote, inline, base=base)
	total = sum(len(v) for v in config.scripts.values())
	log.info(f"Configuration loaded with {total} script(s)")
	return config

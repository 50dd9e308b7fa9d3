class ConsentError(Exception):
	"""Base class for consent engine errors."""


class InvalidTransition(ConsentError):
	"""A decision was submitted in a state that does not accept one."""


class ConfigurationError(ConsentError):
	"""Raised by strict configuration parsing only."""

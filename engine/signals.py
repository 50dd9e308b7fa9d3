"""
Consent-signal APIs of analytics/ad platforms living on the host page.
"""
from .categories import ADVERTISING, ANALYTICS

GRANTED = "granted"
DENIED = "denied"

DEFAULT_DENIED = {
	"ad_storage": DENIED,
	"analytics_storage": DENIED,
	"ad_user_data": DENIED,
	"ad_personalization": DENIED,
}


def ensure_gtag(page):
	"""Install dataLayer/gtag the way the Google tag snippet does."""
	data_layer = page.globals.setdefault("dataLayer", [])
	if "gtag" not in page.globals:
		page.globals["gtag"] = lambda *args: data_layer.append(list(args))
	return page.globals["gtag"]


def set_default_denied(page):
	gtag = ensure_gtag(page)
	gtag("consent", "default", dict(DEFAULT_DENIED))


def signal_state(preferences: dict) -> dict:
	ads = GRANTED if preferences.get(ADVERTISING) else DENIED
	return {
		"ad_storage": ads,
		"analytics_storage": GRANTED if preferences.get(ANALYTICS) else DENIED,
		"ad_user_data": ads,
		"ad_personalization": ads,
	}


def update_signals(page, preferences: dict) -> list:
	"""Push the decision to every signal API present; returns the APIs updated."""
	updated = []
	gtag = page.globals.get("gtag")
	if callable(gtag):
		gtag("consent", "update", signal_state(preferences))
		updated.append("gtag")
	fbq = page.globals.get("fbq")
	if callable(fbq):
		fbq("consent", "grant" if preferences.get(ADVERTISING) else "revoke")
		updated.append("fbq")
	return updated

"""Shared fixtures for engine and API tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from rest_framework.test import APIClient

from engine.config import merge_configs
from engine.page import HostPage

GA_SRC = "https://www.googletagmanager.com/gtag/js?id=G-ABC1234567"
HOTJAR_SRC = "https://static.hotjar.com/c/hotjar-1234.js"
PIXEL_SRC = "https://connect.facebook.net/en_US/fbevents.js"
WIDGET_SRC = "https://platform.twitter.com/widgets.js"


class Clock:
	"""Settable clock for pages and cookie expiry."""

	def __init__(self, start: datetime | None = None) -> None:
		self.current = start or datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)

	def __call__(self) -> datetime:
		return self.current

	def advance(self, **kwargs) -> None:
		self.current += timedelta(**kwargs)


@pytest.fixture
def clock() -> Clock:
	return Clock()


@pytest.fixture
def page(clock) -> HostPage:
	return HostPage(url="https://shop.example.com/cart", user_agent="pytest-agent", clock=clock)


@pytest.fixture
def scripts_config() -> dict:
	return {
		"scriptId": "embed-key-1",
		"scripts": {
			"analytics": [
				{"id": "hotjar", "src": HOTJAR_SRC},
			],
			"advertising": [
				{"id": "fb-pixel", "src": PIXEL_SRC},
				{"id": "ads-inline", "content": "window.adsLoaded = true;"},
			],
			"social": [
				{"id": "twitter-widgets", "src": WIDGET_SRC},
			],
			"functional": [
				{"id": "chat", "src": "https://cdn.chat.example.com/widget.js"},
			],
		},
	}


@pytest.fixture
def config(scripts_config):
	return merge_configs(scripts_config)


@pytest.fixture
def transport():
	"""Collects engine reports instead of sending them."""
	sent = []

	def post(url, payload):
		sent.append((url, payload))

	post.sent = sent
	return post


@pytest.fixture
def api_client() -> APIClient:
	return APIClient()


@pytest.fixture
def user(db):
	from users.models import User
	return User.objects.create_user(email="owner@example.com", password="pass-1234")


@pytest.fixture
def other_user(db):
	from users.models import User
	return User.objects.create_user(email="someone@example.com", password="pass-1234")


@pytest.fixture
def auth_client(user) -> APIClient:
	client = APIClient()
	client.force_authenticate(user=user)
	return client


@pytest.fixture
def domain(user):
	from domains.models import Domain
	return Domain.objects.create(user=user, url="https://shop.example.com")


@pytest.fixture
def webhook(domain):
	from webhooks.models import Webhook
	return Webhook.objects.create(domain=domain, url="https://hooks.example.com/consent", secret="s3cret")

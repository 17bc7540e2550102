"""
Settings helper: reach the per-app settings and services from request handlers.
"""
from collections import namedtuple

from flask import current_app

EXTENSION_KEY = "account_verify"

ServiceRegistry = namedtuple("ServiceRegistry", ["settings", "registration", "verification", "welcome"])


def get_services() -> ServiceRegistry:
    """Services wired by create_app. Safe to call from any request context."""
    return current_app.extensions[EXTENSION_KEY]

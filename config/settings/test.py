"""Test settings: fast hashing and no throttling state between tests."""
from .base import *  # noqa


DEBUG = False
SECRET_KEY = "test-insecure-key"
ALLOWED_HOSTS = ["testserver", "localhost"]

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# Throttle history lives in the cache; a dummy cache keeps every test independent
CACHES = {"default": {"BACKEND": "django.core.cache.backends.dummy.DummyCache"}}

LOGGING["root"]["level"] = "ERROR"  # noqa: F405

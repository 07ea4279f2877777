"""Bearer token credentials.

Tokens are DRF `authtoken` keys presented as `Authorization: Bearer <key>`.
A token older than `AUTH_TOKEN_TTL` is revoked on first use.
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from rest_framework import exceptions
from rest_framework.authentication import TokenAuthentication
from rest_framework.authtoken.models import Token

logger = logging.getLogger(__name__)


def token_expired(token: Token) -> bool:
    return token.created + settings.AUTH_TOKEN_TTL <= timezone.now()


def issue_token(user) -> Token:
    """Return a live token for `user`, replacing an expired one."""
    token, created = Token.objects.get_or_create(user=user)
    if not created and token_expired(token):
        token.delete()
        token = Token.objects.create(user=user)
    return token


def revoke_tokens(user) -> int:
    deleted, _ = Token.objects.filter(user=user).delete()
    return deleted


class BearerTokenAuthentication(TokenAuthentication):
    keyword = "Bearer"

    def authenticate_credentials(self, key):
        user, token = super().authenticate_credentials(key)
        if token_expired(token):
            logger.info("Rejected expired token for user %s", user.pk)
            token.delete()
            raise exceptions.AuthenticationFailed(_("Token has expired."))
        return user, token

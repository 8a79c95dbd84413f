"""
Bearer token authentication.

Tokens are HS256 JWTs carrying the user's primary key in a ``userId``
claim. The user must still exist and be active for the token to be
accepted.
"""

from datetime import datetime, timedelta, timezone

import jwt
from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework import authentication, exceptions


def create_access_token(user, expires_in: timedelta = None) -> str:
    """Issue a signed access token for ``user``."""
    if expires_in is None:
        expires_in = timedelta(hours=settings.JWT_EXPIRATION_HOURS)
    now = datetime.now(timezone.utc)
    payload = {
        'userId': user.pk,
        'iat': now,
        'exp': now + expires_in,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Verify and decode an access token.

    Raises:
        AuthenticationFailed: If the token is expired or otherwise invalid
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise exceptions.AuthenticationFailed('Token expired')
    except jwt.InvalidTokenError:
        raise exceptions.AuthenticationFailed('Invalid token')


class JWTAuthentication(authentication.BaseAuthentication):
    """Authenticate requests carrying ``Authorization: Bearer <token>``."""

    keyword = 'Bearer'

    def authenticate(self, request):
        header = authentication.get_authorization_header(request).split()

        if not header or header[0].lower() != self.keyword.lower().encode():
            return None

        if len(header) != 2:
            raise exceptions.AuthenticationFailed('Invalid token')

        try:
            token = header[1].decode()
        except UnicodeError:
            raise exceptions.AuthenticationFailed('Invalid token')

        payload = decode_access_token(token)

        User = get_user_model()
        try:
            user = User.objects.get(pk=payload.get('userId'))
        except (User.DoesNotExist, ValueError, TypeError):
            raise exceptions.AuthenticationFailed('Invalid token or user not found')

        if not user.is_active:
            raise exceptions.AuthenticationFailed('Invalid token or user not found')

        return (user, payload)

    def authenticate_header(self, request):
        return self.keyword

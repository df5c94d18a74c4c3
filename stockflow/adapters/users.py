"""
Django user directory — resolves principals from django.contrib.auth.

Role resolution, in order:
1. ``user.role`` when the user model has it ("SUPER_ADMIN" → "super-admin")
2. ``is_superuser`` → "super-admin"
3. ``is_staff`` → "admin"
4. otherwise "user"

Strings are always looked up by USERNAME_FIELD, so a username made of
digits never resolves to another user's primary key. Only int identities
are primary keys. Inactive users do not resolve.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth import get_user_model

from stockflow.protocols.principals import Principal


def normalize_role(role: str) -> str:
    """'SUPER_ADMIN', 'Super Admin' and 'super-admin' are the same role."""
    return str(role).strip().lower().replace('_', '-').replace(' ', '-')


def role_for(user) -> str:
    role = getattr(user, 'role', None)
    if role:
        return normalize_role(role)
    if getattr(user, 'is_superuser', False):
        return 'super-admin'
    if getattr(user, 'is_staff', False):
        return 'admin'
    return 'user'


class DjangoUserDirectory:
    """PrincipalDirectory backed by the configured AUTH_USER_MODEL."""

    def resolve(self, identity: Any) -> Principal | None:
        User = get_user_model()

        if isinstance(identity, User):
            user = identity
        elif identity is None or identity == '':
            return None
        elif isinstance(identity, int) and not isinstance(identity, bool):
            user = User.objects.filter(pk=identity).first()
        else:
            user = User.objects.filter(**{User.USERNAME_FIELD: identity}).first()

        if user is None or not getattr(user, 'is_active', True):
            return None
        if not getattr(user, 'is_authenticated', True):
            return None

        return Principal(identity=user.get_username(), role=role_for(user), user=user)

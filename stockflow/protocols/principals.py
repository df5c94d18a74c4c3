"""
Principal Directory Protocol — Interface for identity and role lookup.

Authentication happens outside Stockflow. The acting principal is passed
explicitly to every decision and resolved here to a role.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class Principal:
    """An identity with its role."""

    identity: str
    role: str
    user: Any = None  # Backing user object, when there is one


@runtime_checkable
class PrincipalDirectory(Protocol):
    """Protocol for principal/role lookup."""

    def resolve(self, identity: Any) -> Principal | None:
        """
        Resolve an identity (or user object) to a Principal.

        Args:
            identity: User object, primary key or username

        Returns:
            Principal or None if unknown or inactive
        """
        ...

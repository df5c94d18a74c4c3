"""
Authorization — who may decide on stock requests.

Roles come from the configured PrincipalDirectory and are compared after
normalization, so "SUPER_ADMIN" and "super-admin" are the same role.
"""

import logging

from stockflow.adapters import get_principal_directory
from stockflow.adapters.users import normalize_role
from stockflow.conf import stockflow_settings
from stockflow.exceptions import StockError

logger = logging.getLogger('stockflow')

APPROVE = 'approve'
REJECT = 'reject'
DECISION_ACTIONS = (APPROVE, REJECT)


def authorize(principal, action: str) -> bool:
    """True if the principal may perform a decision action."""
    if principal is None or action not in DECISION_ACTIONS:
        return False
    allowed = {normalize_role(role) for role in stockflow_settings.APPROVER_ROLES}
    return normalize_role(principal.role) in allowed


def require_approver(identity, action: str):
    """
    Resolve an identity and check it may perform the action.

    Returns:
        Principal

    Raises:
        StockError('PRINCIPAL_NOT_FOUND'): Identity does not resolve
        StockError('FORBIDDEN'): Principal's role may not decide
    """
    principal = get_principal_directory().resolve(identity)
    if principal is None:
        logger.warning(
            "stock.auth.unknown_principal",
            extra={"identity": str(identity), "action": action},
        )
        raise StockError('PRINCIPAL_NOT_FOUND', identity=str(identity))

    if not authorize(principal, action):
        logger.warning(
            "stock.auth.forbidden",
            extra={"identity": principal.identity, "role": principal.role, "action": action},
        )
        raise StockError(
            'FORBIDDEN',
            f"Role {principal.role} may not {action} stock requests",
            identity=principal.identity,
            role=principal.role,
        )

    return principal

"""
Request Context

Per-request tenant identity, carried in a ContextVar so concurrent requests
on the same event loop never see each other's tenant.
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Iterator, Optional

import jwt

from config import get_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TenantContext:
    """Identity information available to the current request."""
    tenant_id: Optional[str] = None
    auth_token: Optional[str] = None


_EMPTY_CONTEXT = TenantContext()

_tenant_context: ContextVar[TenantContext] = ContextVar("tenant_context", default=_EMPTY_CONTEXT)


def get_tenant_context() -> TenantContext:
    """Return the current request's tenant context (empty if none was set)."""
    return _tenant_context.get()


@contextmanager
def request_context(
    tenant_id: Optional[str] = None,
    auth_token: Optional[str] = None,
) -> Iterator[TenantContext]:
    """
    Bind a tenant context for the duration of a ``with`` block.

    Example:
        with request_context(auth_token=request_token):
            summary = await get_policy_summary()
    """
    ctx = TenantContext(tenant_id=tenant_id, auth_token=auth_token)
    token = _tenant_context.set(ctx)
    try:
        yield ctx
    finally:
        _tenant_context.reset(token)


def derive_tenant_id(token: str, claim: Optional[str] = None) -> Optional[str]:
    """
    Read the tenant id from a JWT payload.

    The signature is NOT verified: the token was already authenticated
    upstream, this only locates the tenant.

    Args:
        token: JWT string
        claim: Payload claim holding the tenant id (default from AuthConfig)

    Returns:
        Tenant id, or None if the token is malformed or lacks the claim
    """
    if not token:
        return None

    claim = claim or get_config().auth.tenant_claim
    try:
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError as e:
        logger.debug(f"Cannot decode auth token: {e}")
        return None

    value = payload.get(claim) if isinstance(payload, dict) else None
    if value is None or value == "":
        return None
    return str(value)


def resolve_tenant_id(context: Optional[TenantContext] = None) -> Optional[str]:
    """
    Resolve the tenant identity of the current request.

    The explicit tenant id wins; the auth token is consulted only when it is
    missing or empty.
    """
    ctx = context or get_tenant_context()
    if ctx.tenant_id:
        return ctx.tenant_id
    if ctx.auth_token:
        return derive_tenant_id(ctx.auth_token)
    return None


__all__ = [
    "TenantContext",
    "get_tenant_context",
    "request_context",
    "derive_tenant_id",
    "resolve_tenant_id",
]

"""
Policy store

Fetches a tenant's raw policy text. The HTTP store lists the tenant's policy
files and reads them in parallel; each request is wrapped in with_timeout
and with_retry. Policy contents are never logged, only names and lengths.
"""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from config import PolicyStoreConfig, get_config
from policy_digest.errors import PolicyStoreError
from policy_digest.pipeline.retry import RetryPolicy, with_retry
from policy_digest.pipeline.timeout import with_timeout

logger = logging.getLogger(__name__)

POLICY_SEPARATOR = "\n\n---\n\n"

_BLOB_PREFIX = re.compile(r"^policies/[^/]+/")


class PolicyStore(ABC):
    """Source of raw policy text, one document per tenant."""

    @abstractmethod
    async def fetch_raw_policy(self, tenant_id: Optional[str]) -> Optional[str]:
        """
        Return the tenant's full policy text, or None if there is none.

        May raise on transport failures.
        """


class HttpPolicyStore(PolicyStore):
    """
    Policy store backed by the policy HTTP API.

    Endpoints:
        GET {base_url}/api/files                           -> [{name, blobUrl}]
        GET {base_url}/api/policies/policies/{blob path}   -> {policyId, text}
    """

    def __init__(
        self,
        config: Optional[PolicyStoreConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        """
        Args:
            config: Store settings (defaults to the global PolicyStoreConfig)
            client: Pre-built client with base_url set, mainly for tests
                (httpx.MockTransport)
            retry_policy: Retry limits for each request
        """
        self.config = config or get_config().policy_store
        self._client = client
        self._retry_policy = retry_policy

    async def fetch_raw_policy(self, tenant_id: Optional[str]) -> Optional[str]:
        if not tenant_id:
            logger.debug("No tenant id, skipping policy fetch")
            return None

        if self._client is not None:
            return await self._fetch(self._client, tenant_id)

        async with httpx.AsyncClient(base_url=self.config.base_url.rstrip("/")) as client:
            return await self._fetch(client, tenant_id)

    async def _fetch(self, client: httpx.AsyncClient, tenant_id: str) -> Optional[str]:
        headers = {self.config.tenant_header: tenant_id}

        logger.info(f"Fetching company policies: tenant={tenant_id}")
        try:
            response = await self._get(client, "/api/files", headers, "policy-list-fetch")
        except httpx.HTTPError as e:
            raise PolicyStoreError(
                f"Failed to list policies: {e}",
                details={"tenant_id": tenant_id},
            ) from e

        if not response.is_success:
            logger.warning(f"Failed to list policies: tenant={tenant_id}, status={response.status_code}")
            return None

        try:
            policies = response.json()
        except ValueError as e:
            raise PolicyStoreError(
                f"Malformed policy list: {e}",
                details={"tenant_id": tenant_id},
            ) from e

        if not isinstance(policies, list) or not policies:
            logger.info(f"No policies found: tenant={tenant_id}")
            return None

        logger.info(
            f"Found {len(policies)} policies: tenant={tenant_id}, "
            f"names={[p.get('name') for p in policies if isinstance(p, dict)]}"
        )

        contents = await asyncio.gather(
            *(self._read_policy(client, policy, headers) for policy in policies)
        )
        valid = [c for c in contents if c is not None]

        if not valid:
            logger.warning(f"No valid policies could be read: tenant={tenant_id}")
            return None

        context = POLICY_SEPARATOR.join(valid)
        logger.info(f"Policy context prepared: policies={len(valid)}, length={len(context)}")
        return context

    async def _read_policy(
        self,
        client: httpx.AsyncClient,
        policy: Any,
        headers: Dict[str, str],
    ) -> Optional[str]:
        """Read one policy file; failures skip the file."""
        if not isinstance(policy, dict) or not policy.get("blobUrl"):
            return None

        name = policy.get("name", "")
        blob_path = _BLOB_PREFIX.sub("", str(policy["blobUrl"]))
        url = f"/api/policies/policies/{quote(blob_path, safe='')}"

        try:
            response = await self._get(client, url, headers, "policy-read-fetch")
            if not response.is_success:
                logger.info(f"Failed to read policy (skipping): name={name}, status={response.status_code}")
                return None
            data = response.json()
        except Exception as e:
            logger.warning(f"Error reading policy (skipping): name={name}, error={type(e).__name__}: {e}")
            return None

        text = data.get("text") if isinstance(data, dict) else None
        if not isinstance(text, str) or not text.strip():
            return None

        logger.info(f"Policy data received: name={name}, length={len(text)}")
        return f"**Policy: {name}**\n{text}"

    async def _get(
        self,
        client: httpx.AsyncClient,
        url: str,
        headers: Dict[str, str],
        label: str,
    ) -> httpx.Response:
        timeout_ms = self.config.request_timeout_ms
        return await with_retry(
            lambda: with_timeout(lambda: client.get(url, headers=headers), timeout_ms),
            label,
            max_attempts=1,
            policy=self._retry_policy,
        )


class StaticPolicyStore(PolicyStore):
    """In-memory policy store keyed by tenant id (tests, local runs)."""

    def __init__(self, policies: Optional[Dict[str, str]] = None):
        self.policies: Dict[str, str] = dict(policies or {})

    async def fetch_raw_policy(self, tenant_id: Optional[str]) -> Optional[str]:
        if not tenant_id:
            return None
        return self.policies.get(tenant_id)


__all__ = [
    "POLICY_SEPARATOR",
    "PolicyStore",
    "HttpPolicyStore",
    "StaticPolicyStore",
]

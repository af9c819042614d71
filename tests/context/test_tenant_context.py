"""
请求上下文与租户解析测试
"""

import asyncio

import jwt
import pytest

from policy_digest.context import (
    TenantContext,
    derive_tenant_id,
    get_tenant_context,
    request_context,
    resolve_tenant_id,
)

SECRET = "test-secret-key-with-at-least-32-bytes"


def make_token(payload) -> str:
    return jwt.encode(payload, SECRET, algorithm="HS256")


class TestDeriveTenantId:
    """测试从 JWT 推导租户 ID"""

    def test_reads_claim_without_verifying_signature(self):
        token = make_token({"user_company_resourceid": "company-1"})
        assert derive_tenant_id(token) == "company-1"

    def test_custom_claim(self):
        token = make_token({"org": "company-2"})
        assert derive_tenant_id(token, claim="org") == "company-2"

    def test_numeric_claim_stringified(self):
        token = make_token({"user_company_resourceid": 42})
        assert derive_tenant_id(token) == "42"

    def test_missing_claim(self):
        assert derive_tenant_id(make_token({"sub": "user"})) is None

    def test_empty_claim(self):
        assert derive_tenant_id(make_token({"user_company_resourceid": ""})) is None

    @pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
    def test_malformed_token(self, token):
        assert derive_tenant_id(token) is None


class TestRequestContext:
    """测试请求上下文"""

    def test_default_is_empty(self):
        assert get_tenant_context() == TenantContext()

    def test_context_bound_and_reset(self):
        with request_context(tenant_id="company-1") as ctx:
            assert get_tenant_context() is ctx
            assert get_tenant_context().tenant_id == "company-1"
        assert get_tenant_context().tenant_id is None

    @pytest.mark.asyncio
    async def test_concurrent_tasks_isolated(self):
        async def worker(tenant):
            with request_context(tenant_id=tenant):
                await asyncio.sleep(0.01)
                return get_tenant_context().tenant_id

        results = await asyncio.gather(worker("company-1"), worker("company-2"))
        assert results == ["company-1", "company-2"]


class TestResolveTenantId:
    """测试租户解析优先级"""

    def test_explicit_tenant_wins(self):
        token = make_token({"user_company_resourceid": "from-token"})
        ctx = TenantContext(tenant_id="explicit", auth_token=token)
        assert resolve_tenant_id(ctx) == "explicit"

    def test_falls_back_to_token(self):
        token = make_token({"user_company_resourceid": "from-token"})
        assert resolve_tenant_id(TenantContext(tenant_id="", auth_token=token)) == "from-token"

    def test_no_identity(self):
        assert resolve_tenant_id(TenantContext()) is None

    def test_uses_current_context(self):
        with request_context(tenant_id="company-1"):
            assert resolve_tenant_id() == "company-1"

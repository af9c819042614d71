"""
Pytest 配置文件

设置测试环境，并提供策略摘要测试共用的 fixtures
"""

import sys
from pathlib import Path
from typing import Any, Callable

import pytest


def pytest_configure(config):
    """
    Pytest 配置钩子

    在测试收集之前设置 Python 路径
    """
    # 添加项目根目录到 Python 路径（必须放在最前面，避免命名冲突）
    project_root = Path(__file__).parent.parent.resolve()
    project_root_str = str(project_root)

    if project_root_str not in sys.path:
        sys.path.insert(0, project_root_str)


# 也直接设置路径：项目根目录，以及 tests 目录（供 fakes 模块导入）
project_root = Path(__file__).parent.parent.resolve()
for path in (project_root, Path(__file__).parent.resolve()):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))


from config import PolicySummaryConfig  # noqa: E402
from policy_digest.pipeline.cache import TenantPolicyCache  # noqa: E402
from policy_digest.pipeline.retry import RetryPolicy  # noqa: E402
from policy_digest.policy.fetcher import StaticPolicyStore  # noqa: E402

from fakes import FakeClock  # noqa: E402


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(fake_clock) -> TenantPolicyCache:
    return TenantPolicyCache(default_ttl_seconds=3600, clock=fake_clock)


@pytest.fixture
def fast_retry() -> RetryPolicy:
    """不等待的重试策略"""
    return RetryPolicy(max_attempts=3, base_delay_ms=0, max_delay_ms=0, jitter_enabled=False)


@pytest.fixture
def summary_settings() -> PolicySummaryConfig:
    return PolicySummaryConfig(summary_timeout_ms=1000)


@pytest.fixture
def make_service(cache, fast_retry, summary_settings) -> Callable[..., Any]:
    """构造隔离的 PolicySummaryService"""
    from policy_digest.policy.service import PolicySummaryService

    def _make(policy_store=None, summary_model=None, **kwargs):
        kwargs.setdefault("cache", cache)
        kwargs.setdefault("settings", summary_settings)
        kwargs.setdefault("retry_policy", fast_retry)
        return PolicySummaryService(
            policy_store=policy_store if policy_store is not None else StaticPolicyStore(),
            summary_model=summary_model,
            **kwargs,
        )

    return _make

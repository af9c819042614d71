"""
Policy Summary 工具

把租户安全策略摘要暴露为 LangChain StructuredTool。

输出在返回前经过 validate_tool_result 校验，校验失败时返回结构化错误
而不是抛出异常。
"""

import logging
import time
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field
from langchain_core.tools import StructuredTool

from policy_digest.errors import to_error_info
from policy_digest.models import SummaryTier
from policy_digest.policy import get_policy_service
from policy_digest.validation import validate_tool_result

logger = logging.getLogger(__name__)

TOOL_NAME = "get_policy_summary"


class PolicySummaryInput(BaseModel):
    """Policy Summary 工具的输入参数"""

    include_cache_stats: Optional[bool] = Field(
        default=False,
        description="是否在结果中附带当前租户的缓存统计"
    )


class PolicySummaryOutput(BaseModel):
    """Policy Summary 工具的输出"""

    success: bool = Field(..., description="是否成功")
    summary: str = Field(default="", description="策略摘要，没有策略时为空")
    tier: SummaryTier = Field(default=SummaryTier.EMPTY, description="产生摘要的降级层级")
    degraded: bool = Field(default=False, description="摘要是否为降级结果")
    from_cache: bool = Field(default=False, description="是否来自缓存")
    tenant_id: Optional[str] = Field(default=None, description="租户 ID")
    duration_ms: float = Field(default=0.0, ge=0, description="耗时（毫秒）")
    cache_stats: Optional[Dict[str, Any]] = Field(default=None, description="缓存统计")
    error: Optional[Dict[str, Any]] = Field(default=None, description="结构化错误")


async def policy_summary_impl(include_cache_stats: bool = False) -> Dict[str, Any]:
    """
    Policy Summary 的实现函数

    Args:
        include_cache_stats: 是否附带缓存统计

    Returns:
        经过校验的 PolicySummaryOutput 字典
    """
    start_time = time.time()

    try:
        service = get_policy_service()
        result = await service.summarize()
    except Exception as e:
        logger.error(f"Policy summary tool failed: {type(e).__name__}: {e}")
        return PolicySummaryOutput(
            success=False,
            duration_ms=(time.time() - start_time) * 1000,
            error=to_error_info(e).model_dump(mode="json"),
        ).model_dump(mode="json")

    raw_output = {
        "success": True,
        "summary": result.text,
        "tier": result.tier.value,
        "degraded": result.tier.is_degraded,
        "from_cache": result.from_cache,
        "tenant_id": result.tenant_id,
        "duration_ms": (time.time() - start_time) * 1000,
    }
    if include_cache_stats:
        raw_output["cache_stats"] = service.get_cache_stats()

    outcome = validate_tool_result(raw_output, PolicySummaryOutput, TOOL_NAME)
    if not outcome.ok:
        return PolicySummaryOutput(
            success=False,
            error=outcome.error.model_dump(mode="json"),
        ).model_dump(mode="json")

    return outcome.data.model_dump(mode="json")


# 创建 LangChain 工具
policy_summary_tool = StructuredTool.from_function(
    coroutine=policy_summary_impl,
    name=TOOL_NAME,
    description="""
获取当前租户的公司安全策略摘要。

使用场景：
- 在回答安全相关问题前获取公司策略背景
- 为其他 AI 流程提供策略上下文

返回：
- summary: 策略摘要（没有策略时为空字符串）
- tier: ai / heuristic / raw_truncated / empty（缓存命中时为原始产生层级）
- degraded: 是否为降级结果（AI 摘要不可用时，缓存命中同样适用）
- from_cache: 是否来自缓存

参数：
- include_cache_stats: 是否附带缓存统计
    """.strip(),
    args_schema=PolicySummaryInput,
)


# 导出
__all__ = [
    "PolicySummaryInput",
    "PolicySummaryOutput",
    "policy_summary_impl",
    "policy_summary_tool",
]

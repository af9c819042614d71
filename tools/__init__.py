"""
Policy Digest 工具模块

提供 LangChain StructuredTool 封装的工具
"""

from .policy_summary import (
    PolicySummaryInput,
    PolicySummaryOutput,
    policy_summary_impl,
    policy_summary_tool,
)

__all__ = [
    "PolicySummaryInput",
    "PolicySummaryOutput",
    "policy_summary_impl",
    "policy_summary_tool",
]

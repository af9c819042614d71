"""
Policy summarization model

Wraps a LangChain chat model behind a small async interface so the summary
service can be tested with a fake model.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from config import Config, get_config, get_config_manager
from policy_digest.errors import ConfigurationError

logger = logging.getLogger(__name__)


SUMMARY_SYSTEM_PROMPT = """You are a Security Policy Summarizer. Your task is to:
1. Read the full company security policy
2. Extract the most important sections and guidance
3. Create a comprehensive yet concise summary that covers all major policy areas

IMPORTANT:
- Include all major policy sections (phishing, passwords, data, incident response, etc.)
- Focus on actionable guidance
- Keep language clear and professional
- Return ONLY plain text summary, no JSON, no markdown formatting
- Make it comprehensive but digestible (2-4 pages equivalent)"""


def build_user_prompt(policy_text: str) -> str:
    """User prompt carrying the (already bounded) policy text."""
    return (
        "COMPANY POLICY (full):\n\n"
        f"{policy_text}\n\n"
        "---\n\n"
        "TASK: Create a comprehensive summary of this entire policy that covers all major "
        "areas and guidance. The summary will be used to provide context to other AI systems."
    )


class SummaryModel(ABC):
    """Text generation backend used for Tier-1 summaries."""

    @abstractmethod
    async def generate(self, system_prompt: str, user_prompt: str, **params: Any) -> str:
        """Return the generated text. May raise or hang."""


class LangChainSummaryModel(SummaryModel):
    """SummaryModel backed by a LangChain BaseChatModel."""

    def __init__(self, llm: BaseChatModel):
        self.llm = llm

    async def generate(self, system_prompt: str, user_prompt: str, **params: Any) -> str:
        response = await self.llm.ainvoke(
            [SystemMessage(content=system_prompt), HumanMessage(content=user_prompt)],
            **params,
        )
        return _message_text(response.content)


def _message_text(content: Any) -> str:
    """Flatten message content (plain string or list of content blocks)."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts)
    return str(content or "")


def build_summary_model(config: Optional[Config] = None) -> LangChainSummaryModel:
    """
    根据配置的 provider 初始化摘要模型（Anthropic 或 OpenAI 兼容）。

    Raises:
        ConfigurationError: 未配置 API 密钥
    """
    config = config or get_config()
    provider = (config.llm.provider or "anthropic").strip().lower()

    if provider == "openai":
        return LangChainSummaryModel(_init_llm_openai(config))
    return LangChainSummaryModel(_init_llm_anthropic(config))


def _init_llm_openai(config: Config) -> BaseChatModel:
    """初始化 OpenAI 兼容 LLM。"""
    from langchain_openai import ChatOpenAI

    api_key = get_config_manager().get_api_key("openai") or config.llm.api_key
    if not api_key or not str(api_key).strip():
        raise ConfigurationError(
            "OpenAI API key not found. Please set OPENAI_API_KEY or PD_OPENAI_API_KEY.",
            details={"provider": "openai"},
        )
    base_url = os.environ.get("OPENAI_BASE_URL") or config.llm.base_url
    kwargs = {
        "model": config.llm.model,
        "temperature": config.policy_summary.temperature,
        "max_tokens": config.llm.max_tokens,
        "api_key": str(api_key).strip(),
        "timeout": config.llm.timeout,
    }
    if base_url and str(base_url).strip():
        kwargs["base_url"] = str(base_url).strip().rstrip("/")
    return ChatOpenAI(**kwargs)


def _init_llm_anthropic(config: Config) -> BaseChatModel:
    """初始化 Anthropic Claude LLM。"""
    from langchain_anthropic import ChatAnthropic

    api_key = get_config_manager().get_api_key("anthropic") or config.llm.api_key
    if not api_key or not str(api_key).strip():
        raise ConfigurationError(
            "Anthropic API key not found. Please set ANTHROPIC_API_KEY or PD_ANTHROPIC_API_KEY.",
            details={"provider": "anthropic"},
        )
    base_url = os.environ.get("ANTHROPIC_BASE_URL") or config.llm.base_url
    if base_url and base_url.rstrip("/").endswith("/v1/messages"):
        base_url = base_url.rstrip("/").rsplit("/v1/messages", 1)[0].rstrip("/") or base_url
    kwargs = {
        "model": config.llm.model,
        "temperature": config.policy_summary.temperature,
        "max_tokens": config.llm.max_tokens,
        "api_key": str(api_key).strip(),
        "timeout": config.llm.timeout,
    }
    if base_url:
        kwargs["base_url"] = base_url
    return ChatAnthropic(**kwargs)


__all__ = [
    "SUMMARY_SYSTEM_PROMPT",
    "build_user_prompt",
    "SummaryModel",
    "LangChainSummaryModel",
    "build_summary_model",
]

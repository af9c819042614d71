"""
摘要模型测试
"""

from unittest.mock import MagicMock, patch

import pytest
from langchain_core.language_models import FakeListChatModel

from config import Config, LLMConfig
from policy_digest.errors import ConfigurationError
from policy_digest.policy import summarizer
from policy_digest.policy.summarizer import (
    SUMMARY_SYSTEM_PROMPT,
    LangChainSummaryModel,
    build_summary_model,
    build_user_prompt,
)


@pytest.fixture
def no_env_keys():
    """让 ConfigManager 找不到任何环境变量中的 API 密钥"""
    manager = MagicMock()
    manager.get_api_key.return_value = None
    with patch.object(summarizer, "get_config_manager", return_value=manager):
        yield manager


class TestPrompts:
    """测试提示词"""

    def test_user_prompt_contains_policy(self):
        prompt = build_user_prompt("Report phishing to security@example.com")
        assert "COMPANY POLICY (full):" in prompt
        assert "Report phishing to security@example.com" in prompt
        assert "TASK:" in prompt

    def test_system_prompt_requests_plain_text(self):
        assert "plain text" in SUMMARY_SYSTEM_PROMPT


class TestLangChainSummaryModel:
    """测试 LangChain 封装"""

    @pytest.mark.asyncio
    async def test_generate_returns_text(self):
        model = LangChainSummaryModel(FakeListChatModel(responses=["Policy summary"]))
        text = await model.generate(SUMMARY_SYSTEM_PROMPT, build_user_prompt("Policy"))
        assert text == "Policy summary"

    def test_message_text_flattens_blocks(self):
        content = [{"type": "text", "text": "Part one. "}, {"type": "tool_use", "id": "x"}, "Part two."]
        assert summarizer._message_text(content) == "Part one. Part two."

    def test_message_text_plain(self):
        assert summarizer._message_text("plain") == "plain"
        assert summarizer._message_text(None) == ""


class TestBuildSummaryModel:
    """测试模型构建"""

    def test_missing_anthropic_key(self, no_env_keys):
        config = Config(llm=LLMConfig(provider="anthropic", api_key=""))
        with pytest.raises(ConfigurationError) as exc_info:
            build_summary_model(config)
        assert exc_info.value.details["provider"] == "anthropic"

    def test_missing_openai_key(self, no_env_keys):
        config = Config(llm=LLMConfig(provider="openai", model="gpt-4o-mini", api_key=""))
        with pytest.raises(ConfigurationError):
            build_summary_model(config)

    def test_anthropic_model(self, no_env_keys, monkeypatch):
        from langchain_anthropic import ChatAnthropic

        monkeypatch.delenv("ANTHROPIC_BASE_URL", raising=False)
        config = Config(llm=LLMConfig(provider="anthropic", api_key="sk-ant-test"))
        model = build_summary_model(config)
        assert isinstance(model, LangChainSummaryModel)
        assert isinstance(model.llm, ChatAnthropic)

    def test_openai_model(self, no_env_keys, monkeypatch):
        from langchain_openai import ChatOpenAI

        monkeypatch.delenv("OPENAI_BASE_URL", raising=False)
        config = Config(llm=LLMConfig(provider="openai", model="gpt-4o-mini", api_key="sk-test"))
        model = build_summary_model(config)
        assert isinstance(model.llm, ChatOpenAI)

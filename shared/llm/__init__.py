"""
LLM Provider Module
===================

Abstraction layer over chat-completion providers.

Supported providers:
- OpenAI GPT

Usage:
    from shared.llm import get_llm_provider

    provider = get_llm_provider()
    analysis = await provider.generate_json(
        prompt=assessment_summary,
        system_prompt="You are a cybersecurity risk analyst.",
        temperature=0.2,
    )
"""

from shared.llm.provider import (
    LLMMessage,
    LLMProvider,
    LLMResponse,
    LLMUsage,
    MessageRole,
    get_llm_provider,
    parse_json_object,
    set_llm_provider,
)


__all__ = [
    "LLMProvider",
    "LLMMessage",
    "LLMResponse",
    "LLMUsage",
    "MessageRole",
    "get_llm_provider",
    "set_llm_provider",
    "parse_json_object",
]

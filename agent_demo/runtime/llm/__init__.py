from .provider import Completion, LLMProvider, ToolCallRequest
from .openai_provider import OpenAIChatProvider

__all__ = ["Completion", "LLMProvider", "OpenAIChatProvider", "ToolCallRequest"]

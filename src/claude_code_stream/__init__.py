"""Claude Code stream translation.

This package adapts the Claude Code agent runtime, driven through the
Claude Agent SDK, to a normalized generation-event protocol with
deterministic text and tool-call lifecycles.
"""

from .cancellation import AbortController, AbortSignal
from .config import ClaudeCodeSettings, PresetSystemPrompt
from .core import (
    CallWarning,
    Event,
    EventType,
    FinishReason,
    FinishSummary,
    Usage,
)
from .encoder import EventEncoder
from .endpoint import GenerateRequest, add_claude_code_fastapi_endpoint
from .errors import (
    AbortError,
    APICallError,
    AuthenticationError,
    ClaudeCodeError,
    InvalidSettingsError,
    NoSuchModelError,
    OversizedInputError,
    RequestTimeoutError,
    StructuredOutputError,
    is_truncation_error,
)
from .injection import MessageInjector
from .mcp import McpToolDefinition, create_custom_mcp_server, create_sdk_mcp_server, tool
from .model import ClaudeCodeLanguageModel, GenerateResult
from .request import CallOptions, ResponseFormat
from .response import EventTranslator, process_stream
from .source import adapt_sdk_stream, from_sdk_message
from .validation import validate_settings

__all__ = [
    # Main class
    "ClaudeCodeLanguageModel",
    "GenerateResult",
    # Endpoint factory
    "add_claude_code_fastapi_endpoint",
    "GenerateRequest",
    "EventEncoder",
    # Configuration
    "ClaudeCodeSettings",
    "PresetSystemPrompt",
    "CallOptions",
    "ResponseFormat",
    "validate_settings",
    # Engine
    "EventTranslator",
    "process_stream",
    "adapt_sdk_stream",
    "from_sdk_message",
    # Events and types
    "Event",
    "EventType",
    "CallWarning",
    "FinishReason",
    "FinishSummary",
    "Usage",
    # Cancellation and injection
    "AbortController",
    "AbortSignal",
    "MessageInjector",
    # MCP tools
    "create_custom_mcp_server",
    "McpToolDefinition",
    "create_sdk_mcp_server",
    "tool",
    # Errors
    "ClaudeCodeError",
    "APICallError",
    "AuthenticationError",
    "RequestTimeoutError",
    "OversizedInputError",
    "StructuredOutputError",
    "NoSuchModelError",
    "InvalidSettingsError",
    "AbortError",
    "is_truncation_error",
]

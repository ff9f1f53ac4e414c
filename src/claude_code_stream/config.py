"""Configuration constants and settings for the Claude Code provider."""

from __future__ import annotations

import os
from typing import Any, Callable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .types import StreamingInputMode

# Tool invocation ceilings (characters of serialized input)
MAX_DELTA_CALC_SIZE = 10_000
MAX_TOOL_INPUT_WARN = 102_400
MAX_TOOL_INPUT_SIZE = 1_048_576

# Accumulated assistant text ceiling
MAX_ACCUMULATED_TEXT_SIZE = 16 * 1024 * 1024

# Prompt ceilings (characters)
PROMPT_WARN_LENGTH = 100_000
MAX_PROMPT_SIZE = 10 * 1024 * 1024

# Buffered characters required before a parse failure counts as truncation
MIN_TRUNCATION_LENGTH = 512

PROMPT_EXCERPT_LENGTH = 200

UNKNOWN_TOOL_NAME = "unknown-tool"

KNOWN_MODELS = ("opus", "sonnet", "haiku")

# Keys of ``sdk_options`` that the provider manages itself
SDK_OPTIONS_BLOCKLIST = frozenset({"model", "prompt", "output_format"})

INJECTION_QUEUE_SIZE = 16

TRUNCATION_WARNING = (
    "Claude Code SDK output ended unexpectedly; returning truncated response "
    "from buffered text. Await upstream fix to avoid data loss."
)
STRUCTURED_FALLBACK_WARNING = (
    "Structured output was requested but the model returned plain text; "
    "returning the buffered text unchanged."
)
UPSTREAM_ERROR_FALLBACK_MESSAGE = "Claude Code CLI returned an error"
STRUCTURED_RETRIES_MESSAGE = (
    "Failed to generate valid structured output after maximum retries. "
    "The model could not produce a response matching the required schema."
)
CAN_USE_TOOL_CONFLICT_MESSAGE = (
    "can_use_tool requires streaming input ('auto' or 'always') and cannot be used "
    "with permission_prompt_tool_name. Remove permission_prompt_tool_name, or remove can_use_tool."
)


def get_log_level() -> str:
    """Return the log level name configured through ``LOGLEVEL``."""
    return os.getenv("LOGLEVEL", "INFO").upper()


class PresetSystemPrompt(BaseModel):
    """The Claude Code preset system prompt, optionally extended."""

    model_config = ConfigDict(extra="forbid")

    type: Literal["preset"] = "preset"
    preset: Literal["claude_code"] = "claude_code"
    append: Optional[str] = None


class ClaudeCodeSettings(BaseModel):
    """Settings applied to every request made by a ``ClaudeCodeLanguageModel``.

    Unknown keys are rejected. Anything the SDK accepts that is not modelled
    here can be passed through ``sdk_options``.
    """

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    cli_path: Optional[str] = None
    cwd: Optional[str] = None
    system_prompt: Optional[Union[str, PresetSystemPrompt]] = None
    append_system_prompt: Optional[str] = None
    max_turns: Optional[int] = Field(default=None, ge=1, le=100)
    max_thinking_tokens: Optional[int] = Field(default=None, gt=0, le=100_000)
    max_budget_usd: Optional[float] = Field(default=None, ge=0)
    permission_mode: Optional[
        Literal["default", "acceptEdits", "plan", "bypassPermissions"]
    ] = None
    permission_prompt_tool_name: Optional[str] = None
    continue_conversation: Optional[bool] = None
    resume: Optional[str] = None
    fork_session: Optional[bool] = None
    allowed_tools: Optional[list[str]] = None
    disallowed_tools: Optional[list[str]] = None
    mcp_servers: Optional[dict[str, Any]] = None
    setting_sources: Optional[list[Literal["user", "project", "local"]]] = None
    add_dirs: Optional[list[str]] = None
    env: Optional[dict[str, str]] = None
    extra_args: Optional[dict[str, Optional[str]]] = None
    include_partial_messages: Optional[bool] = None
    fallback_model: Optional[str] = None
    agents: Optional[dict[str, Any]] = None
    hooks: Optional[dict[str, Any]] = None
    can_use_tool: Optional[Callable[..., Any]] = None
    stderr: Optional[Callable[[str], None]] = None
    streaming_input: StreamingInputMode = StreamingInputMode.AUTO
    on_stream_start: Optional[Callable[..., Any]] = None
    sdk_options: Optional[dict[str, Any]] = None

    @field_validator("cwd")
    @classmethod
    def _cwd_must_exist(cls, value: Optional[str]) -> Optional[str]:
        if value and not os.path.isdir(value):
            raise ValueError("Working directory must exist")
        return value

    def wants_streaming_input(self) -> bool:
        """Whether the prompt is sent as a streaming input channel."""
        if self.streaming_input == StreamingInputMode.ALWAYS:
            return True
        if self.streaming_input == StreamingInputMode.AUTO:
            return self.can_use_tool is not None
        return False

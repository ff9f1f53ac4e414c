"""Builds ``ClaudeAgentOptions`` for a single request."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from claude_agent_sdk import ClaudeAgentOptions

from ..config import CAN_USE_TOOL_CONFLICT_MESSAGE, SDK_OPTIONS_BLOCKLIST, ClaudeCodeSettings, PresetSystemPrompt
from ..errors import InvalidSettingsError

logger = logging.getLogger(__name__)

# Settings copied onto the SDK options unchanged when set
_PASSTHROUGH_SETTINGS = (
    "cli_path",
    "cwd",
    "max_turns",
    "max_thinking_tokens",
    "max_budget_usd",
    "permission_mode",
    "permission_prompt_tool_name",
    "continue_conversation",
    "fork_session",
    "allowed_tools",
    "disallowed_tools",
    "mcp_servers",
    "setting_sources",
    "add_dirs",
    "extra_args",
    "fallback_model",
    "agents",
    "hooks",
    "can_use_tool",
)


def _system_prompt(settings: ClaudeCodeSettings) -> Any:
    if settings.system_prompt is not None:
        if isinstance(settings.system_prompt, PresetSystemPrompt):
            return settings.system_prompt.model_dump(exclude_none=True)
        return settings.system_prompt
    if settings.append_system_prompt is not None:
        logger.warning(
            "'append_system_prompt' is deprecated. Use system_prompt=PresetSystemPrompt(append=...) instead."
        )
        return PresetSystemPrompt(append=settings.append_system_prompt).model_dump(exclude_none=True)
    return None


def _chain_stderr(*callbacks: Optional[Callable[[str], Any]]) -> Callable[[str], None]:
    active = [callback for callback in callbacks if callback is not None]

    def _stderr(data: str) -> None:
        logger.debug(f"[Claude CLI stderr] {data.rstrip()}")
        for callback in active:
            callback(data)

    return _stderr


def build_query_kwargs(
    settings: ClaudeCodeSettings,
    *,
    model: str,
    resume: Optional[str] = None,
    response_schema: Optional[dict[str, Any]] = None,
    stderr_collector: Optional[Callable[[str], Any]] = None,
    sdk_options: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Merge settings and per-call overrides into SDK option kwargs.

    Args:
        settings: Provider settings.
        model: Model id sent to the CLI.
        resume: Session id to resume, if any.
        response_schema: JSON schema for structured output, if requested.
        stderr_collector: Receives every CLI stderr line.
        sdk_options: Per-call SDK overrides, applied over ``settings.sdk_options``.

    Returns:
        Keyword arguments for ``ClaudeAgentOptions``.

    Raises:
        InvalidSettingsError: If ``can_use_tool`` is combined with
            ``permission_prompt_tool_name``.
    """
    merged_kwargs: dict[str, Any] = {
        "model": model,
        "include_partial_messages": True,
    }
    for key in _PASSTHROUGH_SETTINGS:
        value = getattr(settings, key)
        if value is not None:
            merged_kwargs[key] = value

    system_prompt = _system_prompt(settings)
    if system_prompt is not None:
        merged_kwargs["system_prompt"] = system_prompt
    if settings.include_partial_messages is not None:
        merged_kwargs["include_partial_messages"] = settings.include_partial_messages
    if resume or settings.resume:
        merged_kwargs["resume"] = resume or settings.resume

    overrides = {**(settings.sdk_options or {}), **(sdk_options or {})}
    for key in SDK_OPTIONS_BLOCKLIST & overrides.keys():
        logger.warning(f"Ignoring provider-managed sdk option: {key}")
    override_env = overrides.pop("env", None)
    override_stderr = overrides.pop("stderr", None)
    for key, value in overrides.items():
        if key not in SDK_OPTIONS_BLOCKLIST and value is not None:
            merged_kwargs[key] = value

    if settings.env is not None or override_env is not None:
        merged_kwargs["env"] = {**(settings.env or {}), **(override_env or {})}

    merged_kwargs["stderr"] = _chain_stderr(stderr_collector, override_stderr or settings.stderr)

    if response_schema:
        merged_kwargs["output_format"] = {"type": "json_schema", "schema": response_schema}

    if merged_kwargs.get("can_use_tool") and merged_kwargs.get("permission_prompt_tool_name"):
        raise InvalidSettingsError([CAN_USE_TOOL_CONFLICT_MESSAGE])

    logger.debug(f"Merged kwargs: {sorted(merged_kwargs)}")
    return merged_kwargs


def build_query_options(settings: ClaudeCodeSettings, **kwargs: Any) -> ClaudeAgentOptions:
    """Build ``ClaudeAgentOptions``; see ``build_query_kwargs`` for arguments."""
    return ClaudeAgentOptions(**build_query_kwargs(settings, **kwargs))

"""Validation helpers for model ids, settings, prompts and session ids."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from pydantic import ValidationError

from .config import KNOWN_MODELS, PROMPT_WARN_LENGTH, ClaudeCodeSettings
from .errors import NoSuchModelError

_TOOL_NAME_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*(\([^)]*\))?$")
_SESSION_ID_PATTERN = re.compile(r"^[a-zA-Z0-9\-_]+$")


@dataclass
class SettingsValidation:
    """Outcome of ``validate_settings``."""

    valid: bool
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    settings: Optional[ClaudeCodeSettings] = None


def validate_model_id(model_id: str) -> Optional[str]:
    """Validate a model id.

    Returns:
        A warning for unknown ids, else None.

    Raises:
        NoSuchModelError: If the id is empty.
    """
    if not model_id or not model_id.strip():
        raise NoSuchModelError("Model ID cannot be empty")
    if model_id not in KNOWN_MODELS:
        return (
            f"Unknown model ID: '{model_id}'. Proceeding with custom model. "
            f"Known models are: {', '.join(KNOWN_MODELS)}"
        )
    return None


def _unusual_tool_names(tools: list[str], kind: str) -> list[str]:
    return [
        f"Unusual {kind} tool name format: '{tool}'"
        for tool in tools
        if not _TOOL_NAME_PATTERN.match(tool) and not tool.startswith("mcp__")
    ]


def validate_settings(
    settings: Union[ClaudeCodeSettings, dict[str, Any], None],
) -> SettingsValidation:
    """Validate provider settings and collect advisory warnings.

    Args:
        settings: A settings model, a plain dict of settings, or None.

    Returns:
        The validation outcome. ``errors`` is non-empty when ``valid`` is False.
    """
    if settings is None:
        return SettingsValidation(valid=True, settings=ClaudeCodeSettings())

    try:
        parsed = (
            settings
            if isinstance(settings, ClaudeCodeSettings)
            else ClaudeCodeSettings.model_validate(settings)
        )
    except ValidationError as e:
        errors = []
        for issue in e.errors():
            path = ".".join(str(part) for part in issue["loc"])
            errors.append(f"{path}: {issue['msg']}" if path else issue["msg"])
        return SettingsValidation(valid=False, errors=errors)

    warnings: list[str] = []
    if parsed.max_turns and parsed.max_turns > 20:
        warnings.append(
            f"High max_turns value ({parsed.max_turns}) may lead to long-running conversations"
        )
    if parsed.max_thinking_tokens and parsed.max_thinking_tokens > 50_000:
        warnings.append(
            f"Very high max_thinking_tokens ({parsed.max_thinking_tokens}) may increase response time"
        )
    if parsed.allowed_tools and parsed.disallowed_tools:
        warnings.append(
            "Both allowed_tools and disallowed_tools are specified. Only allowed_tools will be used."
        )
    if parsed.allowed_tools:
        warnings.extend(_unusual_tool_names(parsed.allowed_tools, "allowed"))
    if parsed.disallowed_tools:
        warnings.extend(_unusual_tool_names(parsed.disallowed_tools, "disallowed"))
    if parsed.allowed_tools and "Skill" in parsed.allowed_tools and not parsed.setting_sources:
        warnings.append(
            "allowed_tools includes 'Skill' but setting_sources is not set. Skills require "
            "setting_sources (e.g., ['user', 'project']) to load skill definitions."
        )
    if parsed.append_system_prompt is not None and parsed.system_prompt is None:
        warnings.append(
            "'append_system_prompt' is deprecated. Use system_prompt="
            "PresetSystemPrompt(append=...) instead."
        )

    return SettingsValidation(valid=True, warnings=warnings, settings=parsed)


def validate_prompt(prompt: str) -> Optional[str]:
    if len(prompt) > PROMPT_WARN_LENGTH:
        return f"Very long prompt ({len(prompt)} characters) may cause performance issues or timeouts"
    return None


def validate_session_id(session_id: Optional[str]) -> Optional[str]:
    if session_id and not _SESSION_ID_PATTERN.match(session_id):
        return "Unusual session ID format. This may cause issues with session resumption."
    return None

"""Warnings reported on ``stream-start`` for a call."""

from __future__ import annotations

from typing import Any, Optional

from ..core.types import CallWarning
from ..validation import validate_prompt
from .call_options import CallOptions

_UNSUPPORTED_PARAMETERS = (
    ("temperature", "temperature"),
    ("top_p", "topP"),
    ("top_k", "topK"),
    ("presence_penalty", "presencePenalty"),
    ("frequency_penalty", "frequencyPenalty"),
    ("stop_sequences", "stopSequences"),
    ("seed", "seed"),
)


def generate_call_warnings(
    options: CallOptions,
    prompt: str,
    *,
    model_warning: Optional[str] = None,
    settings_warnings: Optional[list[str]] = None,
) -> list[CallWarning]:
    """Collect every warning that applies to a call before it starts.

    Args:
        options: The call options.
        prompt: The prompt text.
        model_warning: Warning produced while validating the model id.
        settings_warnings: Warnings produced while validating settings.

    Returns:
        Warnings in a stable order: unsupported parameters, model, settings,
        response format, prompt.
    """
    warnings: list[CallWarning] = []

    for attribute, feature in _UNSUPPORTED_PARAMETERS:
        value = getattr(options, attribute)
        if value is None or (attribute == "stop_sequences" and not value):
            continue
        warnings.append(
            CallWarning(
                type="unsupported",
                feature=feature,
                details=f"Claude Code SDK does not support the {feature} parameter. It will be ignored.",
            )
        )

    if model_warning:
        warnings.append(CallWarning(type="other", message=model_warning))

    for warning in settings_warnings or []:
        warnings.append(CallWarning(type="other", message=warning))

    response_format = options.response_format
    if response_format is not None and response_format.type == "json" and not response_format.json_schema:
        warnings.append(
            CallWarning(
                type="unsupported",
                feature="responseFormat",
                details=(
                    "JSON response format requires a schema for the Claude Code provider. "
                    "The JSON responseFormat is ignored and the call is treated as plain text."
                ),
            )
        )

    prompt_warning = validate_prompt(prompt)
    if prompt_warning:
        warnings.append(CallWarning(type="other", message=prompt_warning))

    return warnings


def serialize_warnings(warnings: list[CallWarning]) -> list[dict[str, Any]]:
    """Plain-dict form of warnings for response metadata."""
    return [warning.model_dump(exclude_none=True) for warning in warnings]

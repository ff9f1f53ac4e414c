"""Claude Code language model: streaming and non-streaming generation."""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Optional, Union

from claude_agent_sdk import query
from pydantic import Field

from .cancellation import AbortSignal
from .config import MAX_PROMPT_SIZE, ClaudeCodeSettings, get_log_level
from .core.events import PROVIDER_METADATA_KEY, BaseEvent, ErrorEvent
from .core.types import CallWarning, ConfiguredBaseModel, FinishReason, FinishSummary, Usage
from .errors import APICallError, InvalidSettingsError, OversizedInputError, handle_claude_code_error
from .injection import MessageInjector
from .request.call_options import CallOptions
from .request.options_builder import build_query_options
from .request.warnings import generate_call_warnings, serialize_warnings
from .response.event_translator import EventTranslator
from .response.stream_processor import process_stream
from .source import adapt_sdk_stream
from .upstream import UpstreamEvent
from .validation import validate_model_id, validate_session_id, validate_settings

logger = logging.getLogger(__name__)

_package_logger = logging.getLogger(__package__)
if not _package_logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
    _package_logger.addHandler(handler)
    _package_logger.setLevel(getattr(logging, get_log_level(), logging.INFO))


class GenerateResult(ConfiguredBaseModel):
    """
    Aggregated result of a non-streaming generation.
    """
    text: str
    finish_reason: FinishReason
    usage: Usage
    summary: FinishSummary
    warnings: list[CallWarning] = Field(default_factory=list)
    session_id: Optional[str] = None
    structured_output: Any = None
    provider_metadata: dict[str, Any] = Field(default_factory=dict)


class ClaudeCodeLanguageModel:
    """
    Generates text through the Claude Code CLI.

    Each call runs one ``claude_agent_sdk.query`` and translates its messages
    into downstream events. The session id of the last call is resumed by
    the next one unless a resume id is configured.
    """

    def __init__(
        self,
        model_id: str = "sonnet",
        settings: Union[ClaudeCodeSettings, dict[str, Any], None] = None,
    ):
        validation = validate_settings(settings)
        if not validation.valid:
            raise InvalidSettingsError(validation.errors)
        for warning in validation.warnings:
            logger.warning(f"Claude Code settings: {warning}")

        self.model_id = model_id
        self.settings: ClaudeCodeSettings = validation.settings
        self.session_id: Optional[str] = None
        self._settings_warnings = validation.warnings
        self._model_warning = validate_model_id(model_id)
        if self._model_warning:
            logger.warning(f"Claude Code Model: {self._model_warning}")

    def _set_session_id(self, session_id: str) -> None:
        self.session_id = session_id
        warning = validate_session_id(session_id)
        if warning:
            logger.warning(f"Claude Code Session: {warning}")

    def _effective_resume(self, options: CallOptions) -> Optional[str]:
        sdk_resume = (options.sdk_options or {}).get("resume")
        return sdk_resume or self.settings.resume or self.session_id

    async def _upstream(
        self,
        prompt: str,
        options: CallOptions,
        stderr_lines: list[str],
        injector: Optional[MessageInjector],
    ) -> AsyncIterator[UpstreamEvent]:
        if len(prompt) > MAX_PROMPT_SIZE:
            raise OversizedInputError(
                f"Prompt exceeds maximum size of {MAX_PROMPT_SIZE} characters (got {len(prompt)})"
            )

        resume = self._effective_resume(options)
        response_format = options.response_format
        query_options = build_query_options(
            self.settings,
            model=self.model_id,
            resume=resume,
            response_schema=response_format.json_schema if response_format and response_format.is_structured else None,
            stderr_collector=stderr_lines.append,
            sdk_options=options.sdk_options,
        )

        if injector is not None:
            sdk_prompt: Any = injector.prompt_stream(prompt, self.settings.on_stream_start)
        else:
            sdk_prompt = prompt
        logger.debug(
            f"Starting query with streaming input: {injector is not None}, session: {resume or 'new'}"
        )

        events = adapt_sdk_stream(query(prompt=sdk_prompt, options=query_options))
        try:
            async for event in events:
                yield event
        finally:
            await events.aclose()

    def _start(
        self,
        prompt: str,
        options: Optional[CallOptions],
        abort_signal: Optional[AbortSignal],
        streaming: bool,
    ) -> tuple[EventTranslator, list[CallWarning], AsyncIterator[BaseEvent]]:
        options = options or CallOptions()
        warnings = generate_call_warnings(
            options,
            prompt,
            model_warning=self._model_warning,
            settings_warnings=self._settings_warnings,
        )
        json_mode = bool(options.response_format and options.response_format.is_structured)
        logger.debug(f"Starting request with model: {self.model_id}, json mode: {json_mode}")

        injector: Optional[MessageInjector] = None
        if self.settings.wants_streaming_input():
            injector = MessageInjector(session_id=self._effective_resume(options) or "")

        translator = EventTranslator(
            self.model_id,
            json_mode=json_mode,
            streaming=streaming,
            on_terminal=injector.end_session if injector is not None else None,
        )
        stderr_lines: list[str] = []

        def _handle_error(error: BaseException) -> BaseException:
            return handle_claude_code_error(error, prompt, "\n".join(stderr_lines) or None)

        async def _run() -> AsyncIterator[BaseEvent]:
            events = process_stream(
                self._upstream(prompt, options, stderr_lines, injector),
                translator,
                warnings=warnings,
                abort_signal=abort_signal,
                error_handler=_handle_error,
            )
            try:
                async for event in events:
                    yield event
            finally:
                await events.aclose()
                if injector is not None:
                    injector.end_session()
                if translator.state.session_id:
                    self._set_session_id(translator.state.session_id)

        return translator, warnings, _run()

    def stream(
        self,
        prompt: str,
        options: Optional[CallOptions] = None,
        *,
        abort_signal: Optional[AbortSignal] = None,
    ) -> AsyncIterator[BaseEvent]:
        """Stream downstream events for a prompt.

        Args:
            prompt: Prompt text sent to the CLI.
            options: Per-call options.
            abort_signal: Aborts the request; its reason is raised.

        Returns:
            Async iterator of events, starting with ``stream-start`` and
            ending with one ``finish`` or ``error``.
        """
        _, _, events = self._start(prompt, options, abort_signal, streaming=True)
        return events

    async def generate(
        self,
        prompt: str,
        options: Optional[CallOptions] = None,
        *,
        abort_signal: Optional[AbortSignal] = None,
    ) -> GenerateResult:
        """Run a prompt to completion.

        Raises:
            Exception: The error the stream would have reported.
        """
        translator, warnings, events = self._start(prompt, options, abort_signal, streaming=False)
        error: Optional[BaseException] = None
        async for event in events:
            if isinstance(event, ErrorEvent):
                error = event.error or APICallError(event.message)
        if error is not None:
            raise error

        summary = translator.summary
        if summary is None:
            raise APICallError("Claude Code CLI ended without a result")

        if translator.structured_output is not None:
            text = json.dumps(translator.structured_output, separators=(",", ":"), ensure_ascii=False)
        else:
            text = translator.state.full_text

        all_warnings = [*warnings, *summary.warnings]
        metadata: dict[str, Any] = {"session_id": summary.session_id}
        if summary.cost_usd is not None:
            metadata["cost_usd"] = summary.cost_usd
        if summary.duration_ms is not None:
            metadata["duration_ms"] = summary.duration_ms
        if summary.truncated:
            metadata["truncated"] = True
        if all_warnings:
            metadata["warnings"] = serialize_warnings(all_warnings)

        return GenerateResult(
            text=text,
            finish_reason=summary.finish_reason,
            usage=summary.usage,
            summary=summary,
            warnings=all_warnings,
            session_id=summary.session_id,
            structured_output=translator.structured_output,
            provider_metadata={PROVIDER_METADATA_KEY: metadata},
        )

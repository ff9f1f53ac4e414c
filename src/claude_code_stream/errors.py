"""Error types and error classification for the Claude Code provider."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from .config import MIN_TRUNCATION_LENGTH, PROMPT_EXCERPT_LENGTH

logger = logging.getLogger(__name__)

AUTH_ERROR_PATTERNS = (
    "not logged in",
    "authentication",
    "unauthorized",
    "auth failed",
    "please login",
    "claude login",
    "/login",
    "invalid api key",
)

TRUNCATION_INDICATORS = (
    "unexpected end of json input",
    "unexpected end of input",
    "unexpected end of string",
    "unexpected eof",
    "end of file",
    "unterminated string",
    "unterminated string constant",
)

PARSE_ERROR_NAMES = ("syntaxerror", "jsondecodeerror", "clijsondecodeerror")

RETRYABLE_CODES = ("ENOENT", "ECONNREFUSED", "ETIMEDOUT", "ECONNRESET")


class ClaudeCodeError(RuntimeError):
    """Base class for errors raised by this package."""


class APICallError(ClaudeCodeError):
    """The Claude Code CLI call failed.

    Attributes:
        code: Error code reported by the runtime, e.g. ``ECONNREFUSED``.
        exit_code: CLI process exit code, when known.
        stderr: Captured CLI stderr, when available.
        prompt_excerpt: First characters of the prompt that was sent.
        is_retryable: Whether retrying the whole request may succeed.
    """

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        exit_code: Optional[int] = None,
        stderr: Optional[str] = None,
        prompt_excerpt: Optional[str] = None,
        is_retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.exit_code = exit_code
        self.stderr = stderr
        self.prompt_excerpt = prompt_excerpt
        self.is_retryable = is_retryable

    @property
    def metadata(self) -> dict[str, Any]:
        return {
            key: value
            for key, value in {
                "code": self.code,
                "exit_code": self.exit_code,
                "stderr": self.stderr,
                "prompt_excerpt": self.prompt_excerpt,
            }.items()
            if value is not None
        }


class AuthenticationError(ClaudeCodeError):
    """The Claude Code CLI is not authenticated."""

    default_message = "Authentication failed. Please ensure Claude Code SDK is properly authenticated."

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)


class RequestTimeoutError(APICallError):
    """The Claude Code CLI call timed out."""

    def __init__(self, message: str = "Request timed out", *, prompt_excerpt: Optional[str] = None) -> None:
        super().__init__(message, code="TIMEOUT", prompt_excerpt=prompt_excerpt, is_retryable=True)


class UpstreamResultError(Exception):
    """The upstream terminal event flagged the request as failed."""

    def __init__(self, message: str, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class OversizedInputError(ClaudeCodeError):
    """Input exceeds an absolute size ceiling."""


class StructuredOutputError(ClaudeCodeError):
    """The model could not produce output matching the requested schema."""


class NoSuchModelError(ClaudeCodeError):
    """The model id is empty."""


class InvalidSettingsError(ClaudeCodeError, ValueError):
    """The provider settings failed validation."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__(f"Invalid settings: {'; '.join(errors)}")
        self.errors = errors


class AbortError(Exception):
    """Default reason raised when a request is aborted."""

    def __init__(self, message: str = "The operation was aborted") -> None:
        super().__init__(message)


def _unwrap(error: BaseException) -> list[BaseException]:
    """Return the error followed by the errors it wraps."""
    chain: list[BaseException] = []
    current: Optional[BaseException] = error
    while current is not None and current not in chain:
        chain.append(current)
        wrapped = getattr(current, "original_error", None)
        current = wrapped if isinstance(wrapped, BaseException) else current.__cause__
    return chain


def is_parse_error(error: BaseException) -> bool:
    """Whether the error, or an error it wraps, is a JSON parse failure."""
    for candidate in _unwrap(error):
        if isinstance(candidate, json.JSONDecodeError):
            return True
        if type(candidate).__name__.lower() in PARSE_ERROR_NAMES:
            return True
    return False


def _looks_truncated(error: BaseException) -> bool:
    for candidate in _unwrap(error):
        message = str(candidate).lower()
        if any(indicator in message for indicator in TRUNCATION_INDICATORS):
            return True
        # json.loads on a cut document fails at (or one past) its last character
        if isinstance(candidate, json.JSONDecodeError) and candidate.pos >= len(candidate.doc.rstrip()):
            return True
    return False


def is_truncation_error(error: BaseException, buffered_text: str) -> bool:
    """Decide whether a failure means the upstream transport was cut early.

    All three must hold: the error is a parse error, its message (or
    position) indicates the input ended early, and at least
    ``MIN_TRUNCATION_LENGTH`` characters were already buffered.

    Args:
        error: The exception that ended the stream.
        buffered_text: Text or JSON accumulated before the failure.

    Returns:
        True if the stream should be recovered as truncated.
    """
    if not is_parse_error(error):
        return False
    if not buffered_text:
        return False
    if not _looks_truncated(error):
        return False
    return len(buffered_text) >= MIN_TRUNCATION_LENGTH


def is_abort_error(error: BaseException) -> bool:
    if isinstance(error, AbortError):
        return True
    code = getattr(error, "code", None)
    return isinstance(code, str) and code.upper() == "ABORT_ERR"


def handle_claude_code_error(
    error: BaseException, prompt: str, collected_stderr: Optional[str] = None
) -> BaseException:
    """Map a runtime failure onto the package's error types.

    Errors already raised by this package, abort reasons and parse errors
    are returned unchanged.

    Args:
        error: The failure raised while talking to the CLI.
        prompt: The prompt that was sent, used for the excerpt.
        collected_stderr: CLI stderr captured during the request.

    Returns:
        The exception to surface to the caller.
    """
    if isinstance(error, ClaudeCodeError) or is_abort_error(error) or is_parse_error(error):
        return error

    message = str(error)
    logger.debug(f"Classifying Claude Code failure {type(error).__name__}: {message}")
    lowered = message.lower()
    exit_code = getattr(error, "exit_code", None)
    if not isinstance(exit_code, int):
        exit_code = None

    if any(pattern in lowered for pattern in AUTH_ERROR_PATTERNS) or exit_code == 401:
        return AuthenticationError(message or None)

    code = getattr(error, "code", None)
    code = code if isinstance(code, str) else ""
    prompt_excerpt = prompt[:PROMPT_EXCERPT_LENGTH]
    if code == "ETIMEDOUT" or isinstance(error, TimeoutError) or "timeout" in lowered:
        return RequestTimeoutError(message or "Request timed out", prompt_excerpt=prompt_excerpt)

    stderr = getattr(error, "stderr", None)
    if not isinstance(stderr, str) or not stderr:
        stderr = collected_stderr or None

    return APICallError(
        message or "Claude Code SDK error",
        code=code or None,
        exit_code=exit_code,
        stderr=stderr,
        prompt_excerpt=prompt_excerpt,
        is_retryable=code in RETRYABLE_CODES,
    )

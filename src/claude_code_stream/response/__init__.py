"""Translation of upstream agent events into downstream generation events."""

from .event_translator import EventTranslator
from .stream_processor import process_stream
from .structured_output import StructuredOutputHandler
from .text_reconciler import TextReconciler
from .tool_call_handler import ToolCallHandler
from .truncation import TruncationRecoverer

__all__ = [
    "EventTranslator",
    "StructuredOutputHandler",
    "TextReconciler",
    "ToolCallHandler",
    "TruncationRecoverer",
    "process_stream",
]

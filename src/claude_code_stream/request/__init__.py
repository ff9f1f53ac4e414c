"""Request building for Claude Agent SDK queries."""

from .call_options import CallOptions, ResponseFormat
from .options_builder import build_query_kwargs, build_query_options
from .warnings import generate_call_warnings, serialize_warnings

__all__ = [
    "CallOptions",
    "ResponseFormat",
    "build_query_kwargs",
    "build_query_options",
    "generate_call_warnings",
    "serialize_warnings",
]

"""Utility modules for the Video Pipeline Service."""
from .logging import LoggerSetup, CorrelatedLogger, MetricsLogger
from .retry import retry_async, exponential_backoff, linear_backoff, with_timeout
from .text import extract_hashtags, extract_mentions, clean_text, count_words
from .json_extraction import parse_json_with_fallback, parse_json_object, strip_code_fences
from .cookies import build_cookie_header, cookie_names
from .http_client import HttpClient, HttpResponse
from .response_helpers import ResponseHelper

__all__ = [
    "LoggerSetup", "CorrelatedLogger", "MetricsLogger",
    "retry_async", "exponential_backoff", "linear_backoff", "with_timeout",
    "extract_hashtags", "extract_mentions", "clean_text", "count_words",
    "parse_json_with_fallback", "parse_json_object", "strip_code_fences",
    "build_cookie_header", "cookie_names",
    "HttpClient", "HttpResponse", "ResponseHelper",
]

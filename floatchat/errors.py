# floatchat/errors.py
"""
Error taxonomy for calls against the FloatChat API.

Every error carries a short user-facing message plus at least one next step.
Components that talk to the backend catch these and turn them into chat turns
or empty states; the exception objects themselves are never rendered.
"""
from typing import List, Optional


class FloatChatError(Exception):
    default_message = "Something went wrong while talking to the FloatChat service."
    suggestions: List[str] = ["Try again in a moment"]

    def __init__(self, message: Optional[str] = None):
        self.user_message = message or self.default_message
        super().__init__(self.user_message)


class TransportError(FloatChatError):
    default_message = "Could not reach the FloatChat service."
    suggestions = [
        "Check your internet connection",
        "Retry the query in a moment",
    ]


class BackendError(FloatChatError):
    default_message = "Failed to process your query."
    suggestions = [
        "Try rephrasing your question",
        "Check if the query is related to ARGO float data",
        "Use the demo queries below as examples",
    ]

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class FormatError(FloatChatError):
    default_message = "The FloatChat service returned data in an unexpected format."
    suggestions = [
        "Retry the query",
        "Try a simpler question",
    ]


class ConfigError(FloatChatError):
    default_message = "FloatChat API URL is not configured."
    suggestions = [
        "Check the dashboard configuration (FLOATCHAT_API_URL)",
    ]

"""
Response tag errors - every user-visible failure of a tag render.
"""

from __future__ import annotations
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Kind of failure raised while rendering a response tag."""
    NO_REQUEST_SPECIFIED = "NoRequestSpecified"
    REQUEST_NOT_FOUND = "RequestNotFound"
    NO_RESPONSE = "NoResponse"
    RESPONSE_ERROR = "ResponseError"
    INVALID_STATUS = "InvalidStatus"
    MISSING_FILTER = "MissingFilter"
    INVALID_JSON = "InvalidJSON"
    INVALID_QUERY = "InvalidQuery"
    INVALID_QUERY_RESULT = "InvalidQueryResult"


class ResponseTagError(Exception):
    """Terminal failure of a single tag render.

    ``kind`` identifies the failure, ``detail`` carries the offending text
    (request id, parser message, query) when there is one.
    """

    def __init__(self, kind: ErrorKind, message: str, detail: Optional[str] = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.detail = detail

    @classmethod
    def no_request_specified(cls) -> ResponseTagError:
        return cls(ErrorKind.NO_REQUEST_SPECIFIED, "No request specified")

    @classmethod
    def request_not_found(cls, request_id: str) -> ResponseTagError:
        return cls(ErrorKind.REQUEST_NOT_FOUND, f"Could not find request {request_id}", request_id)

    @classmethod
    def no_response(cls) -> ResponseTagError:
        return cls(ErrorKind.NO_RESPONSE, "No responses for request")

    @classmethod
    def response_error(cls, error: str) -> ResponseTagError:
        return cls(ErrorKind.RESPONSE_ERROR, f"Failed to send dependent request {error}", error)

    @classmethod
    def invalid_status(cls, status_code: Optional[int]) -> ResponseTagError:
        return cls(
            ErrorKind.INVALID_STATUS,
            "No successful responses for request",
            None if status_code is None else str(status_code),
        )

    @classmethod
    def missing_filter(cls) -> ResponseTagError:
        return cls(ErrorKind.MISSING_FILTER, "No filter specified")

    @classmethod
    def invalid_json(cls, parser_message: str) -> ResponseTagError:
        return cls(ErrorKind.INVALID_JSON, f"Invalid JSON: {parser_message}", parser_message)

    @classmethod
    def invalid_query(cls, query: str) -> ResponseTagError:
        return cls(ErrorKind.INVALID_QUERY, f"Invalid JSONata expression: {query}", query)

    @classmethod
    def invalid_query_result(cls, query: str, reason: Optional[str] = None) -> ResponseTagError:
        message = f"Invalid JSONata response: {query}"
        if reason:
            message = f"{message} ({reason})"
        return cls(ErrorKind.INVALID_QUERY_RESULT, message, query)

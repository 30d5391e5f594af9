"""
Body extractor - turns a dependency response into a template-insertable string.

Pipeline, short-circuiting on the first failure:

1. query presence gate (``MissingFilter``)
2. charset resolution from the ``Content-Type`` header
3. decoding, falling back to lenient UTF-8 when the charset is unknown or wrong
4. JSON parse (``InvalidJSON``)
5. JSONata compile (``InvalidQuery``)
6. JSONata evaluation (``InvalidQueryResult``)
7. result coercion: strings as-is, JSON ``null`` as ``null``, everything
   else as compact JSON text; no match at all is ``InvalidQueryResult``

The validity gate (``check_response``) runs before any of this.
"""

from __future__ import annotations
import codecs
import json
import logging
import math
import re
from typing import Any, Optional

import jsonata

from ..models.errors import ResponseTagError
from ..models.http import Response

logger = logging.getLogger(__name__)

DEFAULT_CHARSET = "utf-8"

_CHARSET_RE = re.compile(r"charset=([\w-]+)", re.IGNORECASE)

# Largest integer a JavaScript number holds exactly
_MAX_SAFE_INTEGER = 2 ** 53


def check_response(response: Optional[Response]) -> Response:
    """Validity gate; raises unless the response is safe to extract from."""
    if response is None:
        logger.info("[response tag] No response found")
        raise ResponseTagError.no_response()
    if response.error:
        logger.info(f"[response tag] Response error {response.error}")
        raise ResponseTagError.response_error(response.error)
    if not response.status_code:
        logger.info(f"[response tag] Invalid status code {response.status_code}")
        raise ResponseTagError.invalid_status(response.status_code)
    return response


def resolve_charset(content_type: Optional[str], default: str = DEFAULT_CHARSET) -> str:
    """Extract the ``charset=`` token of a Content-Type header."""
    match = _CHARSET_RE.search(content_type or "")
    return match.group(1) if match else default


def decode_body(body: bytes, charset: str) -> str:
    """Decode body bytes, never failing.

    A leading UTF-8 byte order mark is dropped. Unknown or mismatched
    charsets fall back to UTF-8 with replacement characters.
    """
    try:
        codec = codecs.lookup(charset)
        encoding = "utf-8-sig" if codec.name == "utf-8" else codec.name
        return body.decode(encoding)
    except (LookupError, UnicodeDecodeError) as e:
        logger.warning(f"[response tag] Failed to decode body as {charset}: {e}")
        return body.decode("utf-8", errors="replace")


def compile_query(query: str) -> jsonata.Jsonata:
    try:
        return jsonata.Jsonata(query)
    except Exception as e:
        logger.debug(f"JSONata compile failed for {query!r}: {e}")
        raise ResponseTagError.invalid_query(query) from e


def _js_numbers(value: Any) -> Any:
    # Integral floats print like JavaScript numbers: 1.0 -> 1
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"{value} is not a JSON number")
        if value.is_integer() and abs(value) < _MAX_SAFE_INTEGER:
            return int(value)
        return value
    if isinstance(value, dict):
        return {k: _js_numbers(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_js_numbers(v) for v in value]
    return value


def coerce_result(result: Any, query: str) -> str:
    """Convert an evaluation result to the text substituted into the template."""
    if isinstance(result, str):
        return result
    if result is None:
        raise ResponseTagError.invalid_query_result(query, "no value")
    try:
        return json.dumps(
            _js_numbers(result),
            ensure_ascii=False,
            separators=(",", ":"),
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise ResponseTagError.invalid_query_result(query, str(e)) from e


def _reject_constant(token: str) -> Any:
    raise ValueError(f"Unexpected token {token}")


def _is_null(body: Any, query: str) -> bool:
    # None is both JSON null and "no match"; $type tells them apart
    try:
        return compile_query(f"$type(({query}))").evaluate(body) == "null"
    except Exception:
        return False


def match_jsonata(body_text: str, query: str) -> str:
    """Parse ``body_text`` as JSON and evaluate ``query`` against it."""
    try:
        body = json.loads(body_text, parse_constant=_reject_constant)
    except ValueError as e:
        raise ResponseTagError.invalid_json(str(e)) from e

    expression = compile_query(query)

    try:
        result = expression.evaluate(body)
    except Exception as e:
        logger.debug(f"JSONata evaluation failed for {query!r}: {e}")
        raise ResponseTagError.invalid_query_result(query) from e

    if result is None and _is_null(body, query):
        return "null"

    return coerce_result(result, query)


class BodyExtractor:
    """Stateless extraction of a JSONata query result from a response body."""

    def __init__(self, default_charset: str = DEFAULT_CHARSET) -> None:
        self._default_charset = default_charset

    def extract(self, response: Response, query: Optional[str], body: Optional[bytes] = None) -> str:
        query = (query or "").strip()
        if not query:
            raise ResponseTagError.missing_filter()

        charset = resolve_charset(response.content_type, self._default_charset)
        text = decode_body(response.body if body is None else body, charset)
        return match_jsonata(text, query)

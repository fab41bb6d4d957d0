"""
Strict extraction of JSON from free-form model output.

Model output is untrusted text: it may wrap the payload in prose or code
fences. Instead of a greedy regex, scan for balanced JSON objects or arrays
(respecting string literals and escapes) and parse only those.
"""

from __future__ import annotations

from typing import Any, Iterator, Optional

import orjson

from common.errors import ProcessingError

_OPENERS = {"{": "}", "[": "]"}


def iter_json_candidates(text: str) -> Iterator[str]:
    """
    Yield every balanced {...} or [...] substring of text, left to right.
    Brackets inside JSON strings are ignored. The scan always resumes one
    character after the previous opening bracket, so candidates may nest.
    """
    start = 0
    while True:
        begin = _next_opener(text, start)
        if begin is None:
            return
        end = _match_balanced(text, begin)
        if end is not None:
            yield text[begin : end + 1]
        start = begin + 1


def find_first_json(text: str) -> Optional[str]:
    """Return the first balanced {...} or [...] substring of text, or None."""
    return next(iter_json_candidates(text), None)


def _next_opener(text: str, start: int) -> Optional[int]:
    for i in range(start, len(text)):
        if text[i] in _OPENERS:
            return i
    return None


def _match_balanced(text: str, begin: int) -> Optional[int]:
    stack = [_OPENERS[text[begin]]]
    in_string = False
    escaped = False
    for i in range(begin + 1, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in _OPENERS:
            stack.append(_OPENERS[ch])
        elif ch in ("}", "]"):
            if ch != stack.pop():
                return None
            if not stack:
                return i
    return None


def parse_json_payload(text: str) -> Any:
    """
    Parse the first balanced span that is valid JSON. Spans that balance but
    do not parse (prose like "{context}") are skipped.
    """
    last_error: Optional[orjson.JSONDecodeError] = None
    for candidate in iter_json_candidates(text):
        try:
            return orjson.loads(candidate)
        except orjson.JSONDecodeError as e:
            last_error = e

    if last_error is None:
        raise ProcessingError("Model output did not contain a JSON value.")
    raise ProcessingError(f"Model output contained invalid JSON: {last_error}") from last_error

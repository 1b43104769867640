"""
Cleanup of free-form model completions into strict rate tables.

The completion service is an untrusted text producer: replies may be wrapped in
markdown fences, surrounded by commentary, or cut off by the token budget.

Pipeline:
1. sanitize() - strip fences, keep the first "{" through the last "}"
2. repair()   - best-effort fixes for truncated output
3. parse_rate_object() - decode, require a JSON object
4. validate_rate_table() - require every default jurisdiction with a sane rate
"""

import json
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from payroll_gateway.domain.exceptions import IncompleteResponse, MalformedResponse
from payroll_gateway.domain.models import RateTable

# Opening or closing fence, with an optional language tag on the opener
_FENCE_RE = re.compile(r"```[A-Za-z0-9_+-]*[ \t]*\r?\n?")
# Greedy: first "{" through last "}"
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")

_CLOSERS = {"{": "}", "[": "]"}


def sanitize(raw: Optional[str]) -> str:
    """Return the candidate JSON object substring of raw, or "" if there is none"""
    if not raw:
        return ""
    text = _FENCE_RE.sub("", raw)
    match = _OBJECT_RE.search(text)
    return match.group(0) if match else ""


def _scan(text: str) -> Tuple[List[str], Optional[int]]:
    """
    Walk text outside of string literals.

    Returns the stack of unclosed "{"/"[" and the index of the opening quote
    of an unterminated string at the end (None if all strings are closed).
    """
    stack: List[str] = []
    in_string = False
    escaped = False
    quote_start = -1

    for i, ch in enumerate(text):
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
            quote_start = i
        elif ch in _CLOSERS:
            stack.append(ch)
        elif ch in "}]" and stack:
            stack.pop()

    return stack, (quote_start if in_string else None)


def _drop_commas_before_closers(text: str) -> str:
    """Remove "," followed (after whitespace) by "}" or "]", outside string literals"""
    out: List[str] = []
    pending_comma = -1
    in_string = False
    escaped = False

    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            out.append(ch)
            continue

        if ch in "}]" and pending_comma >= 0:
            del out[pending_comma]
        if ch == ",":
            pending_comma = len(out)
        elif not ch.isspace():
            pending_comma = -1
        if ch == '"':
            in_string = True
        out.append(ch)

    return "".join(out)


def repair(candidate: str) -> str:
    """
    Best-effort fixes for a truncated JSON object.

    - drop a dangling unterminated string at the end (and the comma before it)
    - drop trailing commas before a closing brace and at end of text
    - close unbalanced braces, and make sure the text ends with "}"

    Output is not guaranteed to be valid JSON; callers must handle parse errors.
    """
    text = candidate.strip()
    if not text:
        return text

    _, dangling_quote = _scan(text)
    if dangling_quote is not None:
        text = text[:dangling_quote].rstrip()

    text = _drop_commas_before_closers(text)
    text = text.rstrip(", \t\r\n")

    stack, _ = _scan(text)
    text += "".join(_CLOSERS[opener] for opener in reversed(stack))

    if not text.endswith("}"):
        text += "}"
    return text


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite number {name}")


def parse_rate_object(text: str) -> Dict[str, Any]:
    """
    Decode repaired completion text.

    Raises:
        MalformedResponse: empty text, invalid JSON, or not a JSON object
    """
    if not text:
        raise MalformedResponse("No JSON object found in completion")
    try:
        decoded = json.loads(text, parse_constant=_reject_constant)
    except ValueError as e:
        raise MalformedResponse(f"Completion is not valid JSON: {e}") from e
    if not isinstance(decoded, dict):
        raise MalformedResponse(f"Completion decoded to {type(decoded).__name__}, expected object")
    return decoded


def _is_valid_entry(entry: Any) -> bool:
    if not isinstance(entry, dict):
        return False
    name = entry.get("name")
    rate = entry.get("rate")
    if not isinstance(name, str):
        return False
    if isinstance(rate, bool) or not isinstance(rate, (int, float)):
        return False
    return 0 <= rate < 1


def validate_rate_table(decoded: Dict[str, Any], required: Iterable[str]) -> RateTable:
    """
    Check a decoded object covers every required jurisdiction.

    The object is returned unchanged; extra jurisdictions are kept.

    Raises:
        IncompleteResponse: a required code is missing
        MalformedResponse: a required entry is not {name: str, rate: 0 <= number < 1}
    """
    missing = sorted(code for code in required if code not in decoded)
    if missing:
        raise IncompleteResponse(f"Missing required jurisdictions: {', '.join(missing)}")

    bad = sorted(code for code in required if not _is_valid_entry(decoded[code]))
    if bad:
        raise MalformedResponse(f"Invalid rate entries: {', '.join(bad)}")

    return decoded

"""Best-effort conversion of a free-form model reply into a per-mode result.

The gateway is told to answer with JSON but is not guaranteed to. Three tiers,
tried in order:

1. parse_strict      - the whole reply is JSON, as sent or once a wrapping
                       code fence is removed
2. extract_balanced  - the first balanced {...} / [...] substring that parses
3. fallback_result   - mode-specific reading of the raw text

How a parsed value or raw text becomes a result is looked up in the mode table
(relay.prompts.MODE_SPECS). normalize_reply never raises: a reply that defeats
every tier still yields a well-typed result with empty/zero fields.
"""

import json
import re

import structlog

from voicevision.api.schemas import AnalysisMode, AnalysisResult
from voicevision.relay.prompts import get_mode_spec

logger = structlog.get_logger(__name__)

# Language tag: a word ending the fence line, or `json` run straight into the payload
_FENCE_TAG = r"(?:[A-Za-z0-9_+-]*[ \t]*\n|json(?=\s*[\[{]))?"
# Fence wrapping the whole reply
_FENCE_WRAP = re.compile(r"```" + _FENCE_TAG + r"(.*?)```", re.DOTALL)
# Opening fence with no closing one (truncated reply)
_FENCE_OPEN = re.compile(r"```" + _FENCE_TAG)

_CLOSERS = {"{": "}", "[": "]"}
# Candidate spans tried by extract_balanced before giving up
_MAX_CANDIDATES = 64


def strip_code_fence(text: str) -> str:
    """Remove a triple-backtick fence wrapping the whole text, keeping its content."""
    text = text.strip()
    match = _FENCE_WRAP.fullmatch(text)
    if match:
        return match.group(1).strip()
    return _FENCE_OPEN.sub("", text, count=1).strip() if text.startswith("```") else text


def parse_strict(text: str) -> object | None:
    """Tier 1: parse the whole text as JSON. None if it is not JSON."""
    try:
        return json.loads(text)
    # RecursionError: nesting deeper than the decoder can follow
    except (json.JSONDecodeError, ValueError, RecursionError):
        return None


def extract_balanced(text: str, openers: str = "{") -> object | None:
    """Tier 2: parse the first balanced bracketed substring.

    Finds every balanced span in one pass (ignoring brackets inside JSON
    strings), then tries them in order of their opening bracket. Spans opened
    by a bracket outside `openers` still nest but are not tried themselves.

    Args:
        text: Reply text, fences already stripped.
        openers: Opening brackets to consider, e.g. "{" or "{[".

    Returns:
        The first successfully parsed dict/list, or None.
    """
    spans = _balanced_spans(text, openers)
    for start, end in spans[:_MAX_CANDIDATES]:
        value = parse_strict(text[start:end + 1])
        if isinstance(value, (dict, list)):
            return value
    if len(spans) > _MAX_CANDIDATES:
        logger.warning("normalize.candidates_capped", candidates=len(spans), tried=_MAX_CANDIDATES)
    return None


def _balanced_spans(text: str, openers: str) -> list[tuple[int, int]]:
    """(start, end) of each balanced span opened by one of `openers`, sorted by start.

    A closer that does not match the innermost open bracket leaves every
    currently open bracket unbalanced.
    """
    ends = {}
    stack = []
    in_string = False
    escaped = False
    for index, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char in _CLOSERS:
            stack.append((index, _CLOSERS[char]))
        elif not stack:
            # Quotes outside any bracket are prose, not JSON strings
            continue
        elif char == '"':
            in_string = True
        elif char in "}]":
            start, closer = stack.pop()
            if char != closer:
                stack.clear()
            elif text[start] in openers:
                ends[start] = index
    return sorted(ends.items())


def coerce_result(mode: AnalysisMode, value: dict | list) -> AnalysisResult:
    """Build the mode's result from parsed JSON, defaulting bad or missing fields."""
    return get_mode_spec(mode).coerce(value)


def fallback_result(mode: AnalysisMode, text: str) -> AnalysisResult:
    """Tier 3: read the raw reply as the answer itself."""
    return get_mode_spec(mode).fallback(text.strip())


def normalize_reply(mode: AnalysisMode, content: str | None) -> AnalysisResult:
    """Turn a gateway reply into the result shape for `mode`.

    Args:
        mode: Analysis mode the request was made in.
        content: Assistant message text; None is treated as an empty reply.

    Returns:
        ObjectsResult, TextResult or SceneResult. Never raises.
    """
    spec = get_mode_spec(mode)

    def usable(value: object) -> bool:
        return isinstance(value, dict) or (spec.accepts_array and isinstance(value, list))

    text = (content or "").strip()
    value = parse_strict(text)
    tier = "strict"
    if not usable(value):
        text = strip_code_fence(text)
        value = parse_strict(text)
        tier = "fenced"
    if not usable(value):
        value = extract_balanced(text, "{[" if spec.accepts_array else "{")
        tier = "balanced"
    if not usable(value):
        logger.warning("normalize.fallback", mode=mode.value, reply_len=len(text))
        return spec.fallback(text)

    logger.debug("normalize.parsed", mode=mode.value, tier=tier)
    return spec.coerce(value)

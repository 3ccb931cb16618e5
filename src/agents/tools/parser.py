"""
Response-to-tool-call parser

Stages, in order:
1. response-format leakage: the model echoed {"tool", "parameters", "response"};
   only the call part is kept
2. fenced ```json blocks holding {"tool", "parameters"}
3. inline {"tool": ..., "parameters": {...}} objects in prose (only when 1-2 found nothing)
4. fallback rules from heuristics (only when nothing was found and intent/query are given)
"""

import json
import re
from typing import List, Optional

from loguru import logger

from src.agents.assistant.intent import Intent
from src.agents.tools.heuristics import apply_fallback_rules
from src.agents.tools.models import ToolCall, tool_call_from_json

INSTRUCTIONAL_PHRASES = (
    "I'll use",
    "I'll retrieve",
    "Please wait",
    "Here's the tool call:",
    "tool call:",
    "I'll execute",
)
# Instructional responses containing these are explaining a call, not making one
FENCED_EXAMPLE_MARKERS = ("Here's the tool call:", "I'll use", "tool call:")
INLINE_EXAMPLE_MARKERS = ("Here's the tool call:", "I'll use")

LEAKED_CALL_PATTERN = re.compile(r'\{\s*"tool":\s*"([^"]+)"\s*,\s*"parameters":\s*(\{[^}]*\})')
FENCED_JSON_PATTERN = re.compile(r"```json\n([\s\S]*?)\n```")
INLINE_CALL_PATTERNS = (
    re.compile(r'\{\s*"tool":\s*"([^"]+)"\s*,\s*"parameters":\s*\{[^}]*\}\s*\}'),
    re.compile(r'\{\s*"tool":\s*"([^"]+)"\s*,\s*"parameters":\s*\{[\s\S]*?\}\s*\}'),
)


def is_instructional(response: str) -> bool:
    return any(phrase in response for phrase in INSTRUCTIONAL_PHRASES)


def extract_leaked_call(response: str) -> List[ToolCall]:
    """Stage 1: pull the call out of an echoed expected-output object"""
    if '"tool":' not in response or '"response":' not in response:
        return []

    logger.warning("⚠️  Response contains tool response format, extracting the call part only")
    match = LEAKED_CALL_PATTERN.search(response)
    if not match:
        return []
    try:
        parameters = json.loads(match.group(2))
    except json.JSONDecodeError as e:
        logger.error(f"❌ Failed to parse leaked tool call parameters: {e}")
        return []
    return [ToolCall(name=match.group(1), parameters=parameters)]


def extract_fenced_calls(response: str) -> List[ToolCall]:
    """Stage 2: calls inside ```json fences"""
    blocks = FENCED_JSON_PATTERN.findall(response)
    if not blocks:
        return []

    if is_instructional(response) and any(marker in response for marker in FENCED_EXAMPLE_MARKERS):
        logger.warning(f"⚠️  Skipping {len(blocks)} JSON block(s) in instructional response")
        return []

    calls: List[ToolCall] = []
    for block in blocks:
        try:
            parsed = json.loads(block.strip())
        except json.JSONDecodeError as e:
            logger.error(f"❌ Failed to parse JSON block: {e}")
            continue

        if isinstance(parsed, dict) and "response" in parsed:
            logger.warning("⚠️  Skipping JSON block with response field")
            continue

        call = tool_call_from_json(parsed)
        if call is not None:
            logger.debug(f"✅ Tool call found in JSON block: {call.name}")
            calls.append(call)
    return calls


def extract_inline_calls(response: str) -> List[ToolCall]:
    """Stage 3: bare JSON call objects embedded in prose"""
    if is_instructional(response) and any(marker in response for marker in INLINE_EXAMPLE_MARKERS):
        logger.warning("⚠️  Skipping inline matches in instructional response")
        return []

    calls: List[ToolCall] = []
    seen = set()
    for pattern in INLINE_CALL_PATTERNS:
        for match in pattern.finditer(response):
            text = match.group(0)
            if text in seen:
                continue
            seen.add(text)

            if '"response"' in text:
                logger.warning("⚠️  Skipping inline match with response field")
                continue
            try:
                parsed = json.loads(text)
            except json.JSONDecodeError as e:
                logger.error(f"❌ Failed to parse inline tool call: {e}")
                continue

            call = tool_call_from_json(parsed)
            if call is not None:
                logger.debug(f"✅ Inline tool call found: {call.name}")
                calls.append(call)
    return calls


def parse(response: str, intent: Optional[Intent] = None, query: Optional[str] = None) -> List[ToolCall]:
    """
    Extract tool calls from a model response.

    Pure: the same input always yields the same calls, in discovery order.

    Args:
        response: Raw model output
        intent: Classified intent of the query (enables fallback rules)
        query: Original user query (enables fallback rules)

    Returns:
        Parsed and synthesized calls (not yet validated)
    """
    if is_instructional(response):
        logger.debug("Response appears to be instructional, limiting tool call extraction")

    calls = extract_leaked_call(response)
    calls.extend(extract_fenced_calls(response))

    if not calls:
        calls.extend(extract_inline_calls(response))

    if not calls and intent is not None and query:
        calls.extend(apply_fallback_rules(response, intent, query))

    logger.info(f"🎯 Parsed {len(calls)} tool call(s): {[c.name for c in calls]}")
    return calls

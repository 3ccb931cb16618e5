"""
Instruction matcher

Scores stored instructions against a live event using the pattern library.
Confidence is binary: MATCH_CONFIDENCE when a pattern matches and the event
is the one the pattern reacts to, 0 otherwise.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from src.agents.proactive.events import ProactiveEvent
from src.agents.proactive.extractors import EXTRACTORS
from src.agents.proactive.patterns import INSTRUCTION_PATTERNS, MATCH_CONFIDENCE
from src.services.protocols import InstructionRecord


@dataclass
class InstructionMatch:
    instruction: InstructionRecord
    confidence: float = 0.0
    extracted_params: Dict[str, Any] = field(default_factory=dict)
    pattern: Optional[str] = None

    @property
    def action(self) -> Optional[str]:
        return self.extracted_params.get("action")


def match_instruction(instruction: InstructionRecord, event: ProactiveEvent) -> InstructionMatch:
    """
    Score one instruction against one event.

    Every pattern is tested and a later match overwrites an earlier one, so
    an instruction that reads as several families keeps the last. A
    family without an extractor still matches but leaves the params of the
    previous match untouched.
    """
    result = InstructionMatch(instruction=instruction)
    if not instruction.is_active:
        return result

    text = instruction.instruction.lower()
    for entry in INSTRUCTION_PATTERNS:
        if not entry.pattern.search(text) or not entry.applies_to(event.event, event.service):
            continue
        result.confidence = MATCH_CONFIDENCE
        result.pattern = entry.name
        extractor = EXTRACTORS.get(entry.name)
        if extractor is not None:
            result.extracted_params = extractor(instruction.instruction, event.data)

    return result


def match_all(event: ProactiveEvent, instructions: Sequence[InstructionRecord]) -> List[InstructionMatch]:
    """Matches with non-zero confidence, highest first (stable for ties)"""
    matches = [match_instruction(i, event) for i in instructions if i.is_active]
    matches = [m for m in matches if m.confidence > 0]
    matches.sort(key=lambda m: m.confidence, reverse=True)
    logger.info(f"📋 {len(matches)} instruction(s) matched {event.event}/{event.service}")
    return matches

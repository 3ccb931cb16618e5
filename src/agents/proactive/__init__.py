"""
Proactive agent - events, instruction patterns and matching

ProactiveAgent is imported from src.agents.proactive.agent directly.
"""

from src.agents.proactive.events import ProactiveEvent, parse_sender
from src.agents.proactive.matcher import InstructionMatch, match_all, match_instruction
from src.agents.proactive.patterns import INSTRUCTION_PATTERNS, MATCH_CONFIDENCE, InstructionPattern

__all__ = [
    "ProactiveEvent",
    "parse_sender",
    "InstructionMatch",
    "match_all",
    "match_instruction",
    "INSTRUCTION_PATTERNS",
    "MATCH_CONFIDENCE",
    "InstructionPattern",
]

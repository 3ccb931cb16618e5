"""
Intent classification

Keyword scoring over a fixed category table plus phrase/regex boosts.
The tables are data so tests can enumerate them directly.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Pattern, Tuple

# Category -> keywords. Iteration order is the tie-break order: on equal
# scores the category listed first wins.
INTENT_KEYWORDS: Dict[str, List[str]] = {
    "question": ["who", "what", "when", "where", "why", "how", "which", "?"],
    "action": ["schedule", "send", "create", "add", "update", "delete", "call", "email", "book"],
    "search": ["find", "search", "lookup", "show", "list", "get", "all", "contacts", "display", "view"],
    "analysis": ["analyze", "compare", "review", "summarize", "report"],
    "creative": ["write", "compose", "draft", "generate"],
    "meeting": ["meeting", "schedule", "calendar", "appointment", "book", "call", "meet"],
    "instruction": ["when", "if", "whenever", "every time", "please always", "from now on", "in the future", "going forward"],
    "notes": ["notes", "note", "history", "details", "information about", "tell me about", "what do you know about"],
    "all_contacts_notes": ["all contacts notes", "show all contacts notes", "contacts with notes", "all notes", "everyone notes"],
}

CONTACT_LISTING_PHRASES: Tuple[str, ...] = (
    "all contacts", "show contacts", "list contacts", "get contacts", "display contacts", "view contacts",
    "show all contacts", "list all contacts", "get all contacts", "display all contacts", "view all contacts",
    "contacts list", "contact list", "my contacts", "hubspot contacts", "show me contacts",
    "show me all contacts", "list my contacts", "get my contacts", "display my contacts", "view my contacts",
)

CONTACT_NOTES_PHRASES: Tuple[str, ...] = (
    "show notes for", "get notes for", "notes for", "contact notes", "tell me about",
    "what do you know about", "information about", "history for", "details for", "show details for",
)

ALL_CONTACTS_NOTES_PHRASES: Tuple[str, ...] = (
    "all contacts notes", "show all contacts notes", "all contacts with notes", "contacts with notes",
    "show me all notes", "get all notes", "list all contacts notes", "display all contacts notes",
    "show all notes for contacts", "get notes for all contacts",
)

CONDITIONAL_INSTRUCTION_PATTERNS: Tuple[Pattern, ...] = tuple(re.compile(p, re.IGNORECASE) for p in (
    r"when\s+someone\s+emails",
    r"if\s+.*\s+emails",
    r"whenever\s+.*\s+contact",
    r"every\s+time\s+.*\s+happens",
    r"please\s+(always|create|add)",
    r"from\s+now\s+on",
))

MEETING_WITH_PERSON_PATTERN = re.compile(r"(meet|schedule|book).*with.*\b([a-z]+ [a-z]+)\b", re.IGNORECASE)


@dataclass(frozen=True)
class IntentBoost:
    """A bonus added to one category when any phrase or pattern matches."""
    name: str
    category: str
    amount: int
    phrases: Tuple[str, ...] = ()
    patterns: Tuple[Pattern, ...] = ()
    marks_contact_query: bool = False

    def matches(self, query_lower: str) -> bool:
        if any(phrase in query_lower for phrase in self.phrases):
            return True
        return any(pattern.search(query_lower) for pattern in self.patterns)


INTENT_BOOSTS: Tuple[IntentBoost, ...] = (
    IntentBoost("conditional_instruction", "instruction", 5, patterns=CONDITIONAL_INSTRUCTION_PATTERNS),
    IntentBoost("contact_listing", "search", 5, phrases=CONTACT_LISTING_PHRASES, marks_contact_query=True),
    IntentBoost("contact_notes", "notes", 3, phrases=CONTACT_NOTES_PHRASES),
    IntentBoost("all_contacts_notes", "all_contacts_notes", 5, phrases=ALL_CONTACTS_NOTES_PHRASES),
    IntentBoost("meeting_with_person", "meeting", 3, patterns=(MEETING_WITH_PERSON_PATTERN,)),
)

GENERAL_INTENT = "general"
MIN_CONFIDENCE = 0.1


@dataclass
class Intent:
    """Best-guess intent of one query"""
    type: str
    confidence: float
    keywords: List[str] = field(default_factory=list)
    is_contact_query: bool = False
    contact_query_type: Optional[str] = None
    is_conditional_instruction: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "confidence": self.confidence,
            "keywords": list(self.keywords),
            "isContactQuery": self.is_contact_query,
            "contactQueryType": self.contact_query_type,
            "isConditionalInstruction": self.is_conditional_instruction,
        }


def score_intents(query: str) -> Tuple[Dict[str, int], bool]:
    """
    Raw category scores for a query.

    Returns:
        (scores keyed by category in table order, whether a contact-listing phrase matched)
    """
    query_lower = query.lower()
    scores = {
        category: sum(1 for keyword in keywords if keyword in query_lower)
        for category, keywords in INTENT_KEYWORDS.items()
    }

    is_contact_query = False
    for boost in INTENT_BOOSTS:
        if boost.matches(query_lower):
            scores[boost.category] += boost.amount
            if boost.marks_contact_query:
                is_contact_query = True

    return scores, is_contact_query


def classify(query: str) -> Intent:
    """
    Classify a query into a single intent.

    The winning category is the first one (in INTENT_KEYWORDS order) holding
    the maximum score. Confidence is max score over word count, capped at 1.0;
    a query that matches nothing is "general" with confidence 0.1.

    Args:
        query: Free-form user text

    Returns:
        Intent with flags used by routing and the parser
    """
    scores, is_contact_query = score_intents(query)
    max_score = max(scores.values())

    if max_score == 0:
        intent_type = GENERAL_INTENT
        confidence = MIN_CONFIDENCE
        keywords: List[str] = []
    else:
        intent_type = next(category for category, score in scores.items() if score == max_score)
        word_count = len(query.lower().split(" "))
        confidence = min(1.0, max_score / word_count)
        keywords = list(INTENT_KEYWORDS[intent_type])

    return Intent(
        type=intent_type,
        confidence=confidence,
        keywords=keywords,
        is_contact_query=is_contact_query,
        contact_query_type="get_all_contacts" if is_contact_query else None,
        is_conditional_instruction=intent_type == "instruction",
    )

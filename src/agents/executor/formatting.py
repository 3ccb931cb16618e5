"""
Human-readable summaries of executor results (contacts, notes, time slots)
"""

from collections import OrderedDict
from datetime import date
from typing import Any, Dict, List, Optional

from src.utils.dates import parse_iso_datetime

NOTE_PREVIEW_CHARS = 100
MAX_SLOTS_SHOWN = 10


def contact_name(contact: Dict[str, Any]) -> str:
    props = contact.get("properties") or {}
    return f"{props.get('firstname') or ''} {props.get('lastname') or ''}".strip()


def contact_email(contact: Dict[str, Any]) -> Optional[str]:
    return (contact.get("properties") or {}).get("email") or None


def flatten_contact(contact: Dict[str, Any]) -> Dict[str, Any]:
    props = contact.get("properties") or {}
    return {
        "id": contact.get("id"),
        "name": contact_name(contact),
        "email": props.get("email") or "",
        "phone": props.get("phone") or "",
        "company": props.get("company") or "",
    }


def flatten_note(note: Dict[str, Any]) -> Dict[str, Any]:
    props = note.get("properties") or {}
    return {
        "id": note.get("id"),
        "content": props.get("hs_note_body") or "",
        "createdAt": props.get("createdate") or note.get("createdAt"),
    }


def _note_date(value: Any) -> str:
    parsed = parse_iso_datetime(value)
    return parsed.strftime("%m/%d/%Y") if parsed else "Unknown date"


def format_contacts(contacts: List[Dict[str, Any]]) -> str:
    lines = []
    for index, contact in enumerate(contacts, 1):
        lines.append(
            f"{index}. {contact['name'] or 'No name'}\n"
            f"   📧 {contact['email'] or 'No email'}\n"
            f"   🏢 {contact['company'] or 'No company'}\n"
            f"   📞 {contact['phone'] or 'No phone'}"
        )
    return "\n\n".join(lines)


def format_contacts_with_notes(
    with_notes: List[Dict[str, Any]],
    without_notes: List[Dict[str, Any]],
    total_fetched: int,
    include_without_notes: bool,
) -> str:
    if not with_notes:
        summary = f"📋 **Contact Summary**\n\nYou have {total_fetched} contacts, but none have notes yet.\n\n"
        if include_without_notes and without_notes:
            summary += "**Contacts without notes:**\n"
            for index, contact in enumerate(without_notes[:10], 1):
                summary += f"{index}. **{contact['name'] or 'No name'}**\n   📧 {contact['email']}\n   🏢 {contact['company']}\n\n"
            if len(without_notes) > 10:
                summary += f"... and {len(without_notes) - 10} more contacts\n"
        return summary

    summary = f"📋 **Contacts with Notes** ({len(with_notes)} of {total_fetched} total contacts)\n\n"
    for index, contact in enumerate(with_notes, 1):
        summary += (
            f"{index}. **{contact['name'] or 'No name'}**\n   📧 {contact['email']}\n"
            f"   🏢 {contact['company']}\n   📝 **{len(contact['notes'])} note(s):**\n"
        )
        for note_index, note in enumerate(contact["notes"], 1):
            content = note["content"]
            preview = content[:NOTE_PREVIEW_CHARS] + "..." if len(content) > NOTE_PREVIEW_CHARS else content
            summary += f"      {note_index}. {preview} ({_note_date(note['createdAt'])})\n"
        summary += "\n"

    if include_without_notes and without_notes:
        summary += f"\n📋 **Contacts without notes** ({len(without_notes)}):\n"
        for index, contact in enumerate(without_notes[:5], 1):
            summary += f"{index}. {contact['name'] or 'No name'} ({contact['email']})\n"
        if len(without_notes) > 5:
            summary += f"... and {len(without_notes) - 5} more\n"
    return summary


def format_contact_notes(contact: Dict[str, Any], notes: List[Dict[str, Any]]) -> str:
    header = (
        "📋 Contact Details:\n"
        f"👤 Name: {contact['name'] or 'No name'}\n"
        f"📧 Email: {contact['email'] or 'No email'}\n"
        f"📞 Phone: {contact['phone'] or 'No phone'}\n"
        f"🏢 Company: {contact['company'] or 'No company'}\n\n"
        f"📝 Notes ({len(notes)}):\n"
    )
    if not notes:
        return header + "No notes found for this contact."
    return header + "\n".join(
        f"{index}. {note['content']} ({_note_date(note['createdAt'])})" for index, note in enumerate(notes, 1)
    )


def format_availability(slots: List[Dict[str, Any]], target: Optional[date] = None, requested: Optional[str] = None) -> str:
    """Slots grouped by day, at most MAX_SLOTS_SHOWN of them"""
    label = requested or (target.strftime("%A, %B %d, %Y") if target else None)
    if not slots:
        if label:
            return (
                f"❌ **No availability found for {label}**\n\n"
                "You appear to be fully booked on this date. Consider checking adjacent dates or shorter time slots."
            )
        return (
            "❌ **No availability found**\n\n"
            "Your calendar appears to be fully booked. Consider checking specific dates or shorter time slots."
        )

    shown = slots[:MAX_SLOTS_SHOWN]
    by_day: "OrderedDict[date, List[Any]]" = OrderedDict()
    total_minutes = 0
    for slot in shown:
        start = parse_iso_datetime(slot.get("start"))
        end = parse_iso_datetime(slot.get("end"))
        if start is None or end is None:
            continue
        by_day.setdefault(start.date(), []).append((start, end))
        total_minutes += int((end - start).total_seconds() // 60)

    response = f"📅 **Your availability for {label}**\n\n" if label else "📅 **Your upcoming availability**\n\n"
    for day, day_slots in by_day.items():
        response += f"**{day.strftime('%A, %b %d')}:**\n"
        for index, (start, end) in enumerate(sorted(day_slots), 1):
            minutes = int((end - start).total_seconds() // 60)
            response += f"   {index}. {start.strftime('%I:%M %p').lstrip('0')} - {end.strftime('%I:%M %p').lstrip('0')} ({minutes} min)\n"
        response += "\n"

    plural = "s" if len(shown) != 1 else ""
    response += f"📊 **Summary:** {len(shown)} available slot{plural} totaling {total_minutes} minutes\n"
    if len(slots) > len(shown):
        response += f"({len(slots) - len(shown)} more slots not shown)\n"
    response += "💡 Ready to schedule a meeting? Just let me know your preferred time!"
    return response

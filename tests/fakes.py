"""
In-memory stand-ins for Gmail, Calendar, HubSpot, document search and the LLM
"""

from typing import Any, Dict, List, Optional


def hubspot_contact(contact_id: str, first: str, last: str, email: str, company: str = "", phone: str = "") -> Dict[str, Any]:
    return {
        "id": contact_id,
        "properties": {"firstname": first, "lastname": last, "email": email, "company": company, "phone": phone},
    }


class FakeGmail:
    def __init__(self, fail: bool = False):
        self.sent: List[Dict[str, Any]] = []
        self.fail = fail

    async def send_email(self, user_id, to, subject, body, cc=None, bcc=None, thread_id=None):
        if self.fail:
            raise RuntimeError("Gmail API unavailable")
        message = {"id": f"msg-{len(self.sent) + 1}", "to": to, "subject": subject, "body": body, "threadId": thread_id}
        self.sent.append(message)
        return {"id": message["id"]}


class FakeCalendar:
    def __init__(self, slots: Optional[List[Dict[str, Any]]] = None, meetings: Optional[List[Dict[str, Any]]] = None):
        self.created: List[Dict[str, Any]] = []
        self.slots = slots or []
        self.meetings = meetings or []
        self.searches: List[Dict[str, Any]] = []

    async def create_event(self, user_id, event_data):
        event = {"id": f"evt-{len(self.created) + 1}", **event_data}
        self.created.append(event)
        return {"id": event["id"]}

    async def search_events(self, user_id, query, time_min=None, max_results=5):
        self.searches.append({"query": query, "time_min": time_min, "max_results": max_results})
        return list(self.meetings)[:max_results]

    async def get_available_time_slots(self, user_id, duration_minutes=60):
        return list(self.slots)


class FakeHubSpot:
    def __init__(self, contacts: Optional[List[Dict[str, Any]]] = None, notes: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.contacts = list(contacts or [])
        self.notes = dict(notes or {})
        self.created: List[Dict[str, Any]] = []
        self.added_notes: List[Dict[str, Any]] = []

    async def search_contacts(self, user_id, query):
        needle = (query or "").lower()
        hits = []
        for contact in self.contacts:
            props = contact["properties"]
            name = f"{props.get('firstname', '')} {props.get('lastname', '')}".lower()
            if needle and (needle in name or needle == (props.get("email") or "").lower()):
                hits.append(contact)
        return hits

    async def create_contact(self, user_id, contact_data):
        contact = {"id": f"c-new-{len(self.created) + 1}", "properties": dict(contact_data)}
        self.created.append(contact)
        self.contacts.append(contact)
        return {"id": contact["id"], "properties": contact["properties"]}

    async def add_note(self, user_id, contact_id, note):
        entry = {"id": f"note-{len(self.added_notes) + 1}", "contactId": contact_id, "note": note}
        self.added_notes.append(entry)
        return {"id": entry["id"]}

    async def get_contacts(self, user_id, limit=100, offset=0, properties=None):
        page = self.contacts[offset:offset + limit]
        return {"contacts": page, "total": len(self.contacts), "hasMore": offset + limit < len(self.contacts)}

    async def get_contact_notes(self, user_id, contact_id):
        return list(self.notes.get(contact_id, []))


class FakeDocuments:
    def __init__(self, hits: Optional[List[Dict[str, Any]]] = None, fail: bool = False):
        self.hits = hits or []
        self.fail = fail
        self.calls: List[Dict[str, Any]] = []

    async def search_similar_documents(self, user_id, query, limit=5, filters=None):
        self.calls.append({"user_id": user_id, "query": query, "limit": limit, "filters": filters})
        if self.fail:
            raise RuntimeError("vector store offline")
        return list(self.hits)


class FakeLLM:
    """Returns scripted responses in order (the last one repeats)"""

    def __init__(self, *responses: str, error: Optional[Exception] = None):
        self.responses = list(responses) or [""]
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def generate_response(self, messages, temperature=0.7):
        self.calls.append({"messages": list(messages), "temperature": temperature})
        if self.error is not None:
            raise self.error
        index = min(len(self.calls) - 1, len(self.responses) - 1)
        return self.responses[index]

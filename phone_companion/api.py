"""
FastAPI backend for Phone Companion.

Local, read-mostly endpoints for a front end: decode conversation records
forwarded from the bus, label numbers from the synced contacts, validate
recipients, and run the cross-process notification check.

IMPORTANT: This API never talks to the phone-sync daemon itself. Records
are posted by the caller in their JSON transport form (see
``Variant.from_json_record``).
"""

from __future__ import annotations

import os
from dataclasses import asdict
from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from phone_companion.config import get_config
from phone_companion.contacts import ContactLookup
from phone_companion.notifications import (
    should_show_file_notification,
    should_show_sms_notification,
)
from phone_companion.sms.messages import list_thread, summarize
from phone_companion.sms.normalizers import canonicalize, is_valid_address
from phone_companion.sms.variant import Variant


class RecordBatch(BaseModel):
    """
    Positional SMS records in JSON form.

    Entries are not validated here: a malformed record is dropped by the
    decoder without affecting the rest of the batch.
    """

    records: List[Any]


class SmsNotification(BaseModel):
    thread_id: int
    date: int


class FileNotification(BaseModel):
    url: str


def _decode_batch(batch: RecordBatch) -> List[Variant]:
    """Convert posted records to Variants."""
    return [Variant.from_json_record(record) for record in batch.records]


def _load_contacts(device_id: str) -> ContactLookup:
    return ContactLookup.load_for_device(device_id, get_config())


app = FastAPI(
    title="Phone Companion API",
    version="0.1.0",
    description="Local companion API over synced SMS records and contacts.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        os.getenv("PHONE_COMPANION_ALLOWED_ORIGIN", "http://127.0.0.1:5173"),
        "http://localhost:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> Dict[str, Any]:
    return {"status": "ok"}


@app.post("/conversations/summary")
def conversation_summary(batch: RecordBatch) -> List[Dict[str, Any]]:
    """Conversation list, most recent first."""
    records = _decode_batch(batch)
    return [asdict(summary) for summary in summarize(records, get_config().max_conversations)]


@app.post("/conversations/{thread_id}")
def conversation_messages(thread_id: int, batch: RecordBatch) -> List[Dict[str, Any]]:
    """One thread's messages, oldest first."""
    records = _decode_batch(batch)
    return [
        {
            "body": msg.body,
            "address": msg.address,
            "date": msg.date,
            "direction": msg.direction.value,
            "read": msg.read,
            "thread_id": msg.thread_id,
        }
        for msg in list_thread(records, thread_id)
    ]


@app.get("/devices/{device_id}/contacts")
def search_contacts(
    device_id: str,
    q: str = Query(default=""),
    limit: int = Query(default=20, ge=1, le=500),
) -> List[Dict[str, Any]]:
    """Search the device's contacts by name."""
    lookup = _load_contacts(device_id)
    return [
        {"name": c.name, "phone_numbers": list(c.phone_numbers)}
        for c in lookup.search_by_name(q, limit)
    ]


@app.get("/devices/{device_id}/contacts/lookup")
def lookup_contact(
    device_id: str,
    phone: str = Query(..., min_length=1),
    strict: bool = Query(default=False),
) -> Dict[str, Any]:
    """
    Resolve a phone number to a contact name.

    With ``strict=true`` an unknown number is a 404 instead of falling back
    to the number itself.
    """
    lookup = _load_contacts(device_id)
    name = lookup.name_for(phone)
    if strict and not name:
        raise HTTPException(status_code=404, detail=f"Contact not found: {phone}")
    return {
        "phone": phone,
        "name": name,
        "display": lookup.name_or_number(phone),
    }


@app.get("/addresses/validate")
def validate_address(address: str = Query(...)) -> Dict[str, Any]:
    return {
        "address": address,
        "canonical": canonicalize(address),
        "valid": is_valid_address(address),
    }


@app.post("/notifications/sms")
def notify_sms(event: SmsNotification) -> Dict[str, bool]:
    return {"show": should_show_sms_notification(event.thread_id, event.date, get_config())}


@app.post("/notifications/file")
def notify_file(event: FileNotification) -> Dict[str, bool]:
    return {"show": should_show_file_notification(event.url, get_config())}

"""
Tests for durable conversation state persistence.
"""

from __future__ import annotations

import json
import tempfile
from dataclasses import replace
from datetime import timedelta

import pytest
from conftest import NOW, PHONE

from barbershop.application.exceptions import StaleConversationError
from barbershop.domain.entities.conversation_state import (
    CANCELLATION_FLOW,
    Conversation,
    ConversationContext,
    ConversationStep,
)
from barbershop.infrastructure.store.json_store import JsonConversationStore
from barbershop.infrastructure.store.memory_store import MemoryConversationStore


@pytest.fixture(params=["memory", "json"])
def store(request):
    if request.param == "memory":
        yield MemoryConversationStore(processed_limit=3)
        return
    with tempfile.TemporaryDirectory() as tmpdir:
        yield JsonConversationStore(data_dir=tmpdir, processed_limit=3)


def _conversation(phone: str = PHONE, conversation_id: str = "conv-1") -> Conversation:
    return Conversation(id=conversation_id, phone=phone, client_id="client-1", last_activity=NOW, created_at=NOW)


def test_create_and_read_back(store):
    created = store.create(_conversation())

    active = store.get_active(PHONE)
    assert active == created
    assert active.version == 0
    assert active.step is ConversationStep.INITIAL
    assert store.get_active("570000000000") is None


def test_one_active_conversation_per_phone(store):
    store.create(_conversation())

    with pytest.raises(ValueError):
        store.create(_conversation(conversation_id="conv-2"))


def test_save_round_trips_context(store):
    created = store.create(_conversation())
    context = ConversationContext(
        employee_id="emp-1",
        employee_name="Carlos Ramírez",
        client_name="Juan Pérez",
        date="2026-10-20",
        slot_labels=("9:00 AM", "9:30 AM"),
        slot_times=("09:00", "09:30"),
    )

    saved = store.save(replace(created, step=ConversationStep.ESPERANDO_HORA, context=context))

    active = store.get_active(PHONE)
    assert saved.version == 1
    assert active.version == 1
    assert active.step is ConversationStep.ESPERANDO_HORA
    assert active.context == context
    assert active.last_activity == NOW


def test_stale_save_is_rejected(store):
    created = store.create(_conversation())
    store.save(replace(created, step=ConversationStep.ESPERANDO_BARBERO))

    with pytest.raises(StaleConversationError):
        store.save(replace(created, step=ConversationStep.ESPERANDO_RADICADO))
    assert store.get_active(PHONE).step is ConversationStep.ESPERANDO_BARBERO


def test_closed_conversation_allows_a_new_one(store):
    created = store.create(_conversation())
    store.save(replace(created, step=ConversationStep.COMPLETED, active=False))

    assert store.get_active(PHONE) is None
    fresh = store.create(_conversation(conversation_id="conv-2"))
    assert store.get_active(PHONE).id == fresh.id


def test_deactivate_idle(store):
    store.create(_conversation())
    idle_later = replace(
        _conversation(phone="573009998877", conversation_id="conv-2"),
        last_activity=NOW + timedelta(minutes=10),
    )
    later = store.create(idle_later)
    cutoff = NOW + timedelta(minutes=5)

    assert store.idle_phones(cutoff) == [PHONE]
    assert store.deactivate_if_idle(PHONE, cutoff) is True
    assert store.get_active(PHONE) is None
    assert store.get_active("573009998877") == later
    assert store.deactivate_if_idle(PHONE, cutoff) is False
    assert store.deactivate_if_idle("573009998877", cutoff) is False
    assert store.idle_phones(cutoff) == []


def test_deactivate_if_idle_rechecks_last_activity(store):
    created = store.create(_conversation())
    cutoff = NOW + timedelta(minutes=5)
    assert store.idle_phones(cutoff) == [PHONE]

    store.save(replace(created, last_activity=NOW + timedelta(minutes=6)))

    assert store.deactivate_if_idle(PHONE, cutoff) is False
    assert store.get_active(PHONE) is not None


def test_processed_message_ids_are_bounded(store):
    for message_id in ("m1", "m2", "m3", "m4"):
        store.mark_processed(PHONE, message_id)

    assert store.has_processed(PHONE, "m4")
    assert store.has_processed(PHONE, "m2")
    assert not store.has_processed(PHONE, "m1")
    assert not store.has_processed("573009998877", "m4")


def test_json_file_layout():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonConversationStore(data_dir=tmpdir)
        store.create(replace(_conversation(phone="+57 300"), context=ConversationContext(flow=CANCELLATION_FLOW)))

        with open(f"{tmpdir}/_57_300.json", "r", encoding="utf-8") as f:
            data = json.load(f)

    assert data["phone"] == "+57 300"
    assert data["conversation"]["step"] == "INICIAL"
    assert data["conversation"]["context"]["flow"] == CANCELLATION_FLOW
    assert data["conversation"]["context"]["slot_times"] == []


def test_json_store_unknown_step_and_corrupted_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonConversationStore(data_dir=tmpdir)
        store.create(_conversation())
        path = f"{tmpdir}/{PHONE}.json"

        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        data["conversation"]["step"] = "ESPERANDO_PAGO"
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        assert store.get_active(PHONE).step is ConversationStep.UNRECOGNIZED

        with open(path, "w", encoding="utf-8") as f:
            f.write("{not json")
        assert store.get_active(PHONE) is None


def test_json_store_survives_restart():
    with tempfile.TemporaryDirectory() as tmpdir:
        first = JsonConversationStore(data_dir=tmpdir)
        created = first.create(_conversation())
        first.save(replace(created, step=ConversationStep.ESPERANDO_FECHA))
        first.mark_processed(PHONE, "wamid.1")

        second = JsonConversationStore(data_dir=tmpdir)
        assert second.get_active(PHONE).step is ConversationStep.ESPERANDO_FECHA
        assert second.has_processed(PHONE, "wamid.1")

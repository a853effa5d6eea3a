"""
Tests for inbound message handling: dedupe, error replies, reply sending and
the idle conversation sweep.
"""

from __future__ import annotations

import logging
import threading
from datetime import date

from conftest import PHONE, TZ, build_shop

from barbershop.application.use_cases.handle_incoming_message import HandleIncomingMessageUseCase
from barbershop.application.use_cases.send_reply import SendReplyUseCase
from barbershop.domain.entities.conversation_state import ConversationStep
from barbershop.infrastructure.whatsapp.mock_platform import MockWhatsAppPlatform


class BrokenPlatform(MockWhatsAppPlatform):
    def send_text(self, phone: str, text: str) -> None:
        raise RuntimeError("graph api down")

    def mark_read(self, message_id: str) -> None:
        raise RuntimeError("graph api down")


def test_duplicate_message_is_ignored(shop):
    assert shop.send("hola", message_id="wamid.1") == [shop.templates.welcome()]
    assert shop.send("3", message_id="wamid.2") != []

    assert shop.send("3", message_id="wamid.2") == []
    assert shop.store.get_active(PHONE).step is ConversationStep.ESPERANDO_BARBERO


def test_failure_replies_server_error_and_keeps_state(shop, monkeypatch, caplog):
    shop.send("hola")
    before = shop.store.get_active(PHONE)

    def explode(conversation, text):
        raise RuntimeError("boom")

    monkeypatch.setattr(shop.state_machine, "step", explode)
    with caplog.at_level(logging.ERROR):
        replies = shop.send("3")

    assert replies == [shop.templates.server_error()]
    assert shop.store.get_active(PHONE) == before
    assert "Message processing failed" in caplog.text


def test_stale_conversation_surfaces_as_server_error(shop, monkeypatch):
    shop.send("hola")
    real_get_active = shop.store.get_active

    def outdated(phone):
        conversation = real_get_active(phone)
        shop.store.save(conversation)
        return conversation

    monkeypatch.setattr(shop.store, "get_active", outdated)

    assert shop.send("3") == [shop.templates.server_error()]


def test_conversations_are_per_phone(shop):
    shop.send("hola")
    shop.send("3")

    assert shop.send("hola", phone="573009998877") == [shop.templates.welcome()]
    assert shop.store.get_active(PHONE).step is ConversationStep.ESPERANDO_BARBERO
    assert shop.store.get_active("573009998877").step is ConversationStep.INITIAL


def test_send_failures_do_not_stop_the_conversation():
    shop = build_shop()
    broken = BrokenPlatform()
    shop.handler = HandleIncomingMessageUseCase(
        store=shop.store,
        state_machine=shop.state_machine,
        send_reply=SendReplyUseCase(platform=broken, auto_reply_enabled=True),
        templates=shop.templates,
        timezone=TZ,
        clock=shop.clock,
    )

    shop.send("hola")
    shop.send("3")

    assert shop.store.get_active(PHONE).step is ConversationStep.ESPERANDO_BARBERO
    assert broken.sent == []


def test_send_reply_skips_when_disabled(caplog):
    platform = MockWhatsAppPlatform()
    use_case = SendReplyUseCase(platform=platform, auto_reply_enabled=False)

    with caplog.at_level(logging.INFO):
        assert use_case.execute(PHONE, "hola") is False
    use_case.mark_read("wamid.1")

    assert platform.sent == []
    assert platform.read == []
    assert "WOULD_SEND_REPLY" in caplog.text


def test_send_reply_reports_outcome():
    platform = MockWhatsAppPlatform()
    use_case = SendReplyUseCase(platform=platform)

    assert use_case.execute(PHONE, "hola") is True
    assert use_case.execute(PHONE, "   ") is False
    assert SendReplyUseCase(platform=BrokenPlatform()).execute(PHONE, "hola") is False
    SendReplyUseCase(platform=BrokenPlatform()).mark_read("wamid.1")
    assert platform.messages_to(PHONE) == ["hola"]


def test_idle_conversation_is_swept(shop):
    shop.send("hola")
    shop.send("3")

    shop.clock.advance(minutes=4)
    assert shop.sweeper.sweep() == 0
    assert shop.store.get_active(PHONE) is not None

    shop.clock.advance(minutes=2)
    assert shop.sweeper.sweep() == 1
    assert shop.store.get_active(PHONE) is None

    assert shop.send("1") == [shop.templates.welcome()]
    assert shop.store.get_active(PHONE).step is ConversationStep.INITIAL


def test_activity_keeps_conversation_alive(shop):
    shop.send("hola")
    shop.clock.advance(minutes=4)
    shop.send("3")
    shop.clock.advance(minutes=4)

    assert shop.sweeper.sweep() == 0
    assert shop.store.get_active(PHONE).step is ConversationStep.ESPERANDO_BARBERO


def test_sweep_waits_for_the_step_in_progress(shop, monkeypatch):
    for text in ("hola", "3", "1", "Juan Pérez", "mañana"):
        shop.send(text)
    shop.clock.advance(minutes=4, seconds=59)

    real_create = shop.appointments.create
    swept: list[int] = []
    sweep_blocked: list[bool] = []
    sweepers: list[threading.Thread] = []

    def create_while_sweeping(**kwargs):
        # The step is now past the idle timeout; the sweep must wait for it.
        shop.clock.advance(minutes=2)
        sweeper = threading.Thread(target=lambda: swept.append(shop.sweeper.sweep()), daemon=True)
        sweeper.start()
        sweeper.join(timeout=0.2)
        sweep_blocked.append(sweeper.is_alive())
        sweepers.append(sweeper)
        return real_create(**kwargs)

    monkeypatch.setattr(shop.appointments, "create", create_while_sweeping)

    replies = shop.send("1")
    sweepers[0].join(timeout=5)

    booked = shop.appointments.list_for_day(date(2026, 10, 20))
    assert len(booked) == 1
    assert booked[0].tracking_code in replies[0]
    assert sweep_blocked == [True]
    assert swept == [0]
    assert shop.store.get_active(PHONE).step is ConversationStep.ESPERANDO_SERVICIO

#!/usr/bin/env python3
"""
Interactive local chat harness (no HTTP, no WhatsApp).

Usage:
  python3 scripts/chat_local.py

What it does:
- Keeps a stable phone number for the session
- Sends your typed messages through the same HandleIncomingMessageUseCase
- Prints the conversation step after each message and the bot replies
"""

from __future__ import annotations

import os
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from barbershop.application.use_cases.handle_incoming_message import HandleIncomingMessageUseCase
from barbershop.application.use_cases.send_reply import SendReplyUseCase
from barbershop.domain.entities.message import Message
from barbershop.infrastructure.store.memory_store import MemoryConversationStore
from barbershop.infrastructure.whatsapp.mock_platform import MockWhatsAppPlatform
from barbershop.wiring.dependencies import (
    get_conversation_state_machine,
    get_templates,
    get_timezone,
)


def _print_header(phone: str) -> None:
    print("\nLocal Chat Harness")
    print("-" * 60)
    print(f"phone: {phone}")
    print("Type your message and press Enter.")
    print("Commands: /new (new phone), /state, /quit, /help")
    print("-" * 60)


def _build_use_case() -> tuple[HandleIncomingMessageUseCase, MemoryConversationStore, MockWhatsAppPlatform]:
    """Reuse the production state machine, swapping in a printing platform and a memory store."""
    platform = MockWhatsAppPlatform()
    store = MemoryConversationStore()
    use_case = HandleIncomingMessageUseCase(
        store=store,
        state_machine=get_conversation_state_machine(),
        send_reply=SendReplyUseCase(platform=platform, auto_reply_enabled=True),
        templates=get_templates(),
        timezone=get_timezone(),
    )
    return use_case, store, platform


def main() -> None:
    phone = os.getenv("CHAT_PHONE", "573001112233")
    use_case, store, platform = _build_use_case()
    _print_header(phone)

    while True:
        try:
            user_text = input("\n> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            return

        if not user_text:
            continue

        cmd = user_text.lower()
        if cmd in ("/quit", "/exit"):
            print("Bye!")
            return
        if cmd == "/help":
            print("Commands:")
            print("  /new   -> start over with a new phone number")
            print("  /state -> show the active conversation step and context")
            print("  /quit  -> exit")
            continue
        if cmd == "/new":
            phone = f"57300{int(time.time()) % 10_000_000:07d}"
            print(f"New phone: {phone}")
            continue
        if cmd == "/state":
            conversation = store.get_active(phone)
            if conversation is None:
                print("(no active conversation)")
            else:
                print(f"step: {conversation.step.value}")
                print(f"context: {conversation.context.to_dict()}")
            continue

        already_sent = len(platform.sent)
        use_case.handle(
            Message(
                id=f"local_{int(time.time() * 1000)}",
                phone=phone,
                text=user_text,
                timestamp=int(time.time()),
                platform="local",
            )
        )

        replies = platform.sent[already_sent:]
        if not replies:
            print("(no outbound message)")
        for _, text in replies:
            print("\n--- Reply ---")
            print(text)

        conversation = store.get_active(phone)
        print("-" * 60)
        print(f"step: {conversation.step.value if conversation else 'closed'}")


if __name__ == "__main__":
    main()

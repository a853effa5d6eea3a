from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable
from zoneinfo import ZoneInfo

from barbershop.application.ports.conversation_store import ConversationStorePort
from barbershop.application.use_cases.conversation_flow import ConversationStateMachine
from barbershop.application.use_cases.send_reply import SendReplyUseCase
from barbershop.application.utils.client_names import PLACEHOLDER_CLIENT_NAME
from barbershop.application.utils.locks import KeyedLocks
from barbershop.application.utils.message_parser import is_exit_command
from barbershop.application.utils.templates import MessageTemplates
from barbershop.domain.entities.conversation_state import Conversation, ConversationContext, ConversationStep
from barbershop.domain.entities.message import Message


class HandleIncomingMessageUseCase:
    def __init__(
        self,
        store: ConversationStorePort,
        state_machine: ConversationStateMachine,
        send_reply: SendReplyUseCase,
        templates: MessageTemplates,
        timezone: ZoneInfo,
        clock: Callable[[], datetime] | None = None,
        phone_locks: KeyedLocks | None = None,
    ) -> None:
        self._store = store
        self._state_machine = state_machine
        self._send_reply = send_reply
        self._templates = templates
        self._clock = clock or (lambda: datetime.now(timezone))
        self._phone_locks = phone_locks or KeyedLocks()
        self._logger = logging.getLogger(__name__)

    def handle(self, message: Message) -> None:
        """
        Process one inbound text. Messages from the same phone are handled one
        at a time and in arrival order; a failure leaves the stored
        conversation as it was and the user gets the generic error reply.
        """
        with self._phone_locks.hold(message.phone):
            if message.id and self._store.has_processed(message.phone, message.id):
                self._logger.info(
                    "Duplicate message ignored", extra={"phone": message.phone, "message_id": message.id}
                )
                return
            if message.id:
                self._store.mark_processed(message.phone, message.id)

            try:
                replies = self._process(message)
            except Exception:
                self._logger.exception(
                    "Message processing failed", extra={"phone": message.phone, "message_id": message.id}
                )
                replies = [self._templates.server_error()]

            for text in replies:
                self._send_reply.execute(message.phone, text)

    def _process(self, message: Message) -> list[str]:
        now = self._clock()
        conversation = self._store.get_active(message.phone)

        if is_exit_command(message.text):
            if conversation is None:
                self._start_conversation(message.phone, now)
                return [self._templates.welcome()]
            self._store.save(
                replace(conversation, step=ConversationStep.COMPLETED, active=False, last_activity=now)
            )
            self._logger.info("Conversation cancelled by user", extra={"phone": message.phone})
            return [self._templates.process_cancelled()]

        if conversation is None:
            self._start_conversation(message.phone, now)
            return [self._templates.welcome()]

        result = self._state_machine.step(conversation, message.text)
        self._store.save(
            replace(
                conversation,
                step=ConversationStep.COMPLETED if result.finish else result.step,
                context=ConversationContext() if result.finish else result.context,
                active=not result.finish,
                last_activity=now,
            )
        )
        self._logger.info(
            "Conversation step",
            extra={"phone": message.phone, "from": conversation.step.value, "step": result.step.value},
        )
        return result.replies

    def _start_conversation(self, phone: str, now: datetime) -> Conversation:
        client = self._state_machine.resolve_client(phone, PLACEHOLDER_CLIENT_NAME)
        conversation = self._store.create(
            Conversation(
                id=uuid.uuid4().hex,
                phone=phone,
                client_id=client.id,
                last_activity=now,
                created_at=now,
            )
        )
        self._logger.info("Conversation started", extra={"phone": phone, "client_id": client.id})
        return conversation

"""
Conversations between users and the messages exchanged in them.

A message that was stored is pushed to the conversation's channels group
(``chat.<conversation id>``) so that connected WebSocket clients receive
it without polling.
"""
from __future__ import annotations

import logging

import bleach
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction

from ..domain.base import to_wire
from ..domain.chat import ChatMessageDomainModel, ChatMessageDto, ConversationDomainModel, ConversationDto
from ..repositories.chat import ChatMessageRepo, ConversationRepo

logger = logging.getLogger(__name__)


def chat_group_name(conversation_id) -> str:
    return f"chat.{conversation_id}"


class ChatService:

    def __init__(self, conversation_repo: ConversationRepo, message_repo: ChatMessageRepo):
        self.conversation_repo = conversation_repo
        self.message_repo = message_repo

    def start_conversation(self, model: ConversationDomainModel) -> ConversationDto:
        """Return the existing one-to-one conversation between the two users, or start a new one."""
        if not model.is_group_conversation and model.other_user_id:
            existing = self.conversation_repo.get_conversation_between(model.initiating_user_id, model.other_user_id)
            if existing is not None:
                return existing
        return self.conversation_repo.create(model)

    @transaction.atomic
    def send_message(self, model: ChatMessageDomainModel) -> ChatMessageDto | None:
        model.message = bleach.clean((model.message or '').strip(), strip=True)
        if not model.message:
            return None
        message = self.message_repo.create(model)
        self.conversation_repo.touch(model.conversation_id)
        transaction.on_commit(lambda: self._broadcast(message))
        return message

    def _broadcast(self, message: ChatMessageDto) -> None:
        channel_layer = get_channel_layer()
        if channel_layer is None:
            return
        payload = {'type': 'chat.message', 'payload': to_wire(message)}
        try:
            async_to_sync(channel_layer.group_send)(chat_group_name(message.conversation_id), payload)
        except Exception as exc:
            logger.warning('Unable to push chat message %s: %s', message.id, exc)

    def get_conversation_messages(self, conversation_id) -> list[ChatMessageDto]:
        return self.message_repo.get_conversation_messages(conversation_id)

    def search_user_conversations(self, filters):
        return self.conversation_repo.search(filters)

    def get_conversation_by_id(self, conversation_id) -> ConversationDto | None:
        return self.conversation_repo.get_by_id(conversation_id)

    def update_conversation(self, conversation_id, model: ConversationDomainModel) -> ConversationDto | None:
        return self.conversation_repo.update(conversation_id, model)

    def delete_conversation(self, conversation_id) -> bool:
        return self.conversation_repo.delete(conversation_id)

    def is_participant(self, conversation_id, user_id: str) -> bool:
        return self.conversation_repo.is_participant(conversation_id, user_id)

    def get_message(self, message_id) -> ChatMessageDto | None:
        return self.message_repo.get_by_id(message_id)

    def update_message(self, message_id, model: ChatMessageDomainModel) -> ChatMessageDto | None:
        if model.message is not None:
            model.message = bleach.clean(model.message.strip(), strip=True)
        return self.message_repo.update(message_id, model)

    def delete_message(self, message_id) -> bool:
        return self.message_repo.delete(message_id)

"""Conversations and chat messages."""
from __future__ import annotations

from django.db.models import Q
from django.utils import timezone

from ..domain.chat import ChatMessageDto, ConversationDomainModel, ConversationDto
from ..models import ChatMessage, Conversation, User
from .base import BaseRepo, storage_operation
from .users import user_summary


class ConversationRepo(BaseRepo):
    model = Conversation
    writable_fields = ('topic', 'marked', 'is_group_conversation', 'last_message_timestamp')
    exact_filters = {'marked': 'marked'}
    contains_filters = {'topic': 'topic'}
    order_columns = {
        'CreatedAt': 'created_at',
        'LastMessageTimestamp': 'last_message_timestamp',
        'Topic': 'topic',
    }
    default_order_column = 'LastMessageTimestamp'

    def queryset(self):
        return Conversation.objects.select_related('initiating_user', 'other_user').prefetch_related('participants')

    def to_dto(self, row) -> ConversationDto:
        return ConversationDto(
            id=str(row.id),
            is_group_conversation=row.is_group_conversation,
            topic=row.topic,
            marked=row.marked,
            initiating_user_id=row.initiating_user_id,
            other_user_id=row.other_user_id,
            users=[user_summary(u) for u in sorted(row.participants.all(), key=lambda u: u.pk)],
            last_message_timestamp=row.last_message_timestamp,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @storage_operation
    def create(self, model: ConversationDomainModel) -> ConversationDto:
        row = Conversation.objects.create(
            is_group_conversation=bool(model.is_group_conversation),
            topic=model.topic,
            marked=bool(model.marked),
            initiating_user_id=model.initiating_user_id,
            other_user_id=model.other_user_id,
        )
        user_ids = {model.initiating_user_id, *(model.users or [])}
        if model.other_user_id:
            user_ids.add(model.other_user_id)
        row.participants.set(User.objects.filter(pk__in=user_ids))
        return self.get_by_id(row.pk)

    @storage_operation
    def get_conversation_between(self, first_user_id: str, second_user_id: str) -> ConversationDto | None:
        row = (self.queryset()
               .filter(is_group_conversation=False)
               .filter(Q(initiating_user_id=first_user_id, other_user_id=second_user_id)
                       | Q(initiating_user_id=second_user_id, other_user_id=first_user_id))
               .order_by('created_at', 'pk')
               .first())
        return self.to_dto(row) if row else None

    @storage_operation
    def is_participant(self, conversation_id, user_id: str) -> bool:
        return Conversation.objects.filter(pk=conversation_id, participants__pk=user_id).exists()

    def apply_extra_filters(self, qs, filters):
        if filters.user_id:
            qs = qs.filter(participants__pk=filters.user_id).distinct()
        return qs

    @storage_operation
    def touch(self, conversation_id) -> None:
        now = timezone.now()
        Conversation.objects.filter(pk=conversation_id).update(last_message_timestamp=now, updated_at=now)


class ChatMessageRepo(BaseRepo):
    model = ChatMessage
    writable_fields = ('conversation_id', 'sender_id', 'message')

    def to_dto(self, row) -> ChatMessageDto:
        return ChatMessageDto(
            id=str(row.id),
            conversation_id=str(row.conversation_id),
            sender_id=row.sender_id,
            message=row.message,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @storage_operation
    def get_conversation_messages(self, conversation_id, limit: int = 100) -> list[ChatMessageDto]:
        rows = (ChatMessage.objects
                .filter(conversation_id=conversation_id)
                .order_by('-created_at', '-pk')[:limit])
        return [self.to_dto(r) for r in reversed(list(rows))]

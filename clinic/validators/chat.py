from __future__ import annotations

from rest_framework import serializers

from ..domain.chat import ChatMessageDomainModel, ConversationDomainModel, ConversationSearchFilters
from .base import BaseSearchQuerySerializer, BaseValidator, SanitizedCharField


class StartConversationSerializer(serializers.Serializer):
    OtherUserId = serializers.CharField(required=False, allow_null=True, max_length=64)
    IsGroupConversation = serializers.BooleanField(required=False, default=False)
    Topic = SanitizedCharField(required=False, allow_null=True, allow_blank=True, max_length=255)
    Users = serializers.ListField(child=serializers.CharField(max_length=64), required=False, allow_empty=True)

    def validate(self, attrs):
        if attrs.get('IsGroupConversation'):
            if not attrs.get('Users'):
                raise serializers.ValidationError({'Users': ['A group conversation needs at least one member.']})
        elif not attrs.get('OtherUserId'):
            raise serializers.ValidationError({'OtherUserId': ['This field is required.']})
        return attrs


class UpdateConversationSerializer(serializers.Serializer):
    Topic = SanitizedCharField(required=False, allow_null=True, allow_blank=True, max_length=255)
    Marked = serializers.BooleanField(required=False, allow_null=True)


class MessageSerializer(serializers.Serializer):
    Message = serializers.CharField(max_length=4096)


class ConversationQuerySerializer(BaseSearchQuerySerializer):
    topic = SanitizedCharField(required=False)
    marked = serializers.BooleanField(required=False, allow_null=True, default=None)


class ChatValidator(BaseValidator):

    def start_conversation(self, request) -> ConversationDomainModel:
        vd = self.validate(StartConversationSerializer, request.data)
        return self.to_model(ConversationDomainModel, vd, initiating_user_id=request.user.id)

    def update_conversation(self, request) -> ConversationDomainModel:
        vd = self.validate(UpdateConversationSerializer, request.data, partial=True)
        return self.to_model(ConversationDomainModel, vd)

    def send_message(self, request, conversation_id: str) -> ChatMessageDomainModel:
        vd = self.validate(MessageSerializer, request.data)
        return self.to_model(ChatMessageDomainModel, vd,
                             conversation_id=conversation_id, sender_id=request.user.id)

    def update_message(self, request) -> ChatMessageDomainModel:
        vd = self.validate(MessageSerializer, request.data)
        return self.to_model(ChatMessageDomainModel, vd)

    def search_user_conversations(self, request, user_id: str) -> ConversationSearchFilters:
        vd = self.validate(ConversationQuerySerializer, request.query_params)
        return self.to_filters(ConversationSearchFilters, vd, user_id=user_id)

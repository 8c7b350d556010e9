"""
Chat endpoints.

Only participants of a conversation (or administrators) may read or post
in it; messages may be edited or removed by their sender.  New messages
are also pushed to the conversation's websocket group.
"""
from __future__ import annotations

from rest_framework.decorators import api_view

from .. import loader
from ..domain.base import to_wire
from ..exceptions import Forbidden, NotFound, OperationFailed
from ..permissions import ADMIN_ROLES
from ..responses import ResponseHandler
from ..validators.chat import ChatValidator
from .base import BaseController, action, error_boundary


class ChatController(BaseController):

    def __init__(self, service=None, validator=None):
        self.service = service or loader.chat_service()
        self.validator = validator or ChatValidator()

    def _conversation(self, request, kwargs):
        conversation_id = self.validator.get_param_uuid(kwargs, 'conversationId')
        conversation = self.service.get_conversation_by_id(conversation_id)
        if conversation is None:
            raise NotFound('Conversation not found.')
        if request.user.role not in ADMIN_ROLES and \
                not self.service.is_participant(conversation_id, request.user.id):
            raise Forbidden('You are not a participant of this conversation.')
        return conversation_id, conversation

    def _message(self, request, kwargs, owner_only: bool = False):
        message_id = self.validator.get_param_uuid(kwargs, 'messageId')
        message = self.service.get_message(message_id)
        if message is None:
            raise NotFound('Chat message not found.')
        if request.user.role in ADMIN_ROLES:
            return message_id, message
        if owner_only and message.sender_id != request.user.id:
            raise Forbidden('Only the sender may change this message.')
        if not self.service.is_participant(message.conversation_id, request.user.id):
            raise Forbidden('You are not a participant of this conversation.')
        return message_id, message

    # -- conversations ---------------------------------------------------

    @action('Chat.StartConversation')
    def start_conversation(self, request):
        model = self.validator.start_conversation(request)
        conversation = self.service.start_conversation(model)
        if conversation is None:
            raise OperationFailed('Unable to start conversation!')
        return ResponseHandler.success(request, 'Conversation started successfully!', 201, {
            'Conversation': to_wire(conversation),
        })

    @action('Chat.SearchUserConversations')
    def search_user_conversations(self, request, **kwargs):
        user_id = self.validator.get_param_id(kwargs, 'userId')
        if request.user.role not in ADMIN_ROLES and request.user.id != user_id:
            raise Forbidden('Permission denied: conversations of another user.')
        filters = self.validator.search_user_conversations(request, user_id)
        results = self.service.search_user_conversations(filters)
        count = results.retrieved_count
        message = 'No records found!' if count == 0 else f"Total {count} conversations retrieved successfully!"
        return ResponseHandler.success(request, message, 200, {
            'Conversations': to_wire(results),
        })

    @action('Chat.GetConversationById')
    def get_conversation_by_id(self, request, **kwargs):
        _, conversation = self._conversation(request, kwargs)
        return ResponseHandler.success(request, 'Conversation retrieved successfully!', 200, {
            'Conversation': to_wire(conversation),
        })

    @action('Chat.UpdateConversation')
    def update_conversation(self, request, **kwargs):
        conversation_id, _ = self._conversation(request, kwargs)
        model = self.validator.update_conversation(request)
        updated = self.service.update_conversation(conversation_id, model)
        if updated is None:
            raise OperationFailed('Unable to update conversation!')
        return ResponseHandler.success(request, 'Conversation updated successfully!', 200, {
            'Conversation': to_wire(updated),
        })

    @action('Chat.DeleteConversation')
    def delete_conversation(self, request, **kwargs):
        conversation_id, _ = self._conversation(request, kwargs)
        if not self.service.delete_conversation(conversation_id):
            raise OperationFailed('Conversation cannot be deleted.')
        return ResponseHandler.success(request, 'Conversation record deleted successfully!', 200, {
            'Deleted': True,
        })

    # -- messages --------------------------------------------------------

    @action('Chat.SendMessage')
    def send_message(self, request, **kwargs):
        conversation_id, _ = self._conversation(request, kwargs)
        model = self.validator.send_message(request, conversation_id)
        message = self.service.send_message(model)
        if message is None:
            raise OperationFailed('Chat message is empty after sanitisation.')
        return ResponseHandler.success(request, 'Chat message sent successfully!', 201, {
            'ChatMessage': to_wire(message),
        })

    @action('Chat.GetConversationMessages')
    def get_conversation_messages(self, request, **kwargs):
        conversation_id, _ = self._conversation(request, kwargs)
        messages = self.service.get_conversation_messages(conversation_id)
        return ResponseHandler.success(request, 'Conversation messages retrieved successfully!', 200, {
            'ChatMessages': to_wire(messages),
        })

    @action('Chat.GetMessage')
    def get_message(self, request, **kwargs):
        _, message = self._message(request, kwargs)
        return ResponseHandler.success(request, 'Chat message retrieved successfully!', 200, {
            'ChatMessage': to_wire(message),
        })

    @action('Chat.UpdateMessage')
    def update_message(self, request, **kwargs):
        message_id, _ = self._message(request, kwargs, owner_only=True)
        model = self.validator.update_message(request)
        updated = self.service.update_message(message_id, model)
        if updated is None:
            raise OperationFailed('Unable to update chat message!')
        return ResponseHandler.success(request, 'Chat message record updated successfully!', 200, {
            'ChatMessage': to_wire(updated),
        })

    @action('Chat.DeleteMessage')
    def delete_message(self, request, **kwargs):
        message_id, _ = self._message(request, kwargs, owner_only=True)
        if not self.service.delete_message(message_id):
            raise OperationFailed('Chat message cannot be deleted.')
        return ResponseHandler.success(request, 'Chat record deleted successfully!', 200, {
            'Deleted': True,
        })

    @error_boundary
    def conversation(self, request, **kwargs):
        if request.method == 'GET':
            return self.get_conversation_by_id(request, **kwargs)
        if request.method == 'DELETE':
            return self.delete_conversation(request, **kwargs)
        return self.update_conversation(request, **kwargs)

    @error_boundary
    def conversation_messages(self, request, **kwargs):
        if request.method == 'POST':
            return self.send_message(request, **kwargs)
        return self.get_conversation_messages(request, **kwargs)

    @error_boundary
    def message(self, request, **kwargs):
        if request.method == 'GET':
            return self.get_message(request, **kwargs)
        if request.method == 'DELETE':
            return self.delete_message(request, **kwargs)
        return self.update_message(request, **kwargs)


controller = ChatController()


@api_view(['POST'])
def start_conversation(request):
    return controller.start_conversation(request)


@api_view(['GET'])
def user_conversations(request, userId):
    return controller.search_user_conversations(request, userId=userId)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
def conversation_detail(request, conversationId):
    return controller.conversation(request, conversationId=conversationId)


@api_view(['GET', 'POST'])
def conversation_messages(request, conversationId):
    return controller.conversation_messages(request, conversationId=conversationId)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
def message_detail(request, messageId):
    return controller.message(request, messageId=messageId)

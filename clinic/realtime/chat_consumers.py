import json
import uuid

from asgiref.sync import sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.contrib.auth.models import AnonymousUser

from clinic import loader
from clinic.domain.chat import ChatMessageDomainModel
from clinic.services.chat import chat_group_name

MAX_MESSAGE_LENGTH = 4096


async def _ws_error(ws, code: int, message: str, *, close: bool = False):
    """
    Error frame sent to the client.
    Codes: 4xxx client errors, 5xxx server errors.
    """
    payload = {"type": "error", "code": code, "message": message}
    try:
        await ws.send(json.dumps(payload))
    finally:
        if close:
            await ws.close(code=code)


class ConversationChatConsumer(AsyncWebsocketConsumer):
    """Live feed of one conversation; participants may also post through it."""

    async def connect(self):
        try:
            self.conversation_id = str(uuid.UUID(self.scope["url_route"]["kwargs"].get("conversation_id")))
        except (TypeError, ValueError):
            await self.close(code=4001)
            return

        user = self.scope.get("user") or AnonymousUser()
        if not user.is_authenticated:
            await self.close(code=4003)
            return

        self.chat_service = loader.chat_service()
        conversation = await sync_to_async(self.chat_service.get_conversation_by_id)(self.conversation_id)
        if conversation is None:
            await self.close(code=4004)
            return

        allowed = await sync_to_async(self.chat_service.is_participant)(self.conversation_id, user.id)
        if not allowed:
            await self.close(code=4003)
            return

        self.group_name = chat_group_name(self.conversation_id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def receive(self, text_data=None, bytes_data=None):
        if not text_data:
            return

        try:
            data = json.loads(text_data)
        except ValueError:
            await _ws_error(self, 4000, "invalid_json")
            return

        if not isinstance(data, dict) or data.get("type") != "send":
            await _ws_error(self, 4002, "unsupported_type")
            return

        message = data.get("message", "")
        if not isinstance(message, str) or not message.strip():
            await _ws_error(self, 4004, "empty_message")
            return
        if len(message) > MAX_MESSAGE_LENGTH:
            await _ws_error(self, 4005, "message_too_long")
            return

        model = ChatMessageDomainModel(
            conversation_id=self.conversation_id,
            sender_id=self.scope["user"].id,
            message=message,
        )
        try:
            # the service broadcasts to the group once the message is stored
            sent = await sync_to_async(self.chat_service.send_message)(model)
        except Exception:
            await _ws_error(self, 5000, "server_error")
            return
        if sent is None:
            await _ws_error(self, 4004, "empty_message")
            return
        await self.send(json.dumps({"type": "ack", "id": sent.id}))

    # group_send(group, {"type": "chat.message", "payload": {...}})
    async def chat_message(self, event):
        payload = event.get("payload", {})
        await self.send(json.dumps({"type": "message", **payload}))

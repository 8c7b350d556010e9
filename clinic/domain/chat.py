from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Optional

from .base import BaseSearchFilters
from .users import UserSummaryDto


@dataclass
class ConversationDomainModel:
    id: Optional[str] = None
    is_group_conversation: Optional[bool] = None
    topic: Optional[str] = None
    marked: Optional[bool] = None
    initiating_user_id: Optional[str] = None
    other_user_id: Optional[str] = None
    users: Optional[list] = None
    last_message_timestamp: Optional[dt.datetime] = None


@dataclass
class ConversationDto:
    id: str
    is_group_conversation: bool
    topic: Optional[str]
    marked: bool
    initiating_user_id: str
    other_user_id: Optional[str]
    users: list[UserSummaryDto] = field(default_factory=list)
    last_message_timestamp: Optional[dt.datetime] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


@dataclass
class ChatMessageDomainModel:
    id: Optional[str] = None
    conversation_id: Optional[str] = None
    sender_id: Optional[str] = None
    message: Optional[str] = None


@dataclass
class ChatMessageDto:
    id: str
    conversation_id: str
    sender_id: str
    message: str
    created_at: dt.datetime
    updated_at: dt.datetime


@dataclass
class ConversationSearchFilters(BaseSearchFilters):
    user_id: Optional[str] = None
    topic: Optional[str] = None
    marked: Optional[bool] = None

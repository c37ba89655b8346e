from datetime import datetime
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, ConfigDict, Field, field_validator
from replies import Reply
from threads import Thread
from utils import to_datetime


def _require_present(v: str) -> str:
    if not v:
        raise ValueError('Field is required')
    return v


def _require_text(v: str) -> str:
    """Non-empty and storable: lone surrogates cannot be written as UTF-8."""
    _require_present(v)
    try:
        v.encode("utf-8")
    except UnicodeEncodeError:
        raise ValueError('Field must be valid UTF-8 text')
    return v


class ThreadCreate(BaseModel):
    text: str
    delete_password: str

    @field_validator('text')
    @classmethod
    def validate_text(cls, v):
        return _require_text(v)

    @field_validator('delete_password')
    @classmethod
    def validate_delete_password(cls, v):
        return _require_text(v)

class ThreadReport(BaseModel):
    thread_id: str

    @field_validator('thread_id')
    @classmethod
    def validate_thread_id(cls, v):
        return _require_text(v)

class ThreadDelete(BaseModel):
    thread_id: str
    delete_password: str

    @field_validator('thread_id')
    @classmethod
    def validate_thread_id(cls, v):
        return _require_text(v)

    @field_validator('delete_password')
    @classmethod
    def validate_delete_password(cls, v):
        return _require_present(v)

class ReplyCreate(BaseModel):
    thread_id: str
    text: str
    delete_password: str

    @field_validator('thread_id')
    @classmethod
    def validate_thread_id(cls, v):
        return _require_text(v)

    @field_validator('text')
    @classmethod
    def validate_text(cls, v):
        return _require_text(v)

    @field_validator('delete_password')
    @classmethod
    def validate_delete_password(cls, v):
        return _require_text(v)

class ReplyReport(BaseModel):
    thread_id: str
    reply_id: str

    @field_validator('thread_id', 'reply_id')
    @classmethod
    def validate_ids(cls, v):
        return _require_text(v)

class ReplyDelete(BaseModel):
    thread_id: str
    reply_id: str
    delete_password: str

    @field_validator('thread_id', 'reply_id')
    @classmethod
    def validate_ids(cls, v):
        return _require_text(v)

    @field_validator('delete_password')
    @classmethod
    def validate_delete_password(cls, v):
        return _require_present(v)


# Response models never declare delete_password or reported, so neither
# field can leak into a response.

class ReplyResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    text: str
    created_on: datetime

    @classmethod
    def from_reply(cls, reply: Reply) -> "ReplyResponse":
        return cls(id=reply.reply_id, text=reply.text, created_on=to_datetime(reply.created_on))

class NewThreadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    text: str
    created_on: datetime
    bumped_on: datetime
    replies: List[ReplyResponse] = []

    @classmethod
    def from_thread(cls, thread: Thread) -> "NewThreadResponse":
        # a new thread is reported without replies whatever the store holds
        return cls(
            id=thread.thread_id,
            text=thread.text,
            created_on=to_datetime(thread.created_on),
            bumped_on=to_datetime(thread.bumped_on),
            replies=[],
        )

class ThreadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    board: str
    text: str
    created_on: datetime
    bumped_on: datetime
    replies: List[ReplyResponse]

    @classmethod
    def from_thread(cls, thread: Thread, replies: Optional[List[Reply]] = None) -> "ThreadResponse":
        """Build a response from ``thread``, showing ``replies`` if given or all of them otherwise."""
        shown = thread.replies if replies is None else replies
        return cls(
            id=thread.thread_id,
            board=thread.board,
            text=thread.text,
            created_on=to_datetime(thread.created_on),
            bumped_on=to_datetime(thread.bumped_on),
            replies=[ReplyResponse.from_reply(reply) for reply in shown],
        )

class HealthResponse(BaseModel):
    status: str
    timestamp: float
    threads: int

class ErrorResponse(BaseModel):
    error: str
    message: str
    details: Optional[Dict[str, Any]] = None

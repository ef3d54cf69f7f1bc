import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ToolFunction(_ApiModel):
    name: str = ""
    arguments: Any = None

    @field_validator("name", mode="before")
    @classmethod
    def _name_as_text(cls, value: Any) -> str:
        return "" if value is None else str(value)


class ToolCall(_ApiModel):
    id: Optional[str] = None
    type: str = "function"
    function: ToolFunction = Field(default_factory=ToolFunction)

    @field_validator("function", mode="before")
    @classmethod
    def _function_default(cls, value: Any) -> Any:
        return value or {}


class Message(_ApiModel):
    role: str = ""
    content: Optional[str] = None
    tool_calls: List[ToolCall] = Field(default_factory=list)

    @field_validator("role", mode="before")
    @classmethod
    def _role_as_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("content", mode="before")
    @classmethod
    def _content_as_text(cls, value: Any) -> Optional[str]:
        if value is None or isinstance(value, str):
            return value
        return json.dumps(value, default=str)

    @field_validator("tool_calls", mode="before")
    @classmethod
    def _tool_calls_default(cls, value: Any) -> Any:
        return value or []


class Customer(_ApiModel):
    number: Optional[str] = None


class Session(_ApiModel):
    id: str
    created_at: str = Field(default="", alias="createdAt")
    status: Optional[str] = None
    messages: List[Message] = Field(default_factory=list)
    customer: Optional[Customer] = None

    @field_validator("created_at", mode="before")
    @classmethod
    def _created_at_as_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("messages", mode="before")
    @classmethod
    def _messages_default(cls, value: Any) -> Any:
        return value or []

    def user_turns(self) -> int:
        return sum(1 for message in self.messages if message.role == "user")


class ExtractedLead(_ApiModel):
    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    email: str = ""
    company: str = ""
    job_title: str = Field(default="", alias="jobTitle")
    event_question: str = Field(default="", alias="eventQuestion")
    timestamp: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.first_name.strip()) and bool(self.email.strip())


class LeadInfo(_ApiModel):
    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    email: str = ""
    phone: str = ""
    company: str = ""
    job_title: str = Field(default="", alias="jobTitle")
    event_questions: str = Field(default="", alias="eventQuestions")


class ChatOutput(_ApiModel):
    role: str = ""
    content: Optional[str] = None

    @field_validator("content", mode="before")
    @classmethod
    def _content_as_text(cls, value: Any) -> Optional[str]:
        if value is None or isinstance(value, str):
            return value
        return json.dumps(value, default=str)


class ChatResponse(_ApiModel):
    id: Optional[str] = None
    output: List[ChatOutput] = Field(default_factory=list)

    @field_validator("output", mode="before")
    @classmethod
    def _output_default(cls, value: Any) -> Any:
        return value or []


class SyncSummary(BaseModel):
    synced: int = 0
    skipped: int = 0
    incomplete: int = 0
    started_at: datetime
    duration_ms: float = 0.0

    def counters(self) -> Dict[str, int]:
        return {"synced": self.synced, "skipped": self.skipped, "incomplete": self.incomplete}


class FunctionCall(_ApiModel):
    name: str = ""
    parameters: Dict[str, Any] = Field(default_factory=dict)


class Call(_ApiModel):
    id: Optional[str] = None
    customer: Optional[Customer] = None


class TranscriptMessage(_ApiModel):
    role: Optional[str] = None
    content: Optional[str] = None


class VapiWebhookMessage(_ApiModel):
    type: str = ""
    call: Optional[Call] = None
    message: Optional[TranscriptMessage] = None
    function_call: Optional[FunctionCall] = Field(default=None, alias="functionCall")

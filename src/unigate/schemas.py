from typing import List, Literal, Optional

from pydantic import BaseModel

from unigate.models import ChatMessage


class ChatMessageModel(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    model: str
    messages: List[ChatMessageModel]
    # accepted for compatibility, translated requests are never streamed
    stream: Optional[bool] = None

    def to_messages(self) -> List[ChatMessage]:
        return [ChatMessage(role=m.role, content=m.content) for m in self.messages]


class GenerateRequest(BaseModel):
    model: str
    prompt: str
    system: Optional[str] = None
    stream: Optional[bool] = None

    def to_messages(self) -> List[ChatMessage]:
        messages = []
        if self.system:
            messages.append(ChatMessage(role="system", content=self.system))
        messages.append(ChatMessage(role="user", content=self.prompt))
        return messages


class ShowRequest(BaseModel):
    model: Optional[str] = None

"""
Plain data carriers shared between the registry, the adapters and the dispatch core.
"""
import enum
from dataclasses import dataclass
from typing import AsyncIterator, Optional


class ProviderKind(enum.Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    OLLAMA = "ollama"

    @classmethod
    def from_name(cls, name: str) -> Optional["ProviderKind"]:
        try:
            return cls(name.lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class ProviderConfig:
    """A configured upstream provider."""
    id: int
    name: str
    api_key: str
    base_url: str
    is_active: bool = True

    @property
    def kind(self) -> Optional[ProviderKind]:
        return ProviderKind.from_name(self.name)


@dataclass(frozen=True)
class ModelRecord:
    """A model offered by a provider. ``model_id`` is what clients put in requests."""
    name: str
    model_id: str
    provider_id: Optional[int] = None
    id: Optional[int] = None
    is_active: bool = True


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class RawResponse:
    """
    Untouched upstream reply of a forwarded request.

    Either ``content`` holds the whole body, or ``stream`` yields it chunk by chunk
    as the upstream sends it.
    """
    status_code: int
    content: bytes = b""
    content_type: Optional[str] = None
    stream: Optional[AsyncIterator[bytes]] = None

    async def read(self) -> bytes:
        if self.stream is None:
            return self.content
        return b"".join([chunk async for chunk in self.stream])

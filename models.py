from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any, List

from errors import ValidationError


class AuthorizationState(Enum):
    UNAUTHENTICATED = "unauthenticated"
    REQUEST_TOKEN_OBTAINED = "request_token_obtained"
    AUTHORIZED = "authorized"


@dataclass
class Credentials:
    consumer_key: str
    request_token: str = ""  # in-memory only, never persisted
    access_token: str = ""


@dataclass
class AddItemInput:
    """Data necessary to create a new item in a Pocket list."""

    url: str
    access_token: str
    title: str = ""
    tags: List[str] = field(default_factory=list)

    def validate(self) -> None:
        if not self.url:
            raise ValidationError("required URL value is empty")
        if not self.access_token:
            raise ValidationError("access token is empty")

    def to_request(self, consumer_key: str) -> Dict[str, Any]:
        """Build the /add request body; empty title and tags are omitted."""
        body = {"url": self.url}
        if self.title:
            body["title"] = self.title
        tags = ",".join(self.tags or [])
        if tags:
            body["tags"] = tags
        body["access_token"] = self.access_token
        body["consumer_key"] = consumer_key
        return body


@dataclass
class AuthorizationResult:
    access_token: str
    username: str = ""  # Pocket does not always return it


@dataclass
class RemoteItem:
    item_id: str
    raw: Optional[Dict[str, Any]] = field(
        default=None, repr=False
    )  # decoded "item" object, when present

    @property
    def is_empty(self) -> bool:
        return self.item_id == ""

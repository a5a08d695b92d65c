"""
Mail host capability surface consumed by the report pipeline.

A host exposes the message currently open in the client (`item`), the signed-in
user, and a notification primitive. Asynchronous calls answer with a
HostResult instead of raising, the way the client's own async API reports
status.
"""
import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, List, Optional

from sentinel.core.errors import HostTimeoutError
from sentinel.core.schemas import NotificationKind, ReplyOptions, UserIdentity


@dataclass
class HostResult:
    succeeded: bool
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, value: Any = None) -> "HostResult":
        return cls(succeeded=True, value=value)

    @classmethod
    def failed(cls, error: str) -> "HostResult":
        return cls(succeeded=False, error=error)


class MailItem(ABC):
    """The message the user has open."""

    subject: str = ""
    sender: Optional[str] = None
    to: List[str] = []
    cc: List[str] = []
    bcc: List[str] = []
    attachment_count: int = 0
    is_read: bool = False
    categories: Optional[List[str]] = None

    @abstractmethod
    async def get_body_type(self) -> HostResult:
        """Resolves to "text" or "html"."""

    @abstractmethod
    async def get_body(self, body_type: str) -> HostResult:
        ...

    @abstractmethod
    async def get_all_headers(self) -> HostResult:
        """Resolves to the raw internet header block as a single string."""

    @abstractmethod
    async def reply(self, options: ReplyOptions) -> HostResult:
        """Opens a pre-filled reply draft; the user still presses send."""


class MailHost(ABC):

    @property
    @abstractmethod
    def item(self) -> MailItem:
        ...

    @property
    @abstractmethod
    def user(self) -> UserIdentity:
        ...

    @abstractmethod
    async def is_ready(self) -> bool:
        ...

    @abstractmethod
    async def notify(self, key: str, kind: NotificationKind, message: str) -> HostResult:
        """Replaces the notification shown under `key`."""


async def call_host(awaitable: Awaitable, timeout: float, operation: str):
    """Awaits a host call with a deadline; raises HostTimeoutError on expiry."""
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except asyncio.TimeoutError as e:
        raise HostTimeoutError(operation, timeout) from e

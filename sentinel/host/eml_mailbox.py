import email
import logging
import os
import re
from email import policy
from email.message import EmailMessage
from email.utils import getaddresses, make_msgid
from typing import List, Optional

from sentinel.core.schemas import Notification, NotificationKind, ReplyOptions, UserIdentity
from sentinel.host.base import HostResult, MailHost, MailItem

logger = logging.getLogger("sentinel-addin")


def _addresses(msg, header: str) -> List[str]:
    values = msg.get_all(header, [])
    return [addr for _, addr in getaddresses([str(v) for v in values]) if addr]


def _categories(msg) -> List[str]:
    # Outlook exports categories as Keywords / X-Categories
    raw = msg.get("Keywords") or msg.get("X-Categories") or ""
    return [c.strip() for c in str(raw).split(",") if c.strip()]


class EmlMailItem(MailItem):
    """
    A MailItem backed by a raw .eml message. Reply drafts are collected in
    `outbox` and, when `drafts_dir` is set, written there as .eml files.
    """

    def __init__(self, content: bytes, drafts_dir: Optional[str] = None, reply_supported: bool = True):
        if not content or not content.strip():
            raise ValueError("Empty message")

        self.message = email.message_from_bytes(content, policy=policy.default)
        if not self.message.keys():
            raise ValueError("Message has no headers")

        self.subject = str(self.message.get("Subject", "") or "")
        senders = _addresses(self.message, "From")
        self.sender = senders[0] if senders else None
        self.to = _addresses(self.message, "To")
        self.cc = _addresses(self.message, "Cc")
        self.bcc = _addresses(self.message, "Bcc")
        self.attachment_count = len(list(self.message.iter_attachments()))
        self.is_read = False
        self.categories = _categories(self.message)

        self.drafts_dir = drafts_dir
        self.reply_supported = reply_supported
        self.outbox: List[EmailMessage] = []

    def _body_part(self, body_type: str):
        preference = ("html",) if body_type == "html" else ("plain",)
        return self.message.get_body(preferencelist=preference)

    async def get_body_type(self) -> HostResult:
        html_part = self.message.get_body(preferencelist=("html",))
        return HostResult.ok("html" if html_part is not None else "text")

    async def get_body(self, body_type: str) -> HostResult:
        part = self._body_part(body_type)
        if part is None:
            return HostResult.failed(f"No {body_type} body part")
        try:
            return HostResult.ok(part.get_content())
        except (LookupError, UnicodeDecodeError) as e:
            payload = part.get_payload(decode=True) or b""
            logger.warning(f"Body charset problem ({e}), decoding leniently")
            return HostResult.ok(payload.decode(errors="ignore"))

    async def get_all_headers(self) -> HostResult:
        lines = [f"{name}: {value}" for name, value in self.message.raw_items()]
        return HostResult.ok("\r\n".join(lines) + "\r\n")

    async def reply(self, options: ReplyOptions) -> HostResult:
        if not self.reply_supported:
            return HostResult.failed("Reply is not supported by this host")

        draft = EmailMessage()
        draft["To"] = options.recipient
        draft["Subject"] = options.subject
        draft["Message-ID"] = make_msgid()
        original_id = self.message.get("Message-ID")
        if original_id:
            draft["In-Reply-To"] = original_id
            draft["References"] = original_id
        draft.set_content(options.body_html, subtype="html")
        self.outbox.append(draft)

        if self.drafts_dir:
            os.makedirs(self.drafts_dir, exist_ok=True)
            safe_subject = re.sub(r'[\\/*?:"<>|\[\]]', "", options.subject).strip()[:50] or "report"
            path = os.path.join(self.drafts_dir, f"{len(self.outbox):03d}_{safe_subject}.eml")
            with open(path, "wb") as f:
                f.write(draft.as_bytes(policy=policy.SMTP))
            logger.info(f"Report draft written to {path}")

        return HostResult.ok(draft)


class EmlMailbox(MailHost):
    """Mail host over a single .eml message; notifications are recorded and logged."""

    def __init__(self, item: EmlMailItem, user: UserIdentity = None):
        self._item = item
        self._user = user or UserIdentity()
        self.notifications: List[Notification] = []

    @classmethod
    def from_bytes(cls, content: bytes, user: UserIdentity = None, drafts_dir: Optional[str] = None) -> "EmlMailbox":
        return cls(EmlMailItem(content, drafts_dir=drafts_dir), user=user)

    @property
    def item(self) -> EmlMailItem:
        return self._item

    @property
    def user(self) -> UserIdentity:
        return self._user

    async def is_ready(self) -> bool:
        return True

    async def notify(self, key: str, kind: NotificationKind, message: str) -> HostResult:
        # Same key replaces the previous notification
        self.notifications = [n for n in self.notifications if n.key != key]
        self.notifications.append(Notification(key=key, kind=kind, message=message))
        logger.info(f"[{kind.value}] {key}: {message}")
        return HostResult.ok()

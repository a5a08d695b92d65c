import logging
from datetime import datetime, timezone

from sentinel.analyzer.headers import HEADERS_UNAVAILABLE
from sentinel.core.errors import BodyRetrievalError, BodyTypeError, HostTimeoutError
from sentinel.core.schemas import MessageSnapshot
from sentinel.host.base import MailHost, call_host

logger = logging.getLogger("sentinel-addin")


def utc_timestamp() -> str:
    # e.g. 2024-05-01T09:30:00.000Z
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class MessageInspector:
    """
    Captures the open message once per run.

    Body type and body failures are fatal (BodyTypeError / BodyRetrievalError).
    A header failure is not: the snapshot carries HEADERS_UNAVAILABLE instead.
    """

    def __init__(self, host: MailHost, timeout: float = 30.0):
        self.host = host
        self.timeout = timeout

    async def inspect(self) -> MessageSnapshot:
        item = self.host.item

        try:
            type_result = await call_host(item.get_body_type(), self.timeout, "Body type retrieval")
        except HostTimeoutError as e:
            raise BodyTypeError(str(e)) from e
        if not type_result.succeeded:
            raise BodyTypeError(type_result.error)
        body_type = type_result.value

        try:
            body_result = await call_host(item.get_body(body_type), self.timeout, "Body retrieval")
        except HostTimeoutError as e:
            raise BodyRetrievalError(str(e)) from e
        if not body_result.succeeded:
            raise BodyRetrievalError(body_result.error)

        headers = await self._fetch_headers()

        return MessageSnapshot(
            subject=item.subject or "",
            sender=item.sender,
            to=list(item.to or []),
            cc=list(item.cc or []),
            bcc=list(item.bcc or []),
            body=body_result.value or "",
            body_type=body_type,
            attachment_count=item.attachment_count or 0,
            is_read=bool(item.is_read),
            categories=list(item.categories) if item.categories is not None else None,
            headers=headers,
            timestamp=utc_timestamp(),
            user=self.host.user,
        )

    async def _fetch_headers(self) -> str:
        try:
            result = await call_host(self.host.item.get_all_headers(), self.timeout, "Header retrieval")
        except Exception as e:
            logger.warning(f"Continuing without headers: {e}")
            return HEADERS_UNAVAILABLE
        if not result.succeeded:
            logger.warning(f"Continuing without headers: {result.error}")
            return HEADERS_UNAVAILABLE
        return result.value or ""

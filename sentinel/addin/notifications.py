import logging

from sentinel.core.schemas import NotificationKind, ReportType
from sentinel.host.base import MailHost, call_host

logger = logging.getLogger("sentinel-addin")

SUCCESS_MESSAGES = {
    ReportType.PHISHING: "Good job! You have reported a phishing email to the Information Security Team.",
    ReportType.SPAM: "Thank you! You have reported this email as spam.",
    ReportType.LEGITIMATE: "Thank you for the feedback! You have reported this email as legitimate.",
}


class Notifier:
    """Shows add-in notices on the open message. Display failures are logged, never raised."""

    def __init__(self, host: MailHost, timeout: float = 30.0):
        self.host = host
        self.timeout = timeout

    async def _show(self, key: str, kind: NotificationKind, message: str) -> bool:
        try:
            result = await call_host(self.host.notify(key, kind, message), self.timeout, f"notification '{key}'")
        except Exception as e:
            logger.error(f"Failed to show {key}: {e}")
            return False
        if not result.succeeded:
            logger.error(f"Failed to show {key}: {result.error}")
        return result.succeeded

    async def success(self, report_type: ReportType) -> str:
        message = SUCCESS_MESSAGES[ReportType(report_type)]
        await self._show("reportNotification", NotificationKind.INFORMATIONAL, message)
        return message

    async def error(self, title: str, message: str) -> bool:
        logger.debug(f"Error notice: {title}")
        return await self._show("errorNotification", NotificationKind.ERROR, message)

    async def warning(self, title: str, message: str) -> bool:
        logger.debug(f"Warning notice: {title}")
        return await self._show("warningNotification", NotificationKind.INFORMATIONAL, message)

    async def info(self, title: str, message: str) -> bool:
        logger.debug(f"Info notice: {title}")
        return await self._show("infoNotification", NotificationKind.INFORMATIONAL, message)

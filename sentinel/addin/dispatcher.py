import logging

from sentinel.addin.notifications import Notifier
from sentinel.core.config import AddinConfig
from sentinel.core.schemas import DeliveryOutcome, ReplyOptions, ReportType
from sentinel.host.base import MailHost, call_host

logger = logging.getLogger("sentinel-addin")

REPORTED_CATEGORY = "ReportedAsPhishing"


def recipient_for(report_type: ReportType, config: AddinConfig) -> str:
    if ReportType(report_type) is ReportType.SPAM:
        return config.spam_report_email
    return config.infosec_email


def report_subject(report_type: ReportType, subject: str) -> str:
    return f"[SENTINEL-{ReportType(report_type).value.upper()}] {subject or ''}"


class ReportDispatcher:
    """Hands the rendered report to the host and flags the original message."""

    def __init__(self, host: MailHost, config: AddinConfig, notifier: Notifier = None):
        self.host = host
        self.config = config
        self.timeout = config.host_call_timeout
        self.notifier = notifier or Notifier(host, timeout=self.timeout)

    async def create_report_email(self, recipient: str, report_body: str, report_type: ReportType) -> bool:
        """
        Opens a pre-filled reply draft. The host cannot send on the user's behalf,
        so success means the draft is open. Returns False when the user was told
        to send the report manually instead.
        """
        subject = report_subject(report_type, self.host.item.subject)
        options = ReplyOptions(recipient=recipient, subject=subject, body_html=report_body)

        try:
            result = await call_host(self.host.item.reply(options), self.timeout, "Reply compose")
            error = None if result.succeeded else result.error
        except Exception as e:
            error = str(e)

        if error is None:
            await self.notifier.info(
                "Report Ready",
                f"The report email is ready for review. Please send it to {recipient}"
            )
            return True

        logger.warning(f"Reply compose unavailable ({error}), asking user to send manually")
        await self.notifier.warning(
            "Send Report Manually",
            f"Please send the report to {recipient} with subject: {subject}"
        )
        return False

    async def mark_original(self) -> bool:
        """Marks the reported message read and tags it; failures are logged and swallowed."""
        try:
            item = self.host.item
            item.is_read = True
            if item.categories is not None and REPORTED_CATEGORY not in item.categories:
                item.categories = list(item.categories) + [REPORTED_CATEGORY]
            await self.notifier.info(
                "Email Marked",
                "Email has been marked as reported. You can manually delete it."
            )
            return True
        except Exception as e:
            logger.warning(f"Failed to mark email: {e}")
            return False

    async def dispatch(self, report_body: str, report_type: ReportType, is_simulated: bool = False) -> DeliveryOutcome:
        report_type = ReportType(report_type)
        recipient = recipient_for(report_type, self.config)

        opened = await self.create_report_email(recipient, report_body, report_type)

        marked = False
        if report_type.marks_original:
            marked = await self.mark_original()

        notice = await self.notifier.success(report_type)

        return DeliveryOutcome(
            succeeded=True,
            notice=notice,
            report_type=report_type,
            recipient=recipient,
            subject=report_subject(report_type, self.host.item.subject),
            manual_fallback=not opened,
            marked=marked,
            is_simulated_phishing=is_simulated,
        )

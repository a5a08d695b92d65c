"""
Report pipeline run when the user clicks one of the add-in's report buttons.

    Inspecting -> Classifying -> Formatting -> Dispatching -> (Marking) -> Notified

Only the inspection stage can fail a run outright (body type / body
retrieval). Header, classification, reply and marking problems degrade to a
default and the run still ends with the success notice.
"""
import logging
from typing import Optional

from sentinel.addin.dispatcher import ReportDispatcher
from sentinel.addin.inspector import MessageInspector
from sentinel.addin.notifications import Notifier
from sentinel.analyzer.headers import HEADERS_UNAVAILABLE, is_simulated_phishing
from sentinel.analyzer.report_generator import prepare_report_body
from sentinel.core.config import AddinConfig
from sentinel.core.schemas import ClassificationResult, DeliveryOutcome, MessageSnapshot, ReportRequest, ReportType
from sentinel.host.base import MailHost, call_host

logger = logging.getLogger("sentinel-addin")


class ReportPipeline:

    def __init__(self, host: MailHost, config: AddinConfig = None):
        self.host = host
        self.config = config or AddinConfig()
        self.notifier = Notifier(host, timeout=self.config.host_call_timeout)
        self.inspector = MessageInspector(host, timeout=self.config.host_call_timeout)
        self.dispatcher = ReportDispatcher(host, self.config, notifier=self.notifier)
        # Last rendered report, kept for callers that display it
        self.last_report: Optional[str] = None

    # --- Entry points (one per ribbon button) ---

    async def report_phishing(self) -> DeliveryOutcome:
        return await self.run_action(ReportType.PHISHING)

    async def report_spam(self) -> DeliveryOutcome:
        return await self.run_action(ReportType.SPAM)

    async def report_legitimate(self) -> DeliveryOutcome:
        return await self.run_action(ReportType.LEGITIMATE)

    async def submit(self, request: ReportRequest) -> DeliveryOutcome:
        return await self.run_action(request.report_type)

    async def run_action(self, report_type: ReportType) -> DeliveryOutcome:
        """Error boundary: nothing raised by a run escapes to the host runtime."""
        try:
            return await self.handle_report_action(report_type)
        except Exception as e:
            label = getattr(report_type, "value", report_type)
            logger.exception(f"Error in report{label}: {e}")
            notice = f"An error occurred: {e}"
            await self._notify_failure(notice)
            return DeliveryOutcome(
                succeeded=False,
                notice=notice,
                report_type=next((t for t in ReportType if t.value == label), None),
            )

    async def _notify_failure(self, notice: str):
        try:
            ready = await call_host(self.host.is_ready(), self.config.host_call_timeout, "Host readiness")
        except Exception as e:
            logger.error(f"Host readiness unknown, error notice skipped: {e}")
            return
        if ready:
            await self.notifier.error("Error", notice)

    # --- Stages ---

    async def handle_report_action(self, report_type: ReportType) -> DeliveryOutcome:
        report_type = ReportType(report_type)
        logger.info(f"Reporting email as {report_type.value}")
        logger.info(f"Current user: {self.host.user.display_name}")

        snapshot = await self.inspector.inspect()

        classification = self.classify(snapshot)
        snapshot = snapshot.with_classification(classification.is_simulated)

        return await self.process_report(snapshot, report_type)

    def classify(self, snapshot: MessageSnapshot) -> ClassificationResult:
        if snapshot.headers == HEADERS_UNAVAILABLE:
            return ClassificationResult(is_simulated=False)
        return ClassificationResult(
            is_simulated=is_simulated_phishing(snapshot.headers, self.config.gophish_custom_header)
        )

    async def process_report(self, snapshot: MessageSnapshot, report_type: ReportType) -> DeliveryOutcome:
        report_body = prepare_report_body(
            snapshot,
            report_type,
            product_name=self.config.product_name,
            version=self.config.version,
        )
        self.last_report = report_body
        return await self.dispatcher.dispatch(report_body, report_type, is_simulated=snapshot.is_simulated_phishing)

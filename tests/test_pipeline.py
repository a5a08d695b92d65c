import unittest

from sentinel.addin.dispatcher import REPORTED_CATEGORY, recipient_for, report_subject
from sentinel.addin.inspector import MessageInspector
from sentinel.addin.notifications import SUCCESS_MESSAGES
from sentinel.addin.pipeline import ReportPipeline
from sentinel.analyzer.headers import HEADERS_UNAVAILABLE
from sentinel.core.config import AddinConfig
from sentinel.core.errors import BodyRetrievalError, BodyTypeError, HostTimeoutError, ReportError
from sentinel.core.schemas import ReportType
from tests.fakes import HEADERS, MARKER, BrokenCategoriesItem, FakeHost, FakeItem

CONFIG = AddinConfig(
    infosec_email="soc@company.com",
    spam_report_email="spam@company.com",
    gophish_custom_header=MARKER,
    host_call_timeout=0.05,
)


class TestRouting(unittest.TestCase):

    def test_spam_goes_to_spam_mailbox(self):
        self.assertEqual(recipient_for(ReportType.SPAM, CONFIG), "spam@company.com")

    def test_phishing_and_legitimate_go_to_security(self):
        self.assertEqual(recipient_for(ReportType.PHISHING, CONFIG), "soc@company.com")
        self.assertEqual(recipient_for(ReportType.LEGITIMATE, CONFIG), "soc@company.com")

    def test_accepts_plain_strings(self):
        self.assertEqual(recipient_for("Spam", CONFIG), "spam@company.com")

    def test_subject(self):
        self.assertEqual(report_subject(ReportType.PHISHING, "Mailbox full"), "[SENTINEL-PHISHING] Mailbox full")


class TestInspector(unittest.IsolatedAsyncioTestCase):

    async def test_snapshot_fields(self):
        host = FakeHost(FakeItem(cc=["carol@company.com"]))
        snapshot = await MessageInspector(host, timeout=0.05).inspect()
        self.assertEqual(snapshot.subject, "Mailbox full")
        self.assertEqual(snapshot.sender, "support@evil.test")
        self.assertEqual(snapshot.to, ["alice@company.com"])
        self.assertEqual(snapshot.cc, ["carol@company.com"])
        self.assertEqual(snapshot.body_type, "html")
        self.assertEqual(snapshot.headers, HEADERS)
        self.assertEqual(snapshot.attachment_count, 1)
        self.assertEqual(snapshot.user.display_name, "Alice Example")
        self.assertTrue(snapshot.timestamp.endswith("Z"))
        self.assertFalse(snapshot.is_simulated_phishing)

    async def test_headers_fetched_after_body(self):
        item = FakeItem()
        await MessageInspector(FakeHost(item), timeout=0.05).inspect()
        self.assertEqual(item.calls, ["body_type", "body", "headers"])

    async def test_body_type_failure(self):
        item = FakeItem(fail={"body_type"})
        with self.assertRaises(BodyTypeError):
            await MessageInspector(FakeHost(item), timeout=0.05).inspect()
        self.assertNotIn("headers", item.calls)

    async def test_body_failure(self):
        item = FakeItem(fail={"body"})
        with self.assertRaises(BodyRetrievalError):
            await MessageInspector(FakeHost(item), timeout=0.05).inspect()
        self.assertNotIn("headers", item.calls)

    async def test_body_timeout_is_fatal(self):
        with self.assertRaises(BodyRetrievalError):
            await MessageInspector(FakeHost(FakeItem(hang={"body"})), timeout=0.05).inspect()

    async def test_header_failure_is_not_fatal(self):
        snapshot = await MessageInspector(FakeHost(FakeItem(fail={"headers"})), timeout=0.05).inspect()
        self.assertEqual(snapshot.headers, HEADERS_UNAVAILABLE)

    async def test_header_timeout_is_not_fatal(self):
        snapshot = await MessageInspector(FakeHost(FakeItem(hang={"headers"})), timeout=0.05).inspect()
        self.assertEqual(snapshot.headers, HEADERS_UNAVAILABLE)


class TestErrors(unittest.TestCase):

    def test_host_timeout_is_not_a_run_failure(self):
        self.assertTrue(issubclass(HostTimeoutError, TimeoutError))
        self.assertFalse(issubclass(HostTimeoutError, ReportError))
        self.assertEqual(str(HostTimeoutError("Reply compose", 0.5)), "Reply compose timed out after 0.5s")

    def test_body_failures_abort_run(self):
        self.assertTrue(issubclass(BodyTypeError, ReportError))
        self.assertTrue(issubclass(BodyRetrievalError, ReportError))


class TestReportPipeline(unittest.IsolatedAsyncioTestCase):

    async def test_phishing_report(self):
        host = FakeHost()
        outcome = await ReportPipeline(host, CONFIG).report_phishing()

        self.assertTrue(outcome.succeeded)
        self.assertEqual(outcome.recipient, "soc@company.com")
        self.assertEqual(outcome.notice, SUCCESS_MESSAGES[ReportType.PHISHING])
        self.assertFalse(outcome.manual_fallback)
        self.assertTrue(outcome.marked)

        reply = host.item.replies[0]
        self.assertEqual(reply.recipient, "soc@company.com")
        self.assertEqual(reply.subject, "[SENTINEL-PHISHING] Mailbox full")
        self.assertFalse(reply.display_reply_all)
        self.assertIn("http[:]//evil.test/help", reply.body_html)

        self.assertTrue(host.item.is_read)
        self.assertIn(REPORTED_CATEGORY, host.item.categories)
        self.assertEqual(host.messages("reportNotification"), [SUCCESS_MESSAGES[ReportType.PHISHING]])

    async def test_spam_report_routes_to_spam_mailbox(self):
        host = FakeHost()
        outcome = await ReportPipeline(host, CONFIG).report_spam()
        self.assertEqual(outcome.recipient, "spam@company.com")
        self.assertEqual(host.item.replies[0].recipient, "spam@company.com")
        self.assertEqual(outcome.notice, "Thank you! You have reported this email as spam.")
        self.assertTrue(host.item.is_read)

    async def test_legitimate_report_leaves_original_alone(self):
        host = FakeHost()
        outcome = await ReportPipeline(host, CONFIG).report_legitimate()
        self.assertEqual(outcome.recipient, "soc@company.com")
        self.assertFalse(outcome.marked)
        self.assertFalse(host.item.is_read)
        self.assertNotIn(REPORTED_CATEGORY, host.item.categories)
        self.assertEqual(host.messages("infoNotification"),
                         ["The report email is ready for review. Please send it to soc@company.com"])

    async def test_simulated_phishing_detected(self):
        item = FakeItem(headers=HEADERS + f"{MARKER}: campaign-7\r\n")
        outcome = await ReportPipeline(FakeHost(item), CONFIG).report_phishing()
        self.assertTrue(outcome.is_simulated_phishing)

    async def test_header_failure_still_succeeds(self):
        host = FakeHost(FakeItem(fail={"headers"}))
        pipeline = ReportPipeline(host, CONFIG)
        outcome = await pipeline.report_phishing()

        self.assertTrue(outcome.succeeded)
        self.assertFalse(outcome.is_simulated_phishing)
        self.assertIn(HEADERS_UNAVAILABLE, pipeline.last_report)
        self.assertEqual(host.messages("reportNotification"), [SUCCESS_MESSAGES[ReportType.PHISHING]])

    async def test_unavailable_headers_never_classified_simulated(self):
        config = CONFIG.model_copy(update={"gophish_custom_header": "unavailable"})
        outcome = await ReportPipeline(FakeHost(FakeItem(fail={"headers"})), config).report_phishing()
        self.assertFalse(outcome.is_simulated_phishing)

    async def test_marking_failure_still_succeeds(self):
        host = FakeHost(BrokenCategoriesItem())
        outcome = await ReportPipeline(host, CONFIG).report_phishing()

        self.assertTrue(outcome.succeeded)
        self.assertFalse(outcome.marked)
        self.assertEqual(outcome.notice, SUCCESS_MESSAGES[ReportType.PHISHING])
        self.assertEqual(host.messages("reportNotification"), [SUCCESS_MESSAGES[ReportType.PHISHING]])
        self.assertEqual(host.messages("errorNotification"), [])

    async def test_reply_failure_falls_back_to_manual(self):
        host = FakeHost(FakeItem(fail={"reply"}))
        outcome = await ReportPipeline(host, CONFIG).report_spam()

        self.assertTrue(outcome.succeeded)
        self.assertTrue(outcome.manual_fallback)
        self.assertEqual(host.messages("warningNotification"),
                         ["Please send the report to spam@company.com with subject: [SENTINEL-SPAM] Mailbox full"])
        self.assertEqual(host.messages("reportNotification"), [SUCCESS_MESSAGES[ReportType.SPAM]])

    async def test_reply_timeout_falls_back_to_manual(self):
        host = FakeHost(FakeItem(hang={"reply"}))
        outcome = await ReportPipeline(host, CONFIG).report_phishing()
        self.assertTrue(outcome.manual_fallback)
        self.assertEqual(len(host.messages("warningNotification")), 1)

    async def test_body_failure_shows_single_error(self):
        host = FakeHost(FakeItem(fail={"body"}))
        outcome = await ReportPipeline(host, CONFIG).report_phishing()

        self.assertFalse(outcome.succeeded)
        self.assertEqual(outcome.report_type, ReportType.PHISHING)
        self.assertEqual(outcome.notice, "An error occurred: Failed to get body: body failed")
        self.assertEqual(host.messages("errorNotification"), ["An error occurred: Failed to get body: body failed"])
        self.assertEqual(host.messages("reportNotification"), [])
        self.assertEqual(host.item.replies, [])

    async def test_body_type_failure_message(self):
        host = FakeHost(FakeItem(fail={"body_type"}))
        self.assertFalse((await ReportPipeline(host, CONFIG).report_spam()).succeeded)
        self.assertEqual(host.messages("errorNotification"),
                         ["An error occurred: Failed to get body type: body_type failed"])

    async def test_error_notice_needs_ready_host(self):
        host = FakeHost(FakeItem(fail={"body"}), ready=False)
        outcome = await ReportPipeline(host, CONFIG).report_legitimate()
        self.assertFalse(outcome.succeeded)
        self.assertEqual(host.notifications, [])

    async def test_unknown_report_type_is_contained(self):
        host = FakeHost()
        outcome = await ReportPipeline(host, CONFIG).run_action("Bogus")

        self.assertFalse(outcome.succeeded)
        self.assertIsNone(outcome.report_type)
        self.assertEqual(host.messages("reportNotification"), [])
        self.assertEqual(len(host.messages("errorNotification")), 1)
        self.assertEqual(host.item.calls, [])

    async def test_plain_string_report_type_accepted(self):
        outcome = await ReportPipeline(FakeHost(), CONFIG).run_action("Spam")
        self.assertTrue(outcome.succeeded)
        self.assertEqual(outcome.report_type, ReportType.SPAM)

    async def test_second_report_does_not_duplicate_category(self):
        host = FakeHost()
        await ReportPipeline(host, CONFIG).report_phishing()
        await ReportPipeline(host, CONFIG).report_spam()
        self.assertEqual(host.item.categories.count(REPORTED_CATEGORY), 1)

    async def test_existing_category_kept(self):
        host = FakeHost(FakeItem(categories=["Inbox", REPORTED_CATEGORY]))
        outcome = await ReportPipeline(host, CONFIG).report_phishing()
        self.assertTrue(outcome.marked)
        self.assertEqual(host.item.categories, ["Inbox", REPORTED_CATEGORY])

    async def test_notification_failures_do_not_break_run(self):
        host = FakeHost(notify_fails=True)
        outcome = await ReportPipeline(host, CONFIG).report_phishing()
        self.assertTrue(outcome.succeeded)
        self.assertEqual(outcome.notice, SUCCESS_MESSAGES[ReportType.PHISHING])


if __name__ == "__main__":
    unittest.main()

from sentinel.analyzer.url_extractor import extract_urls, defang_url
from sentinel.core.schemas import MessageSnapshot, ReportType

HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#039;",
}


def escape_html(text) -> str:
    """
    Single-pass escape of & < > " '. Not idempotent: escaping "&amp;" again
    yields "&amp;amp;".
    """
    if not text:
        return ""
    return "".join(HTML_ESCAPES.get(ch, ch) for ch in str(text))


def _join(addresses) -> str:
    if not addresses:
        return ""
    if isinstance(addresses, str):
        return addresses
    return ", ".join(addresses)


def prepare_report_body(
    snapshot: MessageSnapshot,
    report_type: ReportType,
    product_name: str = "ADGSentinel Report",
    version: str = "1.0.0",
) -> str:
    """Renders the report email body sent to the security/spam mailbox."""
    report_label = ReportType(report_type).value
    user = snapshot.user

    body = '<html><body><font face="Calibri" size="3">'

    body += f"<p><strong>Report Type:</strong> {report_label}</p>"
    body += f"<p><strong>Report Time:</strong> {snapshot.timestamp}</p>"
    body += f"<p><strong>Reported by:</strong> {escape_html(user.display_name)} ({escape_html(user.email)})</p>"

    body += "<hr>"
    body += "<h3>Email Information</h3>"
    body += f"<p><strong>Subject:</strong> {escape_html(snapshot.subject)}</p>"
    body += f"<p><strong>From:</strong> {escape_html(snapshot.sender or 'Unknown')}</p>"
    body += f"<p><strong>To:</strong> {escape_html(_join(snapshot.to) or 'Unknown')}</p>"

    cc = _join(snapshot.cc)
    if cc:
        body += f"<p><strong>CC:</strong> {escape_html(cc)}</p>"

    body += f"<p><strong>Attachments:</strong> {snapshot.attachment_count}</p>"

    urls = extract_urls(snapshot.body)
    if urls:
        body += "<hr>"
        body += f"<h3>URLs Found ({len(urls)})</h3>"
        body += "<ul>"
        body += "".join(f"<li>{escape_html(defang_url(u))}</li>" for u in urls)
        body += "</ul>"

    body += "<hr>"
    body += "<h3>Email Headers</h3>"
    body += '<pre style="font-size: 11px; background-color: #f0f0f0; padding: 10px;">'
    body += escape_html(snapshot.headers or "Headers not available")
    body += "</pre>"

    # Original body is rendered as-is; it may be HTML meant for display
    body += "<hr>"
    body += "<h3>Original Email Body</h3>"
    body += '<div style="border: 1px solid #ccc; padding: 10px; margin-top: 10px;">'
    body += snapshot.body or "Body not available"
    body += "</div>"

    body += "<hr>"
    body += '<p style="font-size: 10px; color: #666;">'
    body += f"{escape_html(product_name)} Add-in v{escape_html(version)} | Powered by Office.js"
    body += "</p>"

    body += "</font></body></html>"

    return body

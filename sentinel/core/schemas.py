from enum import Enum
from pydantic import BaseModel, ConfigDict
from typing import List, Optional


class ReportType(str, Enum):
    PHISHING = "Phishing"
    SPAM = "Spam"
    LEGITIMATE = "Legitimate"

    @property
    def marks_original(self) -> bool:
        # Only phishing/spam reports flag the reported message
        return self in (ReportType.PHISHING, ReportType.SPAM)


class ReportRequest(BaseModel):
    report_type: ReportType


class UserIdentity(BaseModel):
    display_name: str = ""
    email: str = ""
    time_zone_offset: Optional[int] = None


class MessageSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    subject: str = ""
    sender: Optional[str] = None
    to: List[str] = []
    cc: List[str] = []
    bcc: List[str] = []
    body: str = ""
    body_type: str = "text" # text, html
    attachment_count: int = 0
    is_read: bool = False
    categories: Optional[List[str]] = None
    headers: str = ""
    timestamp: str = ""
    user: UserIdentity = UserIdentity()

    # Classification (set once, after header analysis)
    is_simulated_phishing: bool = False

    def with_classification(self, is_simulated: bool) -> "MessageSnapshot":
        return self.model_copy(update={"is_simulated_phishing": is_simulated})


class ClassificationResult(BaseModel):
    is_simulated: bool = False


class ReplyOptions(BaseModel):
    recipient: str
    subject: str
    body_html: str
    display_reply_all: bool = False


class NotificationKind(str, Enum):
    INFORMATIONAL = "informational"
    ERROR = "error"


class Notification(BaseModel):
    key: str
    kind: NotificationKind
    message: str


class DeliveryOutcome(BaseModel):
    succeeded: bool = True
    notice: str = "" # success notice, or the error notice of a failed run
    report_type: Optional[ReportType] = None
    recipient: str = ""
    subject: str = ""
    manual_fallback: bool = False # reply draft could not be opened
    marked: bool = False # original flagged read + categorized
    is_simulated_phishing: bool = False


class ReportResponse(BaseModel):
    status: str = "success"
    outcome: Optional[DeliveryOutcome] = None
    notifications: List[Notification] = []
    report_html: str = ""
    draft_count: int = 0

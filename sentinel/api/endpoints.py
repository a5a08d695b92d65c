from fastapi import APIRouter, File, Form, HTTPException, UploadFile
import logging

from sentinel.addin.pipeline import ReportPipeline
from sentinel.core.config import AddinConfig, settings
from sentinel.core.schemas import ReportRequest, ReportResponse, ReportType, UserIdentity
from sentinel.host.eml_mailbox import EmlMailbox

router = APIRouter()
logger = logging.getLogger("uvicorn")


@router.get("/config")
async def get_config():
    return AddinConfig.from_settings(settings).to_payload()


@router.post("/report", response_model=ReportResponse)
async def report_email(
    file: UploadFile = File(...),
    report_type: ReportType = Form(...),
    reporter_name: str = Form(""),
    reporter_email: str = Form(""),
):
    """
    Runs the report pipeline against an uploaded .eml, standing in for the
    message open in the mail client. Returns the outcome, the notices the
    user would have seen and the rendered report body.
    """
    try:
        content = await file.read()
        user = UserIdentity(display_name=reporter_name, email=reporter_email)
        mailbox = EmlMailbox.from_bytes(content, user=user)
    except Exception as e:
        logger.error(f"Error parsing EML: {e}")
        raise HTTPException(status_code=400, detail="Invalid .eml file structure")

    pipeline = ReportPipeline(mailbox, AddinConfig.from_settings(settings))
    outcome = await pipeline.submit(ReportRequest(report_type=report_type))

    return ReportResponse(
        status="success" if outcome.succeeded else "error",
        outcome=outcome,
        notifications=mailbox.notifications,
        report_html=pipeline.last_report or "",
        draft_count=len(mailbox.item.outbox),
    )

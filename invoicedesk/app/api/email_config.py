"""Mail configuration endpoints."""

from fastapi import APIRouter, Depends

from invoicedesk.app.core.business_profile import BusinessProfile
from invoicedesk.app.dependencies.collaborators import get_profile, get_transport
from invoicedesk.app.schemas.invoice import EmailTestRequest
from invoicedesk.app.services.dispatch import send_test_email, verify_mail_configuration
from invoicedesk.app.services.mail_transport import MailTransport

router = APIRouter(prefix="/email", tags=["email"])


@router.get("/verify")
def verify_email_configuration(transport: MailTransport = Depends(get_transport)):
    return verify_mail_configuration(transport)


@router.post("/test")
def send_test_email_endpoint(
    payload: EmailTestRequest,
    transport: MailTransport = Depends(get_transport),
    profile: BusinessProfile = Depends(get_profile),
):
    receipt = send_test_email(transport, profile, payload.recipient)
    return {"success": True, "message_id": receipt.message_id, "recipient": payload.recipient}

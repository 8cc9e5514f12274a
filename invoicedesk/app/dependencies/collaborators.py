"""Providers for the external collaborators used by document and mail endpoints.

Tests replace these through ``app.dependency_overrides``.
"""

from invoicedesk.app.core.business_profile import BusinessProfile, get_business_profile
from invoicedesk.app.core.settings import get_settings
from invoicedesk.app.services.mail_transport import MailTransport, get_mail_transport
from invoicedesk.app.services.pdf_renderer import HeadlessPdfRenderer


def get_pdf_renderer() -> HeadlessPdfRenderer:
    return HeadlessPdfRenderer(timeout_ms=get_settings().pdf_render_timeout_ms)


def get_transport() -> MailTransport:
    return get_mail_transport()


def get_profile() -> BusinessProfile:
    return get_business_profile()


def get_pdf_output_dir() -> str:
    return get_settings().pdf_output_dir

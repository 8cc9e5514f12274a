"""Read-only business profile injected into rendered documents and emails."""

from dataclasses import dataclass

from invoicedesk.app.core.settings import get_settings


@dataclass(frozen=True)
class BusinessProfile:
    name: str
    address: str
    email: str


def get_business_profile() -> BusinessProfile:
    settings = get_settings()
    return BusinessProfile(
        name=settings.business_name,
        address=settings.business_address,
        email=settings.business_email,
    )

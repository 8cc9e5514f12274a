"""Render invoice templates into HTML documents.

Templates are Jinja2 source evaluated in a sandbox with HTML autoescaping.
Undefined names render as empty strings at any depth, so a template that
references an optional field the invoice lacks still renders. The stylesheet is
the one value injected unescaped, through ``{{ css }}``.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Mapping

from jinja2 import ChainableUndefined, TemplateError, TemplateSyntaxError
from jinja2.sandbox import SandboxedEnvironment
from markupsafe import Markup

from invoicedesk.app.core.business_profile import BusinessProfile
from invoicedesk.app.core.currency import currency_symbol, format_money
from invoicedesk.app.core.errors import RenderFailure, TemplateSyntaxFailure
from invoicedesk.app.core.time import format_long_date, utc_today
from invoicedesk.app.models.client import Client
from invoicedesk.app.models.invoice import Invoice
from invoicedesk.app.models.invoice_template import InvoiceTemplate
from invoicedesk.app.services.calculation import line_total

_environment = SandboxedEnvironment(autoescape=True, undefined=ChainableUndefined)


def check_template_syntax(source: str) -> None:
    """Raise ``TemplateSyntaxFailure`` when ``source`` does not parse."""
    try:
        _environment.parse(source)
    except TemplateSyntaxError as exc:
        raise TemplateSyntaxFailure(
            f"Invalid template syntax: {exc.message} (line {exc.lineno})",
            details={"line": exc.lineno, "error": exc.message},
        ) from exc


def render_template(html: str, css: str | None, context: Mapping[str, Any]) -> str:
    try:
        compiled = _environment.from_string(html)
        return compiled.render({**context, "css": Markup(css or "")})
    except TemplateSyntaxError as exc:
        raise TemplateSyntaxFailure(
            f"Invalid template syntax: {exc.message} (line {exc.lineno})",
            details={"line": exc.lineno, "error": exc.message},
        ) from exc
    except (TemplateError, TypeError, ValueError, ArithmeticError) as exc:
        raise RenderFailure(f"Template rendering failed: {exc}") from exc


def format_quantity(quantity) -> str:
    value = Decimal(str(quantity)).normalize()
    return f"{value:f}"


def format_percent(rate) -> str:
    """0.08 -> "8", 0.075 -> "7.5"."""
    value = (Decimal(str(rate or 0)) * 100).normalize()
    return f"{value:f}"


def _client_context(client: Client) -> dict:
    address = client.address or {}
    return {
        "name": client.name,
        "company": client.company or "",
        "email": client.email,
        "phone": client.phone or "",
        "tax_id": client.tax_id or "",
        "address": {
            "street": address.get("street") or "",
            "city": address.get("city") or "",
            "state": address.get("state") or "",
            "zip": address.get("zip") or "",
            "country": address.get("country") or "",
        },
    }


def _business_context(profile: BusinessProfile) -> dict:
    return {
        "business_name": profile.name,
        "business_address": profile.address,
        "business_email": profile.email,
        "business": {"name": profile.name, "address": profile.address, "email": profile.email},
    }


def build_invoice_context(invoice: Invoice, client: Client, profile: BusinessProfile) -> dict:
    code = invoice.currency
    items = [
        {
            "description": item.description,
            "details": item.details or "",
            "quantity": format_quantity(item.quantity),
            "rate": format_money(item.rate, code),
            "total": format_money(line_total(item.quantity, item.rate), code),
        }
        for item in invoice.items
    ]
    discount = Decimal(str(invoice.discount_amount or 0))
    return {
        **_business_context(profile),
        "invoice_number": invoice.invoice_number,
        "status": invoice.status,
        "issue_date": format_long_date(invoice.issue_date),
        "due_date": format_long_date(invoice.due_date),
        "payment_terms": invoice.payment_terms,
        "currency": currency_symbol(code),
        "currency_code": code,
        "tax_rate": format_percent(invoice.tax_rate),
        "client": _client_context(client),
        "items": items,
        "subtotal": format_money(invoice.subtotal, code),
        "discount_amount": format_money(discount, code),
        "has_discount": discount > 0,
        "tax_amount": format_money(invoice.tax_amount, code),
        "total": format_money(invoice.total, code),
        "notes": invoice.notes or "",
    }


def build_sample_context(profile: BusinessProfile, today: date | None = None) -> dict:
    today = today or utc_today()
    code = "USD"
    return {
        **_business_context(profile),
        "invoice_number": f"INV-{today.year}{today.month:02d}-0001",
        "status": "draft",
        "issue_date": format_long_date(today),
        "due_date": format_long_date(today + timedelta(days=30)),
        "payment_terms": 30,
        "currency": currency_symbol(code),
        "currency_code": code,
        "tax_rate": "8",
        "client": {
            "name": "Sample Client",
            "company": "Client Company Inc.",
            "email": "client@example.com",
            "phone": "",
            "tax_id": "",
            "address": {
                "street": "456 Client Ave",
                "city": "Client City",
                "state": "CS",
                "zip": "54321",
                "country": "",
            },
        },
        "items": [
            {
                "description": "Web Development Services",
                "details": "Frontend and backend development",
                "quantity": "40",
                "rate": format_money(75, code),
                "total": format_money(3000, code),
            },
            {
                "description": "UI/UX Design",
                "details": "User interface and experience design",
                "quantity": "20",
                "rate": format_money(65, code),
                "total": format_money(1300, code),
            },
        ],
        "subtotal": format_money(4300, code),
        "discount_amount": format_money(0, code),
        "has_discount": False,
        "tax_amount": format_money(344, code),
        "total": format_money(4644, code),
        "notes": "Thank you for your business! Payment is due within 30 days of invoice date.",
    }


def render_invoice(template: InvoiceTemplate, invoice: Invoice, client: Client, profile: BusinessProfile) -> str:
    return render_template(template.html_content, template.css_content, build_invoice_context(invoice, client, profile))


def render_template_preview(template: InvoiceTemplate, profile: BusinessProfile) -> str:
    return render_template(template.html_content, template.css_content, build_sample_context(profile))

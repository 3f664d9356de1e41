"""
MJML Email Templates
Booking notifications rendered with MJML for responsive, cross-client output
"""

from html import escape
from typing import Optional

from .config import CRM_FRONTEND_URL

# Salon theme colors - warm neutrals
THEME = {
    "primary": "#b45309",
    "primary_dark": "#92400e",
    "primary_light": "#fef3c7",
    "background": "#faf7f2",
    "card_bg": "#ffffff",
    "text_primary": "#1c1917",
    "text_secondary": "#44403c",
    "text_muted": "#78716c",
    "border": "#e7e5e4",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="#ffffff" padding="0 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="32px 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="12px" color="{THEME['text_muted']}" padding="0">
              Sent by your booking system.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _detail_row(label: str, value) -> str:
    return f"""
    <mj-text padding="0 0 6px 0">
      <strong>{label}:</strong> {escape(str(value)) if value not in (None, "") else "-"}
    </mj-text>
    """


def new_booking_notification_template(
    customer_name: str,
    customer_email: str,
    customer_phone: str,
    service_title: str,
    appointment_date: str,
    start_time: str,
    end_time: str,
    add_ons: Optional[list[str]] = None,
    notes: Optional[str] = None,
) -> str:
    """Admin notification for a freshly created booking"""
    add_on_text = ", ".join(add_ons) if add_ons else None

    content = f"""
    <mj-text color="{THEME['text_muted']}" padding="0 0 24px 0">
      A customer just booked an appointment.
    </mj-text>
    {_detail_row("Customer", customer_name)}
    {_detail_row("Email", customer_email)}
    {_detail_row("Phone", customer_phone)}
    {_detail_row("Service", service_title)}
    {_detail_row("Add-ons", add_on_text)}
    {_detail_row("Date", appointment_date)}
    {_detail_row("Time", f"{start_time} - {end_time}")}
    {_detail_row("Notes", notes)}
    """

    return get_base_template(
        title="New Booking",
        preview_text=f"{customer_name} booked {service_title} on {appointment_date}",
        content_sections=content,
        cta_url=f"{CRM_FRONTEND_URL}/admin/appointments",
        cta_label="View Appointments",
    )

from __future__ import annotations

import base64
from dataclasses import dataclass
from datetime import date
from html import escape
from typing import Optional
from urllib.parse import quote

from .ics import guest_label

_STYLE = """
    body { font-family: 'Inter', -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif;
           line-height: 1.6; color: #374151; margin: 0; padding: 0; background-color: #f9fafb; }
    .container { max-width: 600px; margin: 0 auto; background: white; border-radius: 8px;
                 overflow: hidden; box-shadow: 0 4px 6px rgba(0, 0, 0, 0.1); }
    .header { background: linear-gradient(135deg, #D97706 0%, #F59E0B 100%); color: white;
              padding: 40px 20px; text-align: center; }
    .header h1 { margin: 0; font-size: 28px; font-family: 'Playfair Display', serif; }
    .content { padding: 40px 30px; }
    .detail-box { background: #FFFBEB; border-left: 4px solid #D97706; padding: 20px;
                  margin: 20px 0; border-radius: 4px; }
    .detail-row { display: flex; justify-content: space-between; padding: 8px 0;
                  border-bottom: 1px solid #FDE68A; }
    .detail-row:last-child { border-bottom: none; }
    .detail-label { font-weight: 600; color: #78350F; }
    .detail-value { color: #374151; }
    .calendar-btn { display: inline-block; background: #D97706; color: white; padding: 12px 24px;
                    text-decoration: none; border-radius: 6px; margin: 20px 0; font-weight: 500; }
    .footer { background: #F9FAFB; padding: 30px; text-align: center; color: #6B7280; font-size: 14px; }
    .special-requests { background: #FEF3C7; padding: 15px; border-radius: 4px; margin: 15px 0;
                        font-style: italic; }
"""


@dataclass(frozen=True)
class ConfirmationContent:
    customer_name: str
    formatted_date: str
    time: str
    party_size: int
    ics: str
    customer_phone: Optional[str] = None
    special_requests: Optional[str] = None


def confirmation_subject(formatted_date: str, time: str) -> str:
    return f"Reservation Confirmation - {formatted_date} at {time}"


def encode_attachment(ics: str) -> str:
    return base64.b64encode(ics.encode("utf-8")).decode("ascii")


def _detail_row(label: str, value: str) -> str:
    return (
        '<div class="detail-row">'
        f'<span class="detail-label">{label}</span>'
        f'<span class="detail-value">{value}</span>'
        "</div>"
    )


def render_confirmation_html(
    content: ConfirmationContent,
    *,
    restaurant_name: str,
    restaurant_address: str,
    restaurant_phone: str,
    restaurant_email: str,
    today: date | None = None,
) -> str:
    year = (today or date.today()).year
    rows = [
        _detail_row("📅 Date:", escape(content.formatted_date)),
        _detail_row("🕐 Time:", escape(content.time)),
        _detail_row("👥 Party Size:", f"{content.party_size} {guest_label(content.party_size)}"),
    ]
    if content.customer_phone:
        rows.append(_detail_row("📞 Contact:", escape(content.customer_phone)))

    special = ""
    if content.special_requests:
        special = (
            '<div class="special-requests">'
            f"<strong>Special Requests:</strong><br>{escape(content.special_requests)}"
            "</div>"
        )

    calendar_href = "data:text/calendar;charset=utf-8," + quote(content.ics, safe="")
    name = escape(restaurant_name)

    return f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Reservation Confirmation</title>
    <style>{_STYLE}</style>
  </head>
  <body>
    <div class="container">
      <div class="header">
        <h1>🍽️ Reservation Confirmed!</h1>
        <p style="margin: 10px 0 0 0; opacity: 0.9;">{name}</p>
      </div>
      <div class="content">
        <p>Dear {escape(content.customer_name)},</p>
        <p>Thank you for choosing {name}! We're delighted to confirm your reservation.</p>
        <div class="detail-box">
          {"".join(rows)}
        </div>
        {special}
        <p style="text-align: center;">
          <a href="{calendar_href}" download="reservation.ics" class="calendar-btn">📅 Add to Calendar</a>
        </p>
        <p>We look forward to serving you! If you need to make any changes to your reservation,
        please contact us at least 24 hours in advance.</p>
        <p><strong>Contact Information:</strong><br>
        📍 {escape(restaurant_address)}<br>
        📞 {escape(restaurant_phone)}<br>
        📧 {escape(restaurant_email)}</p>
      </div>
      <div class="footer">
        <p>Thank you for choosing {name}</p>
        <p>&copy; {year} {name}. All rights reserved.</p>
      </div>
    </div>
  </body>
</html>
"""

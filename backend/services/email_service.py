"""
Email Service - Transactional customer emails (welcome, order confirmed, shipped, delivered)

Templates are Jinja strings rendered to HTML and plain text; delivery goes
through Resend. Sending never raises: a delivery failure is logged and the
order flow carries on.
"""
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, Optional

import resend
from jinja2 import BaseLoader, Environment

from config import get_settings

logger = logging.getLogger(__name__)

_HTML_ENV = Environment(loader=BaseLoader(), autoescape=True, trim_blocks=True, lstrip_blocks=True)
_TEXT_ENV = Environment(loader=BaseLoader(), autoescape=False, trim_blocks=True, lstrip_blocks=True)

BRAND = "Before Bedtime Adventures"
TAGLINE = "Magical Stories From Your Family Memories"


@dataclass(frozen=True)
class EmailTemplate:
    subject: str
    html: str
    text: str


_HEADER_HTML = """
<div style="font-family: Georgia, serif; max-width: 600px; margin: 0 auto; color: #3b2f5c;">
<h1 style="color: #8b5cf6; margin-bottom: 0;">{{ brand }}</h1>
<p style="margin-top: 4px; color: #ec4899;">{{ tagline }}</p>
<hr>
"""

_FOOTER_HTML = """
<hr>
<p style="font-size: 12px; color: #6b7280;">{{ brand }} &middot; <a href="{{ site_url }}">{{ site_url }}</a></p>
</div>
"""

_HEADER_TEXT = """{{ brand }}
{{ tagline }}

---

"""

TEMPLATES: Dict[str, EmailTemplate] = {
    "welcome": EmailTemplate(
        subject="Welcome to {{ brand }}! Let's create magic together",
        html=_HEADER_HTML + """
<h2>Welcome to the family!</h2>
<p>Hi {{ customer_name }}!</p>
<p>You can now turn your family memories into Disney/Pixar-style storybooks your kids will treasure.</p>
<ol>
  <li><strong>Upload your photos</strong> from vacations and special moments.</li>
  <li><strong>Watch the magic happen</strong> as each photo becomes an illustration.</li>
  <li><strong>Add your story</strong> and order a printed hardcover.</li>
</ol>
<p><a href="{{ create_book_url }}">Create your first book</a></p>
""" + _FOOTER_HTML,
        text=_HEADER_TEXT + """WELCOME TO THE FAMILY!

Hi {{ customer_name }}!

You can now turn your family memories into Disney/Pixar-style storybooks your kids will treasure.

1. UPLOAD YOUR PHOTOS
2. WATCH THE MAGIC HAPPEN
3. ADD YOUR STORY

Create your first book: {{ create_book_url }}
Your dashboard: {{ dashboard_url }}
""",
    ),
    "order_confirmation": EmailTemplate(
        subject='Order Confirmed! Your magical storybook "{{ book_title }}" is being created',
        html=_HEADER_HTML + """
<p>Hi {{ customer_name }}!</p>
<h2>Thank you for your order!</h2>
<table>
  <tr><td>Order #</td><td>{{ order_id }}</td></tr>
  <tr><td>Book Title</td><td>{{ book_title }}</td></tr>
  <tr><td>Order Date</td><td>{{ order_date }}</td></tr>
  <tr><td>Total</td><td>{{ price }}</td></tr>
</table>
<h3>Shipping to</h3>
<p>
  {{ address.name }}<br>
  {{ address.street1 }}<br>
  {% if address.street2 %}{{ address.street2 }}<br>{% endif %}
  {{ address.city }}, {{ address.state_code }} {{ address.postal_code }}
</p>
<h3>What happens next?</h3>
<ol>
  <li>Creating your book (1-2 business days)</li>
  <li>Printing &amp; binding (3-5 business days)</li>
  <li>On its way! We'll send a tracking number when it ships.</li>
</ol>
<p><strong>Estimated delivery:</strong> {{ estimated_delivery }}</p>
<p><a href="{{ order_url }}">View your order status</a></p>
""" + _FOOTER_HTML,
        text=_HEADER_TEXT + """Hi {{ customer_name }}!

THANK YOU FOR YOUR ORDER!

ORDER CONFIRMED
Order #: {{ order_id }}
Book Title: {{ book_title }}
Order Date: {{ order_date }}
Total: {{ price }}

SHIPPING TO
{{ address.name }}
{{ address.street1 }}
{% if address.street2 %}{{ address.street2 }}
{% endif %}
{{ address.city }}, {{ address.state_code }} {{ address.postal_code }}

WHAT HAPPENS NEXT?
1. Creating Your Book (1-2 business days)
2. Printing & Binding (3-5 business days)
3. On Its Way! We'll send you a tracking number as soon as your book ships.

Estimated Delivery: {{ estimated_delivery }}

View your order status: {{ order_url }}
""",
    ),
    "book_shipped": EmailTemplate(
        subject='Your magical storybook "{{ book_title }}" is on its way!',
        html=_HEADER_HTML + """
<h2>Your book is on its way!</h2>
<p>Hi {{ customer_name }}!</p>
<p>Your storybook has been packed with love and is heading to {{ address.city }}, {{ address.state_code }}.</p>
<h3>Tracking information</h3>
<p>
  Carrier: {{ carrier }}<br>
  {% if tracking_number %}Tracking Number: {{ tracking_number }}<br>{% endif %}
  {% if tracking_url %}<a href="{{ tracking_url }}">Track your package</a>{% endif %}
</p>
<p><strong>Estimated delivery:</strong> {{ estimated_delivery }}</p>
<p><a href="{{ order_url }}">Order #{{ order_id }}</a></p>
""" + _FOOTER_HTML,
        text=_HEADER_TEXT + """YOUR BOOK IS ON ITS WAY!

Hi {{ customer_name }}!

Your magical storybook has been packed with love and is now making its journey to you.

TRACKING INFORMATION
Carrier: {{ carrier }}
{% if tracking_number %}
Tracking Number: {{ tracking_number }}
{% endif %}
{% if tracking_url %}
Track your package: {{ tracking_url }}
{% endif %}

Estimated Delivery: {{ estimated_delivery }}
Heading to {{ address.city }}, {{ address.state_code }}

Order #{{ order_id }}: {{ order_url }}
""",
    ),
    "book_delivered": EmailTemplate(
        subject='Your magical storybook "{{ book_title }}" has arrived!',
        html=_HEADER_HTML + """
<h2>Your book has arrived!</h2>
<p>Hi {{ customer_name }}!</p>
<p>We hope "{{ book_title }}" brings countless cozy bedtime moments.</p>
<p><a href="{{ review_url }}">Leave a review</a> &middot; <a href="{{ create_book_url }}">Create another book</a></p>
""" + _FOOTER_HTML,
        text=_HEADER_TEXT + """YOUR BOOK HAS ARRIVED!
Time for magical bedtime stories!

Hi {{ customer_name }}!

We hope "{{ book_title }}" brings countless cozy bedtime moments, excited giggles, and treasured memories.

WE'D LOVE YOUR FEEDBACK!
Leave a Review: {{ review_url }}

Create another book: {{ create_book_url }}
Your dashboard: {{ dashboard_url }}
""",
    ),
}


def delivery_range(start_days: int, end_days: int, today: Optional[date] = None) -> str:
    """e.g. "March 3 - March 8, 2026" """
    today = today or date.today()
    start = today + timedelta(days=start_days)
    end = today + timedelta(days=end_days)
    return f"{start:%B} {start.day} - {end:%B} {end.day}, {end.year}"


def format_price(cents: int) -> str:
    return f"${cents / 100:.2f}"


def render_email(kind: str, context: Dict[str, Any]) -> tuple:
    """Returns (subject, html, text) for one of TEMPLATES."""
    template = TEMPLATES[kind]
    values = {"brand": BRAND, "tagline": TAGLINE, "site_url": get_settings().app_url, **context}
    subject = _TEXT_ENV.from_string(template.subject).render(**values)
    html = _HTML_ENV.from_string(template.html).render(**values)
    text = _TEXT_ENV.from_string(template.text).render(**values)
    return subject, html, text


def send_email(to: str, kind: str, context: Dict[str, Any]) -> bool:
    """Render and send one email. Returns True when Resend accepted it."""
    settings = get_settings()
    if not settings.resend_api_key:
        logger.info(f"Email delivery not configured; skipping {kind} email")
        return False
    if not to:
        logger.warning(f"No recipient for {kind} email")
        return False

    resend.api_key = settings.resend_api_key
    try:
        subject, html, text = render_email(kind, context)
        result = resend.Emails.send({
            "from": settings.email_from,
            "to": [to],
            "subject": subject,
            "html": html,
            "text": text,
        })
    except Exception:
        logger.exception(f"Failed to send {kind} email")
        return False

    logger.info(f"Sent {kind} email (message {result.get('id') if result else None})")
    return True


# ============================================
# Customer emails
# ============================================

def _order_url(order) -> str:
    return f"{get_settings().app_url}/orders/{order.id}"


def _address(order) -> Dict[str, Optional[str]]:
    return {
        "name": order.ship_name,
        "street1": order.ship_street1,
        "street2": order.ship_street2,
        "city": order.ship_city,
        "state_code": order.ship_state_code,
        "postal_code": order.ship_postal_code,
    }


def send_welcome(user) -> bool:
    app_url = get_settings().app_url
    return send_email(user.email, "welcome", {
        "customer_name": user.name or "there",
        "create_book_url": f"{app_url}/books/new",
        "dashboard_url": f"{app_url}/dashboard",
    })


def send_order_confirmation(order) -> bool:
    ordered_on = order.paid_at or order.created_at
    return send_email(order.contact_email, "order_confirmation", {
        "customer_name": order.ship_name,
        "book_title": order.book.title,
        "order_id": str(order.id),
        "price": format_price(order.price),
        "order_date": f"{ordered_on:%B} {ordered_on.day}, {ordered_on.year}" if ordered_on else "",
        "address": _address(order),
        "estimated_delivery": delivery_range(7, 12),
        "order_url": _order_url(order),
    })


def send_book_shipped(order) -> bool:
    return send_email(order.contact_email, "book_shipped", {
        "customer_name": order.ship_name,
        "book_title": order.book.title,
        "order_id": str(order.id),
        "carrier": "USPS",
        "tracking_number": order.tracking_number,
        "tracking_url": order.tracking_url,
        "address": _address(order),
        "estimated_delivery": delivery_range(3, 5),
        "order_url": _order_url(order),
    })


def send_book_delivered(order) -> bool:
    app_url = get_settings().app_url
    return send_email(order.contact_email, "book_delivered", {
        "customer_name": order.ship_name,
        "book_title": order.book.title,
        "order_id": str(order.id),
        "review_url": f"{app_url}/review?order={order.id}",
        "create_book_url": f"{app_url}/books/new",
        "dashboard_url": f"{app_url}/dashboard",
    })


STATUS_EMAILS = {
    "payment_received": send_order_confirmation,
    "shipped": send_book_shipped,
    "delivered": send_book_delivered,
}


def notify_status_change(order, previous_status: str) -> bool:
    """Send the customer email for the status the order just reached, if it has one."""
    if order.status == previous_status:
        return False
    sender = STATUS_EMAILS.get(order.status)
    if sender is None:
        return False
    return sender(order)

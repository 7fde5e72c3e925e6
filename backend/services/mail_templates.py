"""
HTML bodies for transactional email.
"""
from html import escape


def _layout(title: str, body: str) -> str:
    return (
        "<!DOCTYPE html><html><head><meta charset=\"UTF-8\">"
        f"<title>{escape(title)}</title></head>"
        "<body style=\"font-family: Arial, sans-serif; font-size: 16px; color: #333;\">"
        f"<div style=\"max-width: 600px; margin: 0 auto; padding: 20px;\">{body}"
        "<p style=\"font-size: 14px; color: #999;\">If you have any questions, "
        "reach out to <a href=\"mailto:info@studynotion.com\">info@studynotion.com</a>.</p>"
        "</div></body></html>"
    )


def course_enrollment_email(course_name: str, name: str) -> str:
    return _layout(
        "Course Registration Confirmation",
        f"<h2>Course Registration Confirmation</h2>"
        f"<p>Dear {escape(name)},</p>"
        f"<p>You have successfully registered for the course <b>\"{escape(course_name)}\"</b>. "
        f"We are excited to have you as a participant!</p>"
        f"<p>Log in to your learning dashboard to access the course materials.</p>",
    )


def payment_success_email(name: str, amount, order_id: str, payment_id: str) -> str:
    """`amount` is in major units (already divided by 100)."""
    return _layout(
        "Payment Confirmation",
        f"<h2>Course Payment Confirmation</h2>"
        f"<p>Dear {escape(name)},</p>"
        f"<p>We have received a payment of <b>₹{escape(str(amount))}</b>.</p>"
        f"<p>Your Payment ID is <b>{escape(payment_id)}</b></p>"
        f"<p>Your Order ID is <b>{escape(order_id)}</b></p>",
    )

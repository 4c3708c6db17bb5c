"""
Status Translator - Display labels and colour classes for book, image and order statuses
"""

# Display labels
STATUS_LABELS = {
    # Book status
    "draft": "Draft",
    "generating": "Creating illustrations",
    "ready_to_print": "Ready to print",
    "ordered": "Ordered",
    "completed": "Completed",

    # Image generation status
    "pending": "Waiting",
    "failed": "Failed",

    # Order status
    "pending_payment": "Awaiting payment",
    "payment_received": "Payment received",
    "generating_pdfs": "Preparing your book",
    "submitting_to_lulu": "Sending to printer",
    "submitted": "Sent to printer",
    "in_production": "Printing",
    "shipped": "Shipped",
    "delivered": "Delivered",
}


def translate_status(status: str) -> str:
    """
    Returns the user-facing label for a stored status.
    Unknown statuses are returned unchanged.
    """
    return STATUS_LABELS.get(status, status)


def get_status_color(status: str, failed: bool = False) -> str:
    """
    Returns the colour class for a status badge.

    Args:
        status: Stored status value
        failed: True when the record carries a failure marker

    Returns:
        One of "success", "processing", "error", "pending"
    """
    if failed or status == "failed":
        return "error"
    if status in ["completed", "ready_to_print", "delivered", "shipped"]:
        return "success"
    elif status in ["generating", "payment_received", "generating_pdfs", "submitting_to_lulu",
                    "submitted", "in_production", "ordered"]:
        return "processing"
    else:  # draft, pending, pending_payment
        return "pending"

"""
Response builders - ORM records to API response schemas (status labels, public URLs)
"""
from typing import Optional

from models.books import Books
from models.images import Images
from models.pages import Pages
from models.print_orders import PrintOrders
from schemas.book_schemas import BookResponse, BookDetailResponse, ImageProgress
from schemas.image_schemas import ImageResponse
from schemas.order_schemas import OrderResponse, OrderStep, ShippingAddress
from schemas.page_schemas import PageResponse
from services import storage_service
from services.order_lifecycle import (
    PROGRESS_STEPS,
    can_track_shipment,
    is_order_finished,
    is_status_complete,
    next_status,
    status_progress,
)
from utils.status_translator import translate_status, get_status_color


def image_response(image: Images) -> ImageResponse:
    return ImageResponse(
        id=image.id,
        page_id=image.page_id,
        order=image.order,
        generation_status=image.generation_status,
        status_display=translate_status(image.generation_status),
        original_url=storage_service.public_url(image.original_key),
        transformed_url=storage_service.public_url(image.transformed_key),
        last_error=image.last_error,
        created_at=image.created_at,
        updated_at=image.updated_at,
    )


def page_response(page: Pages) -> PageResponse:
    return PageResponse(
        id=page.id,
        book_id=page.book_id,
        page_number=page.page_number,
        sort_order=page.sort_order,
        title=page.title,
        story_text=page.story_text,
        spread_layout=page.spread_layout,
        images=[image_response(image) for image in page.images],
        created_at=page.created_at,
        updated_at=page.updated_at,
    )


def _book_fields(book: Books, progress: Optional[dict]) -> dict:
    return dict(
        id=book.id,
        title=book.title,
        page_count=book.page_count,
        status=book.status,
        status_display=translate_status(book.status),
        cover_design=book.cover_design,
        character_images=book.character_images or [],
        print_format=book.print_format,
        pod_package_id=book.pod_package_id,
        print_status=book.print_status,
        printed_page_count=book.printed_page_count,
        progress=ImageProgress(**progress) if progress else None,
        created_at=book.created_at,
        updated_at=book.updated_at,
    )


def book_response(book: Books, progress: Optional[dict] = None) -> BookResponse:
    return BookResponse(**_book_fields(book, progress))


def book_detail_response(book: Books, progress: Optional[dict] = None) -> BookDetailResponse:
    return BookDetailResponse(
        **_book_fields(book, progress),
        pages=[page_response(page) for page in book.pages],
        interior_pdf_url=storage_service.public_url(book.interior_pdf_key),
        cover_pdf_url=storage_service.public_url(book.cover_pdf_key),
    )


def order_response(order: PrintOrders) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        book_id=order.book_id,
        status=order.status,
        status_display=translate_status(order.status),
        status_color=get_status_color(order.status, failed=order.is_failed),
        progress=status_progress(order.status, failed=order.is_failed),
        is_failed=order.is_failed,
        steps=[
            OrderStep(
                status=step,
                label=translate_status(step),
                complete=is_status_complete(order.status, step, failed=order.is_failed),
            )
            for step in PROGRESS_STEPS
        ],
        next_status=next_status(order.status, failed=order.is_failed),
        can_track_shipment=can_track_shipment(order.status),
        is_finished=is_order_finished(order.status, failed=order.is_failed),
        last_error=order.last_error,
        cost=order.cost,
        price=order.price,
        contact_email=order.contact_email,
        shipping_address=ShippingAddress(
            name=order.ship_name,
            street1=order.ship_street1,
            street2=order.ship_street2,
            city=order.ship_city,
            state_code=order.ship_state_code,
            postal_code=order.ship_postal_code,
            country_code=order.ship_country_code,
            phone_number=order.ship_phone_number,
        ),
        lulu_print_job_id=order.lulu_print_job_id,
        lulu_status=order.lulu_status,
        tracking_number=order.tracking_number,
        tracking_url=order.tracking_url,
        paid_at=order.paid_at,
        submitted_at=order.submitted_at,
        shipped_at=order.shipped_at,
        delivered_at=order.delivered_at,
        failed_at=order.failed_at,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )

"""
PDF Service - Generates the print-ready interior and wrap-around cover PDFs for a book.
Uses ReportLab for rendering and markdown+BeautifulSoup to flatten story text.
"""

import io
import logging
from dataclasses import dataclass
from typing import List

import markdown
from bs4 import BeautifulSoup
from reportlab.lib.colors import Color
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas as rl_canvas
from sqlalchemy.orm import Session

from errors import PdfGenerationError
from models.books import Books
from models.pages import Pages
from services import storage_service
from utils import print_specs
from utils.print_specs import INTERIOR_WIDTH, INTERIOR_HEIGHT, SAFE_MARGIN, BLEED, COVER_WRAP, TRIM_SIZE

logger = logging.getLogger(__name__)

TITLE_FONT = "Helvetica-Bold"
TEXT_FONT = "Helvetica"
PAGE_BACKGROUND = Color(0.98, 0.98, 1)
TEXT_COLOR = Color(0.2, 0.2, 0.3)
MUTED_COLOR = Color(0.4, 0.4, 0.5)
WHITE = Color(1, 1, 1)


@dataclass
class PdfBundle:
    interior_key: str
    cover_key: str
    interior_url: str
    cover_url: str
    printed_page_count: int


# ============================================
# Helpers
# ============================================

def _theme(book: Books) -> dict:
    theme_key = (book.cover_design or {}).get("theme") or print_specs.DEFAULT_THEME
    return print_specs.THEME_COLORS.get(theme_key, print_specs.THEME_COLORS[print_specs.DEFAULT_THEME])


def _markdown_to_paragraphs(md_text: str) -> List[str]:
    """
    Converts Markdown story text to a list of plain paragraphs.
    """
    html = markdown.markdown(md_text or "", extensions=["extra"])
    soup = BeautifulSoup(html, "html.parser")

    paragraphs: List[str] = []
    for element in soup.find_all(["p", "li", "h1", "h2", "h3", "h4"]):
        text = " ".join(element.get_text().split())
        if text:
            paragraphs.append(text)

    if not paragraphs:
        raw = soup.get_text()
        paragraphs = [p.strip() for p in raw.split("\n\n") if p.strip()]

    return paragraphs


def _page_image_keys(page: Pages) -> List[str]:
    """Image keys for a page in display order: the illustration if ready, else the original photo."""
    return [
        image.transformed_key if image.generation_status == "completed" and image.transformed_key
        else image.original_key
        for image in page.images
    ]


def _fill_background(c, width: float, height: float, color=PAGE_BACKGROUND):
    c.setFillColor(color)
    c.rect(0, 0, width, height, stroke=0, fill=1)


def _draw_centered_lines(c, text: str, font: str, size: float, center_x: float, top_y: float,
                         max_width: float, color) -> float:
    """Draw wrapped, centred text starting at top_y. Returns the y below the last line."""
    c.setFont(font, size)
    c.setFillColor(color)
    y = top_y
    for line in simpleSplit(text, font, size, max_width):
        c.drawCentredString(center_x, y, line)
        y -= size * 1.5
    return y


def _draw_fitted_image(c, key: str, x: float, y: float, max_width: float, max_height: float) -> bool:
    """Draw a stored image scaled to fit the box, centred. Returns False if it could not be drawn."""
    try:
        reader = ImageReader(io.BytesIO(storage_service.read_bytes(key)))
        img_width, img_height = reader.getSize()
    except Exception as e:
        logger.warning(f"Could not load image {key} for PDF: {e}")
        return False

    aspect = img_width / img_height
    draw_width = max_width
    draw_height = draw_width / aspect
    if draw_height > max_height:
        draw_height = max_height
        draw_width = draw_height * aspect

    c.drawImage(
        reader,
        x + (max_width - draw_width) / 2,
        y + (max_height - draw_height) / 2,
        width=draw_width,
        height=draw_height,
    )
    return True


# ============================================
# Interior
# ============================================

def _add_title_page(c, book: Books, theme: dict):
    _fill_background(c, INTERIOR_WIDTH, INTERIOR_HEIGHT)
    design = book.cover_design or {}
    center = INTERIOR_WIDTH / 2
    max_width = INTERIOR_WIDTH - SAFE_MARGIN * 4

    _draw_centered_lines(c, book.title or "Our Adventure", TITLE_FONT, 48, center,
                         INTERIOR_HEIGHT * 0.6, max_width, Color(*theme["primary"]))
    if design.get("subtitle"):
        _draw_centered_lines(c, design["subtitle"], TEXT_FONT, 24, center,
                             INTERIOR_HEIGHT * 0.45, max_width, MUTED_COLOR)
    if design.get("author_line"):
        _draw_centered_lines(c, design["author_line"], TEXT_FONT, 18, center,
                             INTERIOR_HEIGHT * 0.3, max_width, Color(0.5, 0.5, 0.6))
    c.showPage()


def _add_dedication_page(c, book: Books):
    _fill_background(c, INTERIOR_WIDTH, INTERIOR_HEIGHT)
    dedication = (book.cover_design or {}).get("dedication") or "For all the adventurers..."
    _draw_centered_lines(c, dedication, TEXT_FONT, 20, INTERIOR_WIDTH / 2, INTERIOR_HEIGHT * 0.5,
                         INTERIOR_WIDTH - SAFE_MARGIN * 4, MUTED_COLOR)
    c.showPage()


def _add_blank_page(c):
    _fill_background(c, INTERIOR_WIDTH, INTERIOR_HEIGHT)
    c.showPage()


def _add_story_spread(c, page: Pages, theme: dict):
    """Each stop prints as two facing pages: illustration + title, then second image or story text."""
    image_keys = _page_image_keys(page)
    margin = SAFE_MARGIN * 2

    # Left page
    _fill_background(c, INTERIOR_WIDTH, INTERIOR_HEIGHT)
    if image_keys:
        _draw_fitted_image(c, image_keys[0], SAFE_MARGIN, SAFE_MARGIN + 60,
                           INTERIOR_WIDTH - margin, INTERIOR_HEIGHT - margin - 80)
    if page.title:
        c.setFont(TITLE_FONT, 24)
        c.setFillColor(Color(*theme["primary"]))
        c.drawCentredString(INTERIOR_WIDTH / 2, SAFE_MARGIN + 20, page.title)
    c.showPage()

    # Right page
    _fill_background(c, INTERIOR_WIDTH, INTERIOR_HEIGHT)
    if len(image_keys) > 1:
        _draw_fitted_image(c, image_keys[1], SAFE_MARGIN, SAFE_MARGIN,
                           INTERIOR_WIDTH - margin, INTERIOR_HEIGHT - margin)
    elif page.story_text:
        y = INTERIOR_HEIGHT * 0.7
        for paragraph in _markdown_to_paragraphs(page.story_text):
            y = _draw_centered_lines(c, paragraph, TEXT_FONT, 18, INTERIOR_WIDTH / 2, y,
                                     INTERIOR_WIDTH - SAFE_MARGIN * 4, TEXT_COLOR)
            y -= 9
    c.showPage()


def _add_end_page(c, theme: dict):
    _fill_background(c, INTERIOR_WIDTH, INTERIOR_HEIGHT)
    c.setFont(TITLE_FONT, 48)
    c.setFillColor(Color(*theme["primary"]))
    c.drawCentredString(INTERIOR_WIDTH / 2, INTERIOR_HEIGHT * 0.5, "The End")
    c.showPage()


def generate_interior_pdf(book: Books, pages: List[Pages]) -> bytes:
    """
    Renders the interior: title, dedication, padding for short books,
    one spread per stop, end page, then blank pages up to the printed page count.
    """
    theme = _theme(book)
    stop_count = len(pages)
    printed_page_count = print_specs.calculate_printed_page_count(stop_count)
    logger.info(f"Creating {printed_page_count} interior pages for {stop_count} stops (book {book.id})")

    buffer = io.BytesIO()
    c = rl_canvas.Canvas(buffer, pagesize=(INTERIOR_WIDTH, INTERIOR_HEIGHT))
    c.setTitle(book.title)

    _add_title_page(c, book, theme)
    _add_dedication_page(c, book)
    rendered = 2

    if stop_count <= 9:
        _add_blank_page(c)
        _add_blank_page(c)
        rendered += 2

    for page in pages:
        _add_story_spread(c, page, theme)
        rendered += 2

    _add_end_page(c, theme)
    rendered += 1

    while rendered < printed_page_count:
        _add_blank_page(c)
        rendered += 1

    c.save()
    return buffer.getvalue()


# ============================================
# Cover
# ============================================

def _draw_gradient_background(c, width: float, height: float, theme: dict, bands: int = 20):
    primary, secondary = theme["primary"], theme["secondary"]
    band_height = height / bands
    for i in range(bands):
        t = i / bands
        rgb = [p + (s - p) * t for p, s in zip(primary, secondary)]
        c.setFillColor(Color(*rgb))
        # +1 overlap prevents hairline gaps between bands
        c.rect(0, height - (i + 1) * band_height, width, band_height + 1, stroke=0, fill=1)


def _draw_back_cover(c, book: Books, x: float, y: float, width: float, height: float):
    dedication = (book.cover_design or {}).get("dedication")
    if dedication:
        _draw_centered_lines(c, dedication, TEXT_FONT, 16, x + width / 2, y + height * 0.5,
                             width - 72, WHITE)


def _draw_spine(c, book: Books, x: float, y: float, width: float, height: float):
    # Too thin to print legible text below 0.5"
    if width < 36:
        return
    c.saveState()
    c.translate(x + width / 2, y + height / 2)
    c.rotate(90)
    c.setFont(TEXT_FONT, 10)
    c.setFillColor(WHITE)
    c.drawCentredString(0, -3, book.title[:20])
    c.restoreState()


def _draw_front_cover(c, book: Books, x: float, y: float, width: float, height: float):
    design = book.cover_design or {}
    title = design.get("title") or book.title
    center = x + width / 2

    hero_key = design.get("hero_image_key")
    if hero_key:
        _draw_fitted_image(c, hero_key, x + 36, y + height * 0.2, width - 72, height * 0.6)

    text_y = _draw_centered_lines(c, title, TITLE_FONT, 40, center, y + height - 90, width - 72, WHITE)
    if design.get("subtitle"):
        _draw_centered_lines(c, design["subtitle"], TEXT_FONT, 20, center, text_y - 6, width - 72, WHITE)
    if design.get("author_line"):
        _draw_centered_lines(c, design["author_line"], TEXT_FONT, 16, center, y + 48, width - 72, WHITE)


def generate_cover_pdf(book: Books, printed_page_count: int) -> bytes:
    """Renders the one-page wrap-around cover: back | spine | front."""
    theme = _theme(book)
    cover_width, cover_height, spine_width = print_specs.cover_dimensions(printed_page_count)
    logger.info(
        f"Cover dimensions: {cover_width / 72:.3f}in x {cover_height / 72:.3f}in "
        f"(spine {spine_width / 72:.3f}in) for book {book.id}"
    )

    buffer = io.BytesIO()
    c = rl_canvas.Canvas(buffer, pagesize=(cover_width, cover_height))
    c.setTitle(f"{book.title} - cover")

    _draw_gradient_background(c, cover_width, cover_height, theme)

    back_x = BLEED + COVER_WRAP
    spine_x = back_x + TRIM_SIZE + COVER_WRAP
    front_x = spine_x + spine_width + COVER_WRAP
    content_bottom = BLEED + COVER_WRAP
    content_height = TRIM_SIZE

    _draw_back_cover(c, book, back_x, content_bottom, TRIM_SIZE, content_height)
    _draw_spine(c, book, spine_x, content_bottom, spine_width, content_height)
    _draw_front_cover(c, book, front_x, content_bottom, TRIM_SIZE, content_height)

    c.showPage()
    c.save()
    return buffer.getvalue()


# ============================================
# Main entry point
# ============================================

def generate_all_pdfs(db: Session, book: Books) -> PdfBundle:
    """
    Generates and stores both print PDFs for a book and records them on it.

    Raises:
        PdfGenerationError: if rendering or storage fails; book.print_status is reset to "editing"
    """
    logger.info(f"Generating all PDFs for book {book.id}")
    book.print_status = "generating_pdfs"
    db.commit()

    try:
        pages: List[Pages] = (
            db.query(Pages)
            .filter(Pages.book_id == book.id)
            .order_by(Pages.sort_order.asc())
            .all()
        )
        printed_page_count = print_specs.calculate_printed_page_count(len(pages))

        interior_bytes = generate_interior_pdf(book, pages)
        cover_bytes = generate_cover_pdf(book, printed_page_count)

        interior_key = storage_service.save_bytes(
            storage_service.build_key(book.user_id, book.id, "print", ".pdf"), interior_bytes
        )
        cover_key = storage_service.save_bytes(
            storage_service.build_key(book.user_id, book.id, "print", ".pdf"), cover_bytes
        )
    except Exception as e:
        logger.exception(f"Error generating PDFs for book {book.id}")
        db.rollback()
        book.print_status = "editing"
        db.commit()
        raise PdfGenerationError(f"PDF generation failed: {e}") from e

    book.interior_pdf_key = interior_key
    book.cover_pdf_key = cover_key
    book.printed_page_count = printed_page_count
    book.print_status = "pdfs_ready"
    db.commit()

    logger.info(f"PDFs ready for book {book.id} ({len(interior_bytes)} + {len(cover_bytes)} bytes)")
    return PdfBundle(
        interior_key=interior_key,
        cover_key=cover_key,
        interior_url=storage_service.public_url(interior_key),
        cover_url=storage_service.public_url(cover_key),
        printed_page_count=printed_page_count,
    )


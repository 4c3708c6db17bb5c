"""
Print specifications for the 8.5" x 8.5" square hardcover (Lulu print-on-demand).
All PDF measurements are in points (72 per inch).
"""

POINTS_PER_INCH = 72

PRINT_FORMAT = "SQUARE_85_HARDCOVER"
# 8.5" x 8.5" square hardcover, full colour, premium
POD_PACKAGE_ID = "0850X0850FCPRECW080CW444MXX"

TRIM_SIZE = 8.5 * POINTS_PER_INCH          # 612
BLEED = 0.125 * POINTS_PER_INCH            # 9
SAFE_MARGIN = 0.25 * POINTS_PER_INCH       # 18
COVER_WRAP = 0.75 * POINTS_PER_INCH        # 54

INTERIOR_WIDTH = TRIM_SIZE + BLEED * 2     # 630 (8.75")
INTERIOR_HEIGHT = TRIM_SIZE + BLEED * 2

MIN_PRINTED_PAGES = 24  # Hardcover minimum
MAX_PRINTED_PAGES = 800

# Theme colours as (r, g, b) in 0-1
THEME_COLORS = {
    "purple-magic": {"primary": (139 / 255, 92 / 255, 246 / 255), "secondary": (236 / 255, 72 / 255, 153 / 255)},
    "ocean-adventure": {"primary": (59 / 255, 130 / 255, 246 / 255), "secondary": (6 / 255, 182 / 255, 212 / 255)},
    "sunset-wonder": {"primary": (249 / 255, 115 / 255, 22 / 255), "secondary": (234 / 255, 179 / 255, 8 / 255)},
    "forest-dreams": {"primary": (34 / 255, 197 / 255, 94 / 255), "secondary": (16 / 255, 185 / 255, 129 / 255)},
}
DEFAULT_THEME = "purple-magic"


def calculate_printed_page_count(stop_count: int) -> int:
    """
    Printed pages for a book with `stop_count` story pages.
    Each stop becomes a two-page spread; short books get extra front/back matter.
    """
    story_pages = stop_count * 2
    front_matter = 4 if stop_count <= 9 else 2
    back_matter = 4 if stop_count <= 9 else 2
    return max(MIN_PRINTED_PAGES, front_matter + story_pages + back_matter)


def get_spine_width(printed_page_count: int) -> float:
    """Spine width in points from the hardcover spine table."""
    if printed_page_count <= 84:
        return 0.25 * POINTS_PER_INCH
    if printed_page_count <= 140:
        return 0.5 * POINTS_PER_INCH
    if printed_page_count <= 168:
        return 0.625 * POINTS_PER_INCH
    return 0.75 * POINTS_PER_INCH


def cover_dimensions(printed_page_count: int) -> tuple:
    """(width, height, spine_width) of the full wrap-around cover."""
    spine = get_spine_width(printed_page_count)
    width = BLEED * 2 + COVER_WRAP * 4 + TRIM_SIZE * 2 + spine
    height = BLEED * 2 + COVER_WRAP * 2 + TRIM_SIZE
    return width, height, spine

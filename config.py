"""
Central configuration for the badge renderer.

Keep runtime-safe (no secrets). Per-call overrides go through models.RenderOptions.
"""

# Page
DEFAULT_BADGE_WIDTH_CM = 8.5
DEFAULT_BADGE_HEIGHT_CM = 12.5
CM_PER_INCH = 2.54
POINTS_PER_INCH = 72.0
POINTS_PER_CM = POINTS_PER_INCH / CM_PER_INCH  # 28.3465
PAGE_BACKGROUND_COLOR = (255, 255, 255)

# Raster output
DEFAULT_DPI = 300

# Output formats
OUTPUT_PDF = "pdf"  # vector PDF (text stays text)
OUTPUT_PNG = "png"
OUTPUT_RASTER_PDF = "pdf-raster"  # PNG surface embedded in a PDF page
OUTPUT_FORMATS = (OUTPUT_PDF, OUTPUT_PNG, OUTPUT_RASTER_PDF)
MIME_TYPES = {
    OUTPUT_PDF: "application/pdf",
    OUTPUT_PNG: "image/png",
    OUTPUT_RASTER_PDF: "application/pdf",
}

# Element defaults (cm / pt), used when the stored element omits them
DEFAULT_QR_SIZE_CM = 2.5
DEFAULT_LOGO_WIDTH_CM = 3.0
DEFAULT_LOGO_HEIGHT_CM = 1.5
DEFAULT_FONT_SIZE_PT = 16
DEFAULT_TEXT_COLOR = "#000000"

# Text layout
TEXT_LINE_HEIGHT = 1.2  # multiple of the font size
TEXT_MAX_LINES = 2
TEXT_ELLIPSIS = "..."

# QR codes: one set for every output path so printed badges scan the same
QR_ERROR_CORRECTION = "H"
QR_BOX_SIZE = 10  # pixels per module in the encoded matrix image
QR_BORDER_MODULES = 1

# Assets
ASSET_FETCH_TIMEOUT_S = 10
ASSET_USER_AGENT = "event-badge-renderer/1.0"

# Fonts
DEFAULT_FONT_FAMILY = "Vera"  # bundled with reportlab, identical metrics in every backend
FONT_SEARCH_DIRS = (
    "~/.fonts",
    "~/.local/share/fonts",
    "/usr/share/fonts/truetype",
    "/usr/local/share/fonts",
    "~/Library/Fonts",
    "/Library/Fonts",
    "/System/Library/Fonts/Supplemental",
)

# UI
MAX_PREVIEW_BADGES = 10
PREVIEW_DPI = 96
PREVIEW_COLUMNS_DESKTOP = 4
PREVIEW_COLUMNS_MOBILE = 2
PREVIEW_WIDTH_DESKTOP = 180
PREVIEW_WIDTH_MOBILE = 220

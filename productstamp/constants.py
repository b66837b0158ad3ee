STANDARD_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".bmp", ".tif", ".tiff"}
HEIF_EXTENSIONS = {".heic", ".heif", ".hif"}
SUPPORTED_EXTENSIONS = STANDARD_EXTENSIONS | HEIF_EXTENSIONS

CORNER_TOP_LEFT = "top-left"
CORNER_TOP_RIGHT = "top-right"
CORNER_BOTTOM_LEFT = "bottom-left"
CORNER_BOTTOM_RIGHT = "bottom-right"
VALID_CORNERS = {
    CORNER_TOP_LEFT,
    CORNER_TOP_RIGHT,
    CORNER_BOTTOM_LEFT,
    CORNER_BOTTOM_RIGHT,
}

DEFAULT_LOGO_POSITION = CORNER_TOP_RIGHT
DEFAULT_PRICE_POSITION = CORNER_BOTTOM_RIGHT
DEFAULT_PRICE_TEXT_COLOR = "#FFFFFF"
DEFAULT_PRICE_BACKGROUND_COLOR = "#E11D48"

CANVAS_SIZE = 720
CANVAS_BACKGROUND = "#FFFFFF"
SUBJECT_FIT_RATIO = 0.9
CORNER_PADDING = 40
LOGO_MAX_SIZE = 150

PRICE_FONT_SIZE = 56
PRICE_PADDING = 16
PRICE_CORNER_RADIUS = 12
SHADOW_BLUR = 10
SHADOW_OFFSET_Y = 5
SHADOW_OPACITY = 0.3

EXPORT_QUALITY = 0.95

DEFAULT_CUTOUT_MODEL = "isnet-general-use"

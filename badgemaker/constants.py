BASELINE_SIZE = 980

ZOOM_MIN = 1.0
ZOOM_MAX = 3.0
WHEEL_ZOOM_STEP = 0.05
BUTTON_ZOOM_STEP = 0.1

PHOTO_CORNER_RADIUS = 15
PHOTO_BORDER_WIDTH = 2

NAME_FONT_HEIGHT_RATIO = 0.35
NAME_MAX_WIDTH_RATIO = 0.9
NAME_FONT_FLOOR = 12
NAME_FONT_STEP = 2
NAME_LINE_SPACING = 1.2
NAME_MAX_LENGTH = 30

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp", ".gif", ".bmp", ".tif", ".tiff"}
HEIF_EXTENSIONS = {".heic", ".heif", ".hif"}
SUPPORTED_EXTENSIONS = IMAGE_EXTENSIONS | HEIF_EXTENSIONS

DEFAULT_TEMPLATE_ID = "attending"
EXPORT_NAME_TEMPLATE = "{template_id}-badge.png"

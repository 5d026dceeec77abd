"""
Shared configuration and constants.
"""

# Standard Library
import dataclasses

# local repo modules
import bulk_certificate as bcm
import bulk_certificate.errors


DEFAULT_FIELD_SIZE = 40.0
DEFAULT_FIELD_POSITION = 100
DEFAULT_COLOR = "#000000"
MIN_SCALE = 0.1
MAX_ROTATION = 360
RESIZE_SENSITIVITY = 100.0
RASTER_SCALE = 2.0
IMAGE_QUALITY = 100

DEFAULT_FONT = "Helvetica-Bold"
STANDARD_FONTS = {
	"Helvetica": "Helvetica",
	"Helvetica-Bold": "Helvetica Bold",
	"Times-Roman": "Times Roman",
	"Times-Bold": "Times Roman Bold",
	"Courier": "Courier",
}
CUSTOM_FONT_PREFIX = "Custom"

OUTPUT_EXTENSIONS = {
	"pdf": ".pdf",
	"png": ".png",
	"jpg": ".jpg",
	"webp": ".webp",
}
PIL_FORMATS = {
	"png": "PNG",
	"jpg": "JPEG",
	"webp": "WEBP",
}
ALPHA_FORMATS = {"png", "webp"}
# encoder settings for the best quality each format offers
IMAGE_SAVE_OPTIONS = {
	"png": {},
	"jpg": {"quality": IMAGE_QUALITY},
	"webp": {"lossless": True, "quality": IMAGE_QUALITY},
}
DEFAULT_OUTPUT_KIND = "pdf"

RASTER_MEDIA_TYPES = {"image/png", "image/jpeg", "image/jpg"}
RASTER_SUFFIXES = {".png", ".jpg", ".jpeg"}
VECTOR_MEDIA_TYPES = {"application/pdf"}
VECTOR_SUFFIXES = {".pdf"}

DEFAULT_ARCHIVE_NAME = "certificates.zip"
DEFAULT_PRESET_NAME = "certificate-preset.json"
REMOTE_TIMEOUT = 30.0
PROGRESS_BAR_WIDTH = 20
PROGRESS_UPDATE_EVERY = 10


@dataclasses.dataclass
class BatchConfig:
	archive_name: str = DEFAULT_ARCHIVE_NAME
	verbose: bool = True


#============================================
def normalize_output_kind(output_kind: str) -> str:
	"""
	Normalize an output kind name.

	Args:
		output_kind: Kind such as "pdf", "PNG" or "jpeg".

	Returns:
		One of the OUTPUT_EXTENSIONS keys.
	"""
	normalized = (output_kind or "").strip().lower()
	if normalized == "jpeg":
		normalized = "jpg"
	if normalized not in OUTPUT_EXTENSIONS:
		raise bcm.errors.ValidationError(f"Unsupported output kind: {output_kind}")
	return normalized


#============================================
def output_extension(output_kind: str) -> str:
	return OUTPUT_EXTENSIONS[normalize_output_kind(output_kind)]


#============================================
def is_image_kind(output_kind: str) -> bool:
	"""
	Return True when the output kind is a raster image format.
	"""
	return normalize_output_kind(output_kind) in PIL_FORMATS

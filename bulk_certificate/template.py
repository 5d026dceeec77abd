"""
Template loading for PDF documents and raster images.
"""

# Standard Library
import dataclasses
import io
import pathlib

# PIP3 modules
import PIL.Image
import pypdf

# local repo modules
import bulk_certificate as bcm
import bulk_certificate.config
import bulk_certificate.errors
import bulk_certificate.fields


RASTER_MEDIA_TYPES = bcm.config.RASTER_MEDIA_TYPES
RASTER_SUFFIXES = bcm.config.RASTER_SUFFIXES
VECTOR_MEDIA_TYPES = bcm.config.VECTOR_MEDIA_TYPES
VECTOR_SUFFIXES = bcm.config.VECTOR_SUFFIXES

IngestionError = bcm.errors.IngestionError

KIND_VECTOR = "vector"
KIND_RASTER = "raster"


@dataclasses.dataclass(frozen=True)
class TemplateAsset:
	kind: str
	width: float
	height: float
	data: bytes = dataclasses.field(repr=False)


#============================================
def detect_template_kind(file_name: str | None, media_type: str | None) -> str:
	"""
	Decide whether an upload is a vector document or a raster image.

	Args:
		file_name: Uploaded file name.
		media_type: Declared media type.

	Returns:
		KIND_VECTOR or KIND_RASTER.
	"""
	if media_type:
		normalized = media_type.split(";", 1)[0].strip().lower()
		if normalized in VECTOR_MEDIA_TYPES:
			return KIND_VECTOR
		if normalized in RASTER_MEDIA_TYPES or normalized.startswith("image/"):
			return KIND_RASTER
	if file_name:
		suffix = pathlib.Path(file_name).suffix.lower()
		if suffix in VECTOR_SUFFIXES:
			return KIND_VECTOR
		if suffix in RASTER_SUFFIXES:
			return KIND_RASTER
	raise IngestionError(f"Unsupported template type: {media_type or file_name or 'unknown'}")


#============================================
def read_raster_size(data: bytes) -> tuple[int, int]:
	"""
	Decode an image and return its pixel size.
	"""
	try:
		with PIL.Image.open(io.BytesIO(data)) as image:
			image.load()
			width, height = image.size
	except (PIL.UnidentifiedImageError, OSError, ValueError) as exc:
		raise IngestionError(f"Could not decode template image: {exc}") from exc
	if width <= 0 or height <= 0:
		raise IngestionError("Template image has no pixels.")
	return (width, height)


#============================================
def read_vector_size(data: bytes) -> tuple[float, float]:
	"""
	Read the first page size of a PDF at native scale.

	Args:
		data: PDF bytes.

	Returns:
		Tuple of (width, height) in points.
	"""
	try:
		reader = pypdf.PdfReader(io.BytesIO(data))
		page_count = len(reader.pages)
		if page_count == 0:
			raise IngestionError("Template PDF has no pages.")
		# visible area; falls back to the mediabox when no cropbox is set
		cropbox = reader.pages[0].cropbox
		width = float(cropbox.width)
		height = float(cropbox.height)
	except IngestionError:
		raise
	except Exception as exc:
		raise IngestionError(f"Could not read template PDF: {exc}") from exc
	if width <= 0 or height <= 0:
		raise IngestionError("Template PDF page has no area.")
	return (width, height)


#============================================
def read_template(
	data: bytes,
	file_name: str | None = None,
	media_type: str | None = None,
) -> TemplateAsset:
	"""
	Build a TemplateAsset from uploaded bytes.

	Args:
		data: Raw file bytes.
		file_name: Uploaded file name.
		media_type: Declared media type.

	Returns:
		TemplateAsset.
	"""
	if not data:
		raise IngestionError("Template file is empty.")
	kind = detect_template_kind(file_name, media_type)
	if kind == KIND_RASTER:
		width, height = read_raster_size(data)
	else:
		width, height = read_vector_size(data)
	return TemplateAsset(kind=kind, width=width, height=height, data=bytes(data))


#============================================
def ingest_template(
	state,
	data: bytes,
	file_name: str | None = None,
	media_type: str | None = None,
) -> TemplateAsset:
	"""
	Load a template into the app state and recenter every field on it.

	Nothing on the state changes when the template cannot be read.

	Args:
		state: AppState.
		data: Raw file bytes.
		file_name: Uploaded file name.
		media_type: Declared media type.

	Returns:
		The installed TemplateAsset.
	"""
	template = read_template(data, file_name, media_type)
	state.template = template
	bcm.fields.recenter_fields(state, template.width, template.height)
	return template


#============================================
def ingest_template_path(state, path: pathlib.Path) -> TemplateAsset:
	try:
		data = path.read_bytes()
	except OSError as exc:
		raise IngestionError(f"Could not read template file {path}: {exc}") from exc
	return ingest_template(state, data, file_name=path.name)

"""
Rendering of one data row onto a fresh copy of the template.
"""

# Standard Library
import dataclasses
import hashlib
import io

# PIP3 modules
import fitz
import PIL.Image
import pypdf
import reportlab.lib.utils
import reportlab.pdfbase.pdfmetrics
import reportlab.pdfbase.ttfonts
import reportlab.pdfgen.canvas

# local repo modules
import bulk_certificate as bcm
import bulk_certificate.config
import bulk_certificate.fields
import bulk_certificate.template


DEFAULT_FONT = bcm.config.DEFAULT_FONT
CUSTOM_FONT_PREFIX = bcm.config.CUSTOM_FONT_PREFIX
RASTER_SCALE = bcm.config.RASTER_SCALE
IMAGE_SAVE_OPTIONS = bcm.config.IMAGE_SAVE_OPTIONS
PIL_FORMATS = bcm.config.PIL_FORMATS
ALPHA_FORMATS = bcm.config.ALPHA_FORMATS

TextField = bcm.fields.TextField
FontAsset = bcm.fields.FontAsset
TemplateAsset = bcm.template.TemplateAsset
KIND_RASTER = bcm.template.KIND_RASTER

BASE14_FONTS = {
	"Courier",
	"Courier-Bold",
	"Courier-Oblique",
	"Courier-BoldOblique",
	"Helvetica",
	"Helvetica-Bold",
	"Helvetica-Oblique",
	"Helvetica-BoldOblique",
	"Times-Roman",
	"Times-Bold",
	"Times-Italic",
	"Times-BoldItalic",
	"Symbol",
	"ZapfDingbats",
}


@dataclasses.dataclass
class DrawCommand:
	text: str
	x: float
	y: float
	font_name: str
	size: float
	color: tuple[float, float, float]
	x_scale: float
	y_scale: float
	rotate: int


#============================================
def register_custom_font(asset: FontAsset) -> str:
	"""
	Register uploaded TrueType bytes with ReportLab.

	The registered name is derived from the font bytes so the same upload
	maps to the same name across jobs.

	Args:
		asset: Custom FontAsset.

	Returns:
		ReportLab font name.
	"""
	digest = hashlib.sha1(asset.data).hexdigest()[:12]
	font_name = f"{CUSTOM_FONT_PREFIX}-{digest}"
	if font_name not in reportlab.pdfbase.pdfmetrics.getRegisteredFontNames():
		font = reportlab.pdfbase.ttfonts.TTFont(font_name, io.BytesIO(asset.data))
		reportlab.pdfbase.pdfmetrics.registerFont(font)
	return font_name


class FontCache:
	"""
	Font references resolved for a single render job.

	Each font reference is embedded at most once per job. A cache is never
	shared between jobs.
	"""

	def __init__(self, fonts: list[FontAsset]):
		self.fonts = {font.value: font for font in fonts}
		self.entries: dict[str, str] = {}
		self.embed_count = 0

	def resolve(self, font_ref: str) -> str:
		if font_ref not in self.entries:
			self.entries[font_ref] = self.embed(font_ref)
		return self.entries[font_ref]

	def embed(self, font_ref: str) -> str:
		"""
		Embed a font reference and return the ReportLab font name.

		Custom fonts are embedded from their bytes, built-in fonts by name.
		A reference to a font that is no longer loaded falls back to the
		default font.
		"""
		self.embed_count += 1
		asset = self.fonts.get(font_ref)
		if asset is not None and asset.custom:
			return register_custom_font(asset)
		if font_ref in BASE14_FONTS:
			return font_ref
		print(f"[WARN] Font '{font_ref}' is unavailable. Falling back to '{DEFAULT_FONT}'.")
		return DEFAULT_FONT


#============================================
def resolve_text(field: TextField, values: dict[str, str]) -> str:
	"""
	Look up the row value bound to a field.

	Returns:
		Cell text, or an empty string when the column is unset or missing.
	"""
	if not field.column:
		return ""
	value = values.get(field.column)
	if value is None:
		return ""
	return str(value)


#============================================
def plan_row(
	fields: list[TextField],
	values: dict[str, str],
	font_cache: FontCache,
) -> list[DrawCommand]:
	"""
	Build the draw commands for one data row.

	Fields whose value is blank are skipped. Each text is centered on its
	field anchor using the width scaled by the horizontal scale factor.

	Args:
		fields: Layout fields.
		values: Row values by column name.
		font_cache: Font cache owned by the current job.

	Returns:
		List of DrawCommand entries in field order.
	"""
	commands: list[DrawCommand] = []
	for field in fields:
		text = resolve_text(field, values)
		if not text.strip():
			continue
		font_name = font_cache.resolve(field.font)
		text_width = reportlab.pdfbase.pdfmetrics.stringWidth(text, font_name, field.size)
		commands.append(
			DrawCommand(
				text=text,
				x=field.x - (text_width * field.scale_x) / 2.0,
				y=float(field.y),
				font_name=font_name,
				size=field.size,
				color=bcm.fields.parse_hex_color(field.color),
				x_scale=field.scale_x,
				y_scale=field.scale_y,
				rotate=field.rotate,
			)
		)
	return commands


#============================================
def draw_command(pdf: reportlab.pdfgen.canvas.Canvas, command: DrawCommand) -> None:
	"""
	Draw one command onto the canvas.

	Rotation turns around the text origin, clockwise as seen on screen.

	Args:
		pdf: ReportLab canvas.
		command: DrawCommand to draw.
	"""
	pdf.saveState()
	pdf.setFillColorRGB(command.color[0], command.color[1], command.color[2])
	pdf.setFont(command.font_name, command.size)
	pdf.translate(command.x, command.y)
	if command.rotate:
		pdf.rotate(-command.rotate)
	if command.x_scale != 1.0 or command.y_scale != 1.0:
		pdf.scale(command.x_scale, command.y_scale)
	pdf.drawString(0, 0, command.text)
	pdf.restoreState()


#============================================
def build_overlay_page(
	width: float,
	height: float,
	commands: list[DrawCommand],
) -> pypdf.PageObject:
	"""
	Build a transparent PDF page holding only the drawn text.

	Args:
		width: Page width in points.
		height: Page height in points.
		commands: Draw commands.

	Returns:
		PDF page object.
	"""
	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(buffer, pagesize=(width, height))
	for command in commands:
		draw_command(pdf, command)
	pdf.save()
	buffer.seek(0)
	reader = pypdf.PdfReader(buffer)
	return reader.pages[0]


#============================================
def render_vector_job(template: TemplateAsset, commands: list[DrawCommand]) -> bytes:
	"""
	Draw commands onto page 1 of a fresh copy of a PDF template.

	Args:
		template: Vector TemplateAsset.
		commands: Draw commands.

	Returns:
		PDF bytes.
	"""
	reader = pypdf.PdfReader(io.BytesIO(template.data))
	writer = pypdf.PdfWriter()
	for page in reader.pages:
		writer.add_page(page)
	if commands:
		page = writer.pages[0]
		overlay = build_overlay_page(template.width, template.height, commands)
		cropbox = page.cropbox
		transform = pypdf.Transformation().translate(float(cropbox.left), float(cropbox.bottom))
		page.merge_transformed_page(overlay, transform)
	buffer = io.BytesIO()
	writer.write(buffer)
	return buffer.getvalue()


#============================================
def open_template_image(template: TemplateAsset) -> PIL.Image.Image:
	image = PIL.Image.open(io.BytesIO(template.data))
	image.load()
	if image.mode in ("RGB", "RGBA"):
		return image
	if "A" in image.getbands() or "transparency" in image.info:
		return image.convert("RGBA")
	return image.convert("RGB")


#============================================
def render_raster_job(template: TemplateAsset, commands: list[DrawCommand]) -> bytes:
	"""
	Draw commands onto a new single-page PDF with the image as background.

	Args:
		template: Raster TemplateAsset.
		commands: Draw commands.

	Returns:
		PDF bytes.
	"""
	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(buffer, pagesize=(template.width, template.height))
	image_reader = reportlab.lib.utils.ImageReader(open_template_image(template))
	pdf.drawImage(
		image_reader,
		0,
		0,
		width=template.width,
		height=template.height,
		mask="auto",
		preserveAspectRatio=False,
		anchor="sw",
	)
	for command in commands:
		draw_command(pdf, command)
	pdf.showPage()
	pdf.save()
	return buffer.getvalue()


#============================================
def render_document(
	template: TemplateAsset,
	fields: list[TextField],
	fonts: list[FontAsset],
	values: dict[str, str],
) -> bytes:
	"""
	Run one render job and return the PDF bytes.

	Args:
		template: TemplateAsset.
		fields: Layout fields.
		fonts: Loaded FontAsset entries.
		values: Row values by column name.

	Returns:
		PDF bytes.
	"""
	font_cache = FontCache(fonts)
	commands = plan_row(fields, values, font_cache)
	if template.kind == KIND_RASTER:
		return render_raster_job(template, commands)
	return render_vector_job(template, commands)


#============================================
def rasterize_pdf(pdf_bytes: bytes, output_kind: str, scale: float = RASTER_SCALE) -> bytes:
	"""
	Render page 1 of a PDF and encode it as an image.

	Formats without an alpha channel get a white background.

	Args:
		pdf_bytes: PDF bytes.
		output_kind: Image output kind.
		scale: Render scale factor.

	Returns:
		Encoded image bytes.
	"""
	kind = bcm.config.normalize_output_kind(output_kind)
	document = fitz.open(stream=pdf_bytes, filetype="pdf")
	try:
		page = document[0]
		matrix = fitz.Matrix(scale, scale)
		pixmap = page.get_pixmap(matrix=matrix, alpha=True)
		image = PIL.Image.frombytes("RGBA", [pixmap.width, pixmap.height], pixmap.samples)
	finally:
		document.close()
	if kind not in ALPHA_FORMATS:
		background = PIL.Image.new("RGB", image.size, (255, 255, 255))
		background.paste(image, mask=image.getchannel("A"))
		image = background
	buffer = io.BytesIO()
	image.save(buffer, format=PIL_FORMATS[kind], **IMAGE_SAVE_OPTIONS[kind])
	return buffer.getvalue()


#============================================
def render_row(
	template: TemplateAsset,
	fields: list[TextField],
	fonts: list[FontAsset],
	values: dict[str, str],
	output_kind: str,
) -> bytes:
	"""
	Render one row to the requested output kind.
	"""
	pdf_bytes = render_document(template, fields, fonts, values)
	if bcm.config.is_image_kind(output_kind):
		return rasterize_pdf(pdf_bytes, output_kind)
	return pdf_bytes

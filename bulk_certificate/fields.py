"""
Text field and font models plus their mutation rules.
"""

# Standard Library
import dataclasses
import math
import re
import uuid

# local repo modules
import bulk_certificate as bcm
import bulk_certificate.config
import bulk_certificate.errors


DEFAULT_FIELD_SIZE = bcm.config.DEFAULT_FIELD_SIZE
DEFAULT_FIELD_POSITION = bcm.config.DEFAULT_FIELD_POSITION
DEFAULT_COLOR = bcm.config.DEFAULT_COLOR
DEFAULT_FONT = bcm.config.DEFAULT_FONT
MIN_SCALE = bcm.config.MIN_SCALE
MAX_ROTATION = bcm.config.MAX_ROTATION

ValidationError = bcm.errors.ValidationError

HEX_COLOR_PATTERN = re.compile(r"^#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})$", re.IGNORECASE)
NUMERIC_KEYS = {"x", "y", "size", "scale_x", "scale_y", "rotate"}
FIELD_KEYS = NUMERIC_KEYS | {"column", "font", "color", "lock_ratio"}


@dataclasses.dataclass
class TextField:
	field_id: str
	column: str | None = None
	x: int = DEFAULT_FIELD_POSITION
	y: int = DEFAULT_FIELD_POSITION
	size: float = DEFAULT_FIELD_SIZE
	font: str = DEFAULT_FONT
	color: str = DEFAULT_COLOR
	scale_x: float = 1.0
	scale_y: float = 1.0
	rotate: int = 0
	lock_ratio: bool = True


@dataclasses.dataclass
class FontAsset:
	label: str
	value: str
	data: bytes
	custom: bool = True


#============================================
def new_field_id() -> str:
	return uuid.uuid4().hex


#============================================
def coerce_number(value, previous: float) -> float:
	"""
	Coerce external input to a finite number.

	Args:
		value: Raw value, usually a string from a form or a preset.
		previous: Value kept when the input is not numeric.

	Returns:
		Parsed number or the previous value.
	"""
	if value is None or isinstance(value, bool):
		return previous
	if isinstance(value, str):
		value = value.strip()
		if not value:
			return previous
	try:
		number = float(value)
	except (TypeError, ValueError):
		return previous
	if not math.isfinite(number):
		return previous
	return number


#============================================
def coerce_bool(value, previous: bool) -> bool:
	if isinstance(value, bool):
		return value
	if isinstance(value, str):
		lowered = value.strip().lower()
		if lowered in ("true", "1", "yes", "on"):
			return True
		if lowered in ("false", "0", "no", "off"):
			return False
		return previous
	if isinstance(value, (int, float)):
		return bool(value)
	return previous


#============================================
def parse_hex_color(value: str) -> tuple[float, float, float]:
	"""
	Parse a hex color string into RGB floats.

	Args:
		value: Color string like "#AABBCC".

	Returns:
		Tuple of (r, g, b) in 0.0-1.0 range, black when unparseable.
	"""
	if not isinstance(value, str):
		return (0.0, 0.0, 0.0)
	match = HEX_COLOR_PATTERN.match(value.strip())
	if match is None:
		return (0.0, 0.0, 0.0)
	red = int(match.group(1), 16) / 255.0
	green = int(match.group(2), 16) / 255.0
	blue = int(match.group(3), 16) / 255.0
	return (red, green, blue)


#============================================
def normalize_color(value) -> str:
	"""
	Normalize a color to "#rrggbb", falling back to black.
	"""
	if not isinstance(value, str):
		return DEFAULT_COLOR
	match = HEX_COLOR_PATTERN.match(value.strip())
	if match is None:
		return DEFAULT_COLOR
	return "#" + "".join(match.groups()).lower()


#============================================
def clamp_scale(value: float) -> float:
	return max(MIN_SCALE, value)


#============================================
def wrap_rotation(value: float) -> int:
	return int(round(value)) % MAX_ROTATION


#============================================
def default_position(state) -> tuple[int, int]:
	"""
	Compute the default anchor for a new field.

	Args:
		state: AppState.

	Returns:
		Template center, or a fixed fallback when no template is loaded.
	"""
	template = state.template
	if template is None or template.width <= 0 or template.height <= 0:
		return (DEFAULT_FIELD_POSITION, DEFAULT_FIELD_POSITION)
	return (int(round(template.width / 2.0)), int(round(template.height / 2.0)))


#============================================
def make_field(state) -> TextField:
	"""
	Build a field with default attributes for the current template.
	"""
	x, y = default_position(state)
	column = None
	if state.dataset.headers:
		column = state.dataset.headers[0]
	return TextField(field_id=new_field_id(), column=column, x=x, y=y)


#============================================
def find_field(state, field_id: str) -> TextField:
	"""
	Look up a field by id.

	Args:
		state: AppState.
		field_id: Field id.

	Returns:
		Matching TextField.
	"""
	for field in state.fields:
		if field.field_id == field_id:
			return field
	raise ValidationError(f"Unknown field: {field_id}")


#============================================
def active_field(state) -> TextField:
	return find_field(state, state.active_field_id)


#============================================
def set_active_field(state, field_id: str) -> TextField:
	field = find_field(state, field_id)
	state.active_field_id = field.field_id
	return field


#============================================
def add_field(state) -> TextField:
	"""
	Append a new default field and make it active.

	Args:
		state: AppState.

	Returns:
		The new TextField.
	"""
	field = make_field(state)
	state.fields.append(field)
	state.active_field_id = field.field_id
	return field


#============================================
def remove_field(state, field_id: str) -> None:
	"""
	Remove a field. The last remaining field cannot be removed.

	Args:
		state: AppState.
		field_id: Field id to remove.
	"""
	field = find_field(state, field_id)
	if len(state.fields) <= 1:
		raise ValidationError("At least one text field is required.")
	state.fields = [item for item in state.fields if item.field_id != field.field_id]
	if state.active_field_id == field.field_id:
		state.active_field_id = state.fields[0].field_id


#============================================
def update_field(state, field_id: str, key: str, value) -> TextField:
	"""
	Update one attribute of a field.

	Numeric attributes are coerced and range-checked; input that does not
	parse leaves the previous value in place. With lock_ratio set, writing
	either scale axis writes both.

	Args:
		state: AppState.
		field_id: Field id.
		key: Attribute name.
		value: Raw value.

	Returns:
		The updated TextField.
	"""
	if key not in FIELD_KEYS:
		raise ValidationError(f"Unknown field attribute: {key}")
	field = find_field(state, field_id)

	if key in ("x", "y"):
		previous = getattr(field, key)
		setattr(field, key, int(round(coerce_number(value, previous))))
	elif key == "size":
		number = coerce_number(value, field.size)
		if number > 0:
			field.size = number
	elif key in ("scale_x", "scale_y"):
		number = coerce_number(value, None)
		if number is None:
			return field
		number = clamp_scale(number)
		if field.lock_ratio:
			field.scale_x = number
			field.scale_y = number
		else:
			setattr(field, key, number)
	elif key == "rotate":
		field.rotate = wrap_rotation(coerce_number(value, field.rotate))
	elif key == "lock_ratio":
		field.lock_ratio = coerce_bool(value, field.lock_ratio)
	elif key == "color":
		field.color = normalize_color(value)
	elif key == "font":
		if isinstance(value, str) and value.strip():
			field.font = value.strip()
	elif key == "column":
		if value is None or (isinstance(value, str) and not value.strip()):
			field.column = None
		else:
			field.column = str(value)
	return field


#============================================
def recenter_fields(state, width: float, height: float) -> None:
	"""
	Move every field to the center of a page.

	Args:
		state: AppState.
		width: Page width in document units.
		height: Page height in document units.
	"""
	center_x = int(round(width / 2.0))
	center_y = int(round(height / 2.0))
	for field in state.fields:
		field.x = center_x
		field.y = center_y


#============================================
def place_active_field(state, doc_x: float, doc_y: float) -> TextField:
	"""
	Move the active field anchor to a document coordinate.
	"""
	field = active_field(state)
	field.x = int(round(doc_x))
	field.y = int(round(doc_y))
	return field


#============================================
def bind_columns(state, headers: list[str]) -> None:
	"""
	Bind the first header to fields whose column is unset or missing.

	Args:
		state: AppState.
		headers: Dataset headers in order.
	"""
	if not headers:
		return
	for field in state.fields:
		if field.column is None or field.column not in headers:
			field.column = headers[0]


#============================================
def find_font(state, value: str) -> FontAsset | None:
	for font in state.fonts:
		if font.value == value:
			return font
	return None


#============================================
def add_fonts(
	state,
	uploads: list[tuple[str, bytes]],
	assign_active: bool = True,
) -> list[FontAsset]:
	"""
	Register uploaded font files and assign the first one to the active field.

	Args:
		state: AppState.
		uploads: List of (file_name, font_bytes).
		assign_active: Give the active field the first uploaded font.

	Returns:
		New FontAsset entries.
	"""
	new_fonts: list[FontAsset] = []
	for file_name, data in uploads:
		if not data:
			raise ValidationError(f"Font file is empty: {file_name}")
		asset = find_font(state, file_name)
		if asset is None:
			asset = FontAsset(label=file_name, value=file_name, data=bytes(data), custom=True)
			state.fonts.append(asset)
		else:
			# same file name uploaded again replaces the bytes in place
			asset.data = bytes(data)
		new_fonts.append(asset)
	if new_fonts and assign_active:
		update_field(state, state.active_field_id, "font", new_fonts[0].value)
	return new_fonts


#============================================
def font_choices(state) -> list[tuple[str, str]]:
	"""
	List (value, label) pairs for a font picker, built-in fonts first.
	"""
	choices = list(bcm.config.STANDARD_FONTS.items())
	for font in state.fonts:
		choices.append((font.value, font.label))
	return choices

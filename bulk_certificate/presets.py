"""
Layout preset export and import.
"""

# Standard Library
import json
import pathlib

# local repo modules
import bulk_certificate as bcm
import bulk_certificate.config
import bulk_certificate.errors
import bulk_certificate.fields


DEFAULT_FIELD_SIZE = bcm.config.DEFAULT_FIELD_SIZE
DEFAULT_FIELD_POSITION = bcm.config.DEFAULT_FIELD_POSITION
DEFAULT_FONT = bcm.config.DEFAULT_FONT

TextField = bcm.fields.TextField
PresetError = bcm.errors.PresetError


#============================================
def field_to_record(field: TextField) -> dict:
	"""
	Convert a field to a preset record.

	Args:
		field: TextField.

	Returns:
		JSON-ready dict in the extended preset layout.
	"""
	font_value = field.font if isinstance(field.font, str) and field.font else DEFAULT_FONT
	return {
		"colName": field.column or "",
		"x": field.x,
		"y": field.y,
		"size": field.size,
		"fontValue": font_value,
		"color": bcm.fields.normalize_color(field.color),
		"scaleX": field.scale_x,
		"scaleY": field.scale_y,
		"rotate": field.rotate,
		"lockRatio": field.lock_ratio,
	}


#============================================
def record_to_field(record: dict) -> TextField:
	"""
	Convert a preset record to a new field.

	Records saved before scale, rotation and ratio lock existed get
	scale 1, rotation 0 and the ratio lock on.

	Args:
		record: Preset record.

	Returns:
		TextField with a fresh id.
	"""
	if not isinstance(record, dict):
		raise PresetError("Preset entries must be objects.")
	coerce = bcm.fields.coerce_number
	column = record.get("colName")
	size = coerce(record.get("size"), DEFAULT_FIELD_SIZE)
	if size <= 0:
		size = DEFAULT_FIELD_SIZE
	font_value = record.get("fontValue")
	if not isinstance(font_value, str) or not font_value.strip():
		font_value = DEFAULT_FONT
	return TextField(
		field_id=bcm.fields.new_field_id(),
		column=str(column) if column else None,
		x=int(round(coerce(record.get("x"), DEFAULT_FIELD_POSITION))),
		y=int(round(coerce(record.get("y"), DEFAULT_FIELD_POSITION))),
		size=size,
		font=font_value.strip(),
		color=bcm.fields.normalize_color(record.get("color")),
		scale_x=bcm.fields.clamp_scale(coerce(record.get("scaleX"), 1.0)),
		scale_y=bcm.fields.clamp_scale(coerce(record.get("scaleY"), 1.0)),
		rotate=bcm.fields.wrap_rotation(coerce(record.get("rotate"), 0)),
		lock_ratio=bcm.fields.coerce_bool(record.get("lockRatio"), True),
	)


#============================================
def dumps_preset(fields: list[TextField]) -> str:
	records = [field_to_record(field) for field in fields]
	return json.dumps(records, indent=2)


#============================================
def parse_preset(text: str) -> list[TextField]:
	"""
	Parse preset JSON into new fields.

	Args:
		text: Preset JSON text.

	Returns:
		List of TextField entries, never empty.
	"""
	try:
		records = json.loads(text)
	except (TypeError, ValueError) as exc:
		raise PresetError(f"Preset is not valid JSON: {exc}") from exc
	if not isinstance(records, list):
		raise PresetError("Preset must be a list of field records.")
	if not records:
		raise PresetError("Preset has no fields.")
	return [record_to_field(record) for record in records]


#============================================
def import_preset(state, text: str) -> list[TextField]:
	"""
	Replace the fields on the app state with a preset.

	The current fields stay in place when the preset is malformed.

	Args:
		state: AppState.
		text: Preset JSON text.

	Returns:
		The imported fields.
	"""
	fields = parse_preset(text)
	state.fields = fields
	state.active_field_id = fields[0].field_id
	return fields


#============================================
def load_preset_path(state, path: pathlib.Path) -> list[TextField]:
	try:
		text = path.read_text(encoding="utf-8")
	except (OSError, UnicodeDecodeError) as exc:
		raise PresetError(f"Could not read preset {path}: {exc}") from exc
	return import_preset(state, text)


#============================================
def save_preset_path(state, path: pathlib.Path) -> None:
	"""
	Write the current fields as a preset file.

	Args:
		state: AppState.
		path: Output JSON path.
	"""
	with path.open("w", encoding="utf-8") as handle:
		handle.write(dumps_preset(state.fields))
		handle.write("\n")

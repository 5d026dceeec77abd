# PIP3 modules
import pytest

# local repo modules
import bulk_certificate.errors
import bulk_certificate.fields as fields
import bulk_certificate.template


#============================================
def test_new_state_has_one_active_field(app_state) -> None:
	assert len(app_state.fields) == 1
	assert app_state.active_field_id == app_state.fields[0].field_id


#============================================
def test_locked_scale_writes_both_axes(app_state) -> None:
	field_id = app_state.active_field_id
	field = fields.update_field(app_state, field_id, "scale_x", "1.5")
	assert field.scale_x == 1.5
	assert field.scale_y == 1.5
	field = fields.update_field(app_state, field_id, "scale_y", 0.8)
	assert field.scale_x == 0.8
	assert field.scale_y == 0.8


#============================================
def test_unlocked_scale_axes_are_independent(app_state) -> None:
	field_id = app_state.active_field_id
	fields.update_field(app_state, field_id, "lock_ratio", False)
	fields.update_field(app_state, field_id, "scale_x", 2.0)
	field = fields.update_field(app_state, field_id, "scale_y", 0.5)
	assert field.scale_x == 2.0
	assert field.scale_y == 0.5


#============================================
def test_toggling_lock_keeps_existing_scales(app_state) -> None:
	field_id = app_state.active_field_id
	fields.update_field(app_state, field_id, "lock_ratio", False)
	fields.update_field(app_state, field_id, "scale_x", 2.0)
	fields.update_field(app_state, field_id, "scale_y", 0.5)
	field = fields.update_field(app_state, field_id, "lock_ratio", True)
	assert field.lock_ratio is True
	assert field.scale_x == 2.0
	assert field.scale_y == 0.5


#============================================
def test_scale_is_clamped_to_minimum(app_state) -> None:
	field = fields.update_field(app_state, app_state.active_field_id, "scale_x", -3)
	assert field.scale_x == pytest.approx(0.1)
	assert field.scale_y == pytest.approx(0.1)


#============================================
@pytest.mark.parametrize("key", ["x", "y", "size", "scale_x", "scale_y", "rotate"])
@pytest.mark.parametrize("raw_value", ["abc", "", None, "nan"])
def test_non_numeric_input_keeps_previous_value(app_state, key: str, raw_value) -> None:
	field = app_state.fields[0]
	before = getattr(field, key)
	fields.update_field(app_state, field.field_id, key, raw_value)
	assert getattr(field, key) == before


#============================================
def test_rotation_wraps_into_range(app_state) -> None:
	field_id = app_state.active_field_id
	assert fields.update_field(app_state, field_id, "rotate", 370).rotate == 10
	assert fields.update_field(app_state, field_id, "rotate", -90).rotate == 270


#============================================
def test_non_positive_size_is_rejected(app_state) -> None:
	field = fields.update_field(app_state, app_state.active_field_id, "size", 0)
	assert field.size == 40.0


#============================================
@pytest.mark.parametrize(
	"raw_color,expected",
	[("#AABBCC", "#aabbcc"), ("00ff00", "#00ff00"), ("red", "#000000"), ("#abc", "#000000")],
)
def test_color_normalization(app_state, raw_color: str, expected: str) -> None:
	field = fields.update_field(app_state, app_state.active_field_id, "color", raw_color)
	assert field.color == expected


#============================================
def test_parse_hex_color_falls_back_to_black() -> None:
	assert fields.parse_hex_color("#ff0000") == (1.0, 0.0, 0.0)
	assert fields.parse_hex_color("not a color") == (0.0, 0.0, 0.0)


#============================================
def test_unknown_attribute_raises(app_state) -> None:
	with pytest.raises(bulk_certificate.errors.ValidationError):
		fields.update_field(app_state, app_state.active_field_id, "opacity", 1)


#============================================
def test_add_field_becomes_active(app_state) -> None:
	field = fields.add_field(app_state)
	assert len(app_state.fields) == 2
	assert app_state.active_field_id == field.field_id


#============================================
def test_add_field_centers_on_template(app_state, pdf_template_bytes: bytes) -> None:
	bulk_certificate.template.ingest_template(app_state, pdf_template_bytes, file_name="t.pdf")
	field = fields.add_field(app_state)
	assert (field.x, field.y) == (300, 200)


#============================================
def test_removing_last_field_is_rejected(app_state) -> None:
	only_id = app_state.fields[0].field_id
	with pytest.raises(bulk_certificate.errors.ValidationError):
		fields.remove_field(app_state, only_id)
	assert [field.field_id for field in app_state.fields] == [only_id]
	assert app_state.active_field_id == only_id


#============================================
def test_removing_active_field_reassigns_active(app_state) -> None:
	first_id = app_state.fields[0].field_id
	second = fields.add_field(app_state)
	fields.remove_field(app_state, second.field_id)
	assert app_state.active_field_id == first_id
	assert len(app_state.fields) == 1


#============================================
def test_bind_columns_keeps_valid_bindings(app_state) -> None:
	first = app_state.fields[0]
	second = fields.add_field(app_state)
	fields.update_field(app_state, second.field_id, "column", "Course")
	fields.bind_columns(app_state, ["Name", "Course"])
	assert first.column == "Name"
	assert second.column == "Course"


#============================================
def test_add_fonts_assigns_first_font_to_active_field(app_state) -> None:
	added = fields.add_fonts(app_state, [("Fancy.ttf", b"one"), ("Plain.ttf", b"two")])
	assert [font.value for font in added] == ["Fancy.ttf", "Plain.ttf"]
	assert fields.active_field(app_state).font == "Fancy.ttf"
	choices = dict(fields.font_choices(app_state))
	assert "Helvetica-Bold" in choices
	assert choices["Plain.ttf"] == "Plain.ttf"


#============================================
def test_reupload_replaces_font_bytes(app_state) -> None:
	fields.add_fonts(app_state, [("Fancy.ttf", b"one")])
	fields.add_fonts(app_state, [("Fancy.ttf", b"two")], assign_active=False)
	assert len(app_state.fonts) == 1
	assert app_state.fonts[0].data == b"two"


#============================================
def test_empty_font_upload_is_rejected(app_state) -> None:
	with pytest.raises(bulk_certificate.errors.ValidationError):
		fields.add_fonts(app_state, [("Empty.ttf", b"")])
	assert app_state.fonts == []

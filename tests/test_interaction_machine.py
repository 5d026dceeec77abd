# PIP3 modules
import pytest

# local repo modules
import bulk_certificate.errors
import bulk_certificate.fields
import bulk_certificate.geometry
import bulk_certificate.interaction as interaction
import bulk_certificate.template
import conftest


SURFACE = bulk_certificate.geometry.SurfaceMetrics(
	origin_x=0.0,
	origin_y=0.0,
	rendered_width=300.0,
	rendered_height=200.0,
	native_width=600.0,
	native_height=400.0,
)


#============================================
@pytest.fixture
def loaded_state(app_state):
	"""
	State with a 600 x 400 template, so every field starts at (300, 200).
	"""
	bulk_certificate.template.ingest_template(app_state, conftest.build_pdf_bytes(), file_name="award.pdf")
	return app_state


#============================================
def test_move_applies_surface_scale_and_inverts_y(loaded_state) -> None:
	machine = interaction.InteractionMachine(loaded_state)
	field = loaded_state.fields[0]
	machine.begin(field.field_id, interaction.MODE_MOVE, 100.0, 100.0, SURFACE)
	machine.update(110.0, 110.0)
	assert (field.x, field.y) == (320, 180)
	# deltas are measured from the gesture start, not the previous event
	machine.update(105.0, 100.0)
	assert (field.x, field.y) == (310, 200)
	machine.end()
	assert machine.mode == interaction.MODE_IDLE


#============================================
def test_resize_locked_mirrors_horizontal_scale(loaded_state) -> None:
	machine = interaction.InteractionMachine(loaded_state)
	field = loaded_state.fields[0]
	machine.begin(field.field_id, interaction.MODE_RESIZE, 0.0, 0.0, SURFACE)
	machine.update(50.0, -30.0)
	assert field.scale_x == pytest.approx(1.5)
	assert field.scale_y == pytest.approx(1.5)


#============================================
def test_resize_unlocked_and_floor(loaded_state) -> None:
	machine = interaction.InteractionMachine(loaded_state)
	field = loaded_state.fields[0]
	field.lock_ratio = False
	machine.begin(field.field_id, interaction.MODE_RESIZE, 0.0, 0.0, SURFACE)
	machine.update(-500.0, 25.0)
	assert field.scale_x == pytest.approx(0.1)
	assert field.scale_y == pytest.approx(1.25)


#============================================
@pytest.mark.parametrize(
	"pointer,expected",
	[((150.0, 50.0), 0), ((200.0, 100.0), 90), ((150.0, 150.0), 180), ((100.0, 100.0), 270)],
)
def test_rotation_is_clockwise_from_straight_up(loaded_state, pointer, expected: int) -> None:
	machine = interaction.InteractionMachine(loaded_state)
	field = loaded_state.fields[0]
	session = machine.begin(field.field_id, interaction.MODE_ROTATE, 150.0, 50.0, SURFACE)
	assert (session.pivot_x, session.pivot_y) == pytest.approx((150.0, 100.0))
	machine.update(pointer[0], pointer[1])
	assert field.rotate == expected


#============================================
def test_only_one_session_at_a_time(loaded_state) -> None:
	machine = interaction.InteractionMachine(loaded_state)
	field = loaded_state.fields[0]
	machine.begin(field.field_id, interaction.MODE_MOVE, 0.0, 0.0, SURFACE)
	with pytest.raises(bulk_certificate.errors.ValidationError):
		machine.begin(field.field_id, interaction.MODE_RESIZE, 0.0, 0.0, SURFACE)
	assert machine.mode == interaction.MODE_MOVE


#============================================
def test_unknown_mode_raises(loaded_state) -> None:
	machine = interaction.InteractionMachine(loaded_state)
	with pytest.raises(bulk_certificate.errors.ValidationError):
		machine.begin(loaded_state.fields[0].field_id, "skew", 0.0, 0.0, SURFACE)
	assert not machine.is_active


#============================================
def test_gesture_changes_only_the_target_field(loaded_state) -> None:
	first = loaded_state.fields[0]
	second = bulk_certificate.fields.add_field(loaded_state)
	bulk_certificate.fields.set_active_field(loaded_state, first.field_id)
	machine = interaction.InteractionMachine(loaded_state)
	machine.begin(second.field_id, interaction.MODE_MOVE, 0.0, 0.0, SURFACE)
	assert loaded_state.active_field_id == second.field_id
	machine.update(-50.0, 0.0)
	machine.end()
	assert (second.x, second.y) == (200, 200)
	assert (first.x, first.y) == (300, 200)


#============================================
def test_update_while_idle_does_nothing(loaded_state) -> None:
	machine = interaction.InteractionMachine(loaded_state)
	assert machine.update(10.0, 10.0) is None
	assert machine.end() is None


#============================================
def test_canvas_click_places_active_field(loaded_state) -> None:
	machine = interaction.InteractionMachine(loaded_state)
	assert machine.canvas_click(SURFACE, 30.0, 40.0) is True
	field = bulk_certificate.fields.active_field(loaded_state)
	assert (field.x, field.y) == (60, 320)


#============================================
def test_canvas_click_ignored_during_gesture(loaded_state) -> None:
	machine = interaction.InteractionMachine(loaded_state)
	field = loaded_state.fields[0]
	machine.begin(field.field_id, interaction.MODE_MOVE, 0.0, 0.0, SURFACE)
	assert machine.canvas_click(SURFACE, 30.0, 40.0) is False
	assert (field.x, field.y) == (300, 200)

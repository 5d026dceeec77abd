"""
Pointer gesture state machine for moving, resizing and rotating fields.

The caller pushes pointer events only while a session is active:
begin() on pointer-down over a field control, update() on every pointer
move, end() on pointer-up anywhere.
"""

# Standard Library
import dataclasses
import math

# local repo modules
import bulk_certificate as bcm
import bulk_certificate.config
import bulk_certificate.errors
import bulk_certificate.fields
import bulk_certificate.geometry


MIN_SCALE = bcm.config.MIN_SCALE
MAX_ROTATION = bcm.config.MAX_ROTATION
RESIZE_SENSITIVITY = bcm.config.RESIZE_SENSITIVITY

SurfaceMetrics = bcm.geometry.SurfaceMetrics
TextField = bcm.fields.TextField
ValidationError = bcm.errors.ValidationError

MODE_IDLE = "idle"
MODE_MOVE = "move"
MODE_RESIZE = "resize"
MODE_ROTATE = "rotate"
GESTURE_MODES = (MODE_MOVE, MODE_RESIZE, MODE_ROTATE)


@dataclasses.dataclass
class InteractionSession:
	mode: str
	field_id: str
	start_x: float
	start_y: float
	pivot_x: float
	pivot_y: float
	snapshot: TextField
	surface: SurfaceMetrics


#============================================
def compute_move(
	snapshot: TextField,
	surface: SurfaceMetrics,
	delta_x: float,
	delta_y: float,
) -> tuple[int, int]:
	"""
	Compute a moved anchor from a screen displacement.

	Args:
		snapshot: Field state at gesture start.
		surface: Rendered surface metrics.
		delta_x: Screen x displacement since gesture start.
		delta_y: Screen y displacement since gesture start.

	Returns:
		New (x, y) in integer document units.
	"""
	doc_dx, doc_dy = bcm.geometry.screen_delta_to_document(surface, delta_x, delta_y)
	return (int(round(snapshot.x + doc_dx)), int(round(snapshot.y + doc_dy)))


#============================================
def compute_resize(
	snapshot: TextField,
	delta_x: float,
	delta_y: float,
) -> tuple[float, float]:
	"""
	Compute scale factors from a raw screen displacement.

	The displacement is not corrected for the surface scale.

	Args:
		snapshot: Field state at gesture start.
		delta_x: Screen x displacement since gesture start.
		delta_y: Screen y displacement since gesture start.

	Returns:
		New (scale_x, scale_y), each at least MIN_SCALE.
	"""
	scale_x = max(MIN_SCALE, round(snapshot.scale_x + delta_x / RESIZE_SENSITIVITY, 3))
	scale_y = max(MIN_SCALE, round(snapshot.scale_y + delta_y / RESIZE_SENSITIVITY, 3))
	if snapshot.lock_ratio:
		scale_y = scale_x
	return (scale_x, scale_y)


#============================================
def compute_rotation(
	pointer_x: float,
	pointer_y: float,
	pivot_x: float,
	pivot_y: float,
) -> int:
	"""
	Compute the rotation angle from the pointer position around a pivot.

	A pointer straight above the pivot gives 0 degrees; angles grow
	clockwise on screen.

	Args:
		pointer_x: Pointer x in screen pixels.
		pointer_y: Pointer y in screen pixels.
		pivot_x: Pivot x in screen pixels.
		pivot_y: Pivot y in screen pixels.

	Returns:
		Angle in whole degrees within [0, 360).
	"""
	angle = math.degrees(math.atan2(pointer_y - pivot_y, pointer_x - pivot_x)) + 90.0
	return int(round(angle)) % MAX_ROTATION


class InteractionMachine:
	"""
	Drives one gesture at a time against the fields of an AppState.
	"""

	def __init__(self, state):
		self.state = state
		self.session: InteractionSession | None = None

	@property
	def mode(self) -> str:
		if self.session is None:
			return MODE_IDLE
		return self.session.mode

	@property
	def is_active(self) -> bool:
		return self.session is not None

	#============================================
	def begin(
		self,
		field_id: str,
		mode: str,
		pointer_x: float,
		pointer_y: float,
		surface: SurfaceMetrics,
		pivot: tuple[float, float] | None = None,
	) -> InteractionSession:
		"""
		Start a gesture on a field and make that field active.

		Args:
			field_id: Target field id.
			mode: One of GESTURE_MODES.
			pointer_x: Pointer x at pointer-down, screen pixels.
			pointer_y: Pointer y at pointer-down, screen pixels.
			surface: Rendered surface metrics.
			pivot: Rotation pivot in screen pixels; defaults to the field anchor.

		Returns:
			The new InteractionSession.
		"""
		if mode not in GESTURE_MODES:
			raise ValidationError(f"Unknown gesture mode: {mode}")
		if self.session is not None:
			raise ValidationError("A gesture is already in progress.")
		field = bcm.fields.set_active_field(self.state, field_id)
		if pivot is None:
			pivot = bcm.geometry.to_screen(surface, field.x, field.y)
		self.session = InteractionSession(
			mode=mode,
			field_id=field.field_id,
			start_x=pointer_x,
			start_y=pointer_y,
			pivot_x=pivot[0],
			pivot_y=pivot[1],
			snapshot=dataclasses.replace(field),
			surface=surface,
		)
		return self.session

	#============================================
	def update(self, pointer_x: float, pointer_y: float) -> TextField | None:
		"""
		Apply a pointer move to the gesture target.

		Args:
			pointer_x: Pointer x in screen pixels.
			pointer_y: Pointer y in screen pixels.

		Returns:
			The updated TextField, or None when idle.
		"""
		session = self.session
		if session is None:
			return None
		field = bcm.fields.find_field(self.state, session.field_id)
		delta_x = pointer_x - session.start_x
		delta_y = pointer_y - session.start_y
		if session.mode == MODE_MOVE:
			field.x, field.y = compute_move(session.snapshot, session.surface, delta_x, delta_y)
		elif session.mode == MODE_RESIZE:
			field.scale_x, field.scale_y = compute_resize(session.snapshot, delta_x, delta_y)
		elif session.mode == MODE_ROTATE:
			field.rotate = compute_rotation(pointer_x, pointer_y, session.pivot_x, session.pivot_y)
		return field

	#============================================
	def end(self) -> InteractionSession | None:
		"""
		Finish the gesture and return to idle.
		"""
		session = self.session
		self.session = None
		return session

	#============================================
	def canvas_click(self, surface: SurfaceMetrics, screen_x: float, screen_y: float) -> bool:
		"""
		Place the active field at a clicked point unless a gesture is running.

		Args:
			surface: Rendered surface metrics.
			screen_x: Click x in screen pixels.
			screen_y: Click y in screen pixels.

		Returns:
			True when the active field moved.
		"""
		if self.session is not None:
			return False
		doc_x, doc_y = bcm.geometry.to_document_rounded(surface, screen_x, screen_y)
		bcm.fields.place_active_field(self.state, doc_x, doc_y)
		return True

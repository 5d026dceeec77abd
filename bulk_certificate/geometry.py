"""
Conversion between screen pixels and document space.

Screen space has its origin at the top-left of the rendered template surface
with y growing downward. Document space has its origin at the bottom-left of
the page with y growing upward.
"""

# Standard Library
import dataclasses


@dataclasses.dataclass(frozen=True)
class SurfaceMetrics:
	origin_x: float
	origin_y: float
	rendered_width: float
	rendered_height: float
	native_width: float
	native_height: float


#============================================
def surface_scale(surface: SurfaceMetrics) -> tuple[float, float]:
	"""
	Compute the per-axis screen-to-document scale.

	Args:
		surface: Rendered surface metrics.

	Returns:
		Tuple of (scale_x, scale_y).
	"""
	scale_x = 1.0
	scale_y = 1.0
	if surface.rendered_width > 0:
		scale_x = surface.native_width / surface.rendered_width
	if surface.rendered_height > 0:
		scale_y = surface.native_height / surface.rendered_height
	return (scale_x, scale_y)


#============================================
def to_document(
	surface: SurfaceMetrics,
	screen_x: float,
	screen_y: float,
) -> tuple[float, float]:
	"""
	Convert a screen pixel into a document coordinate.

	Args:
		surface: Rendered surface metrics.
		screen_x: Pointer x in screen pixels.
		screen_y: Pointer y in screen pixels.

	Returns:
		Tuple of (doc_x, doc_y).
	"""
	scale_x, scale_y = surface_scale(surface)
	doc_x = (screen_x - surface.origin_x) * scale_x
	doc_y = surface.native_height - (screen_y - surface.origin_y) * scale_y
	return (doc_x, doc_y)


#============================================
def to_screen(
	surface: SurfaceMetrics,
	doc_x: float,
	doc_y: float,
) -> tuple[float, float]:
	"""
	Convert a document coordinate into a screen pixel.

	Args:
		surface: Rendered surface metrics.
		doc_x: Document x.
		doc_y: Document y.

	Returns:
		Tuple of (screen_x, screen_y).
	"""
	scale_x, scale_y = surface_scale(surface)
	screen_x = surface.origin_x + doc_x / scale_x
	screen_y = surface.origin_y + (surface.native_height - doc_y) / scale_y
	return (screen_x, screen_y)


#============================================
def to_document_rounded(
	surface: SurfaceMetrics,
	screen_x: float,
	screen_y: float,
) -> tuple[int, int]:
	"""
	Convert a screen pixel to the integer document coordinate fields store.
	"""
	doc_x, doc_y = to_document(surface, screen_x, screen_y)
	return (int(round(doc_x)), int(round(doc_y)))


#============================================
def screen_delta_to_document(
	surface: SurfaceMetrics,
	delta_x: float,
	delta_y: float,
) -> tuple[float, float]:
	"""
	Convert a screen displacement into a document displacement.

	Screen-down becomes document-down, so the y component is inverted.

	Args:
		surface: Rendered surface metrics.
		delta_x: Screen x displacement.
		delta_y: Screen y displacement.

	Returns:
		Tuple of (doc_dx, doc_dy).
	"""
	scale_x, scale_y = surface_scale(surface)
	return (delta_x * scale_x, -delta_y * scale_y)

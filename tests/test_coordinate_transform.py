# PIP3 modules
import pytest

# local repo modules
import bulk_certificate.geometry as geometry


#============================================
def build_surface(rendered_width: float = 300.0, rendered_height: float = 200.0) -> geometry.SurfaceMetrics:
	"""
	Build a surface showing a 600 x 400 page at the given on-screen size.
	"""
	return geometry.SurfaceMetrics(
		origin_x=10.0,
		origin_y=20.0,
		rendered_width=rendered_width,
		rendered_height=rendered_height,
		native_width=600.0,
		native_height=400.0,
	)


#============================================
def test_top_left_maps_to_page_top() -> None:
	surface = build_surface()
	doc_x, doc_y = geometry.to_document(surface, 10.0, 20.0)
	assert doc_x == pytest.approx(0.0)
	assert doc_y == pytest.approx(400.0)


#============================================
def test_bottom_right_maps_to_page_corner() -> None:
	surface = build_surface()
	doc_x, doc_y = geometry.to_document(surface, 310.0, 220.0)
	assert doc_x == pytest.approx(600.0)
	assert doc_y == pytest.approx(0.0)


#============================================
@pytest.mark.parametrize("rendered_width", [300.0, 250.0])
@pytest.mark.parametrize("screen_point", [(10.0, 20.0), (57.5, 133.25), (309.0, 219.0)])
def test_round_trip_returns_stored_coordinate(screen_point: tuple[float, float], rendered_width: float) -> None:
	"""
	Screen to document and back reproduces the stored integer coordinate.
	"""
	surface = build_surface(rendered_width=rendered_width)
	doc_x, doc_y = geometry.to_document_rounded(surface, screen_point[0], screen_point[1])
	screen_x, screen_y = geometry.to_screen(surface, doc_x, doc_y)
	back_x, back_y = geometry.to_document(surface, screen_x, screen_y)
	assert back_x == pytest.approx(doc_x)
	assert back_y == pytest.approx(doc_y)
	assert geometry.to_document_rounded(surface, screen_x, screen_y) == (doc_x, doc_y)


#============================================
def test_screen_down_is_document_down() -> None:
	surface = build_surface()
	doc_dx, doc_dy = geometry.screen_delta_to_document(surface, 5.0, 10.0)
	assert doc_dx == pytest.approx(10.0)
	assert doc_dy == pytest.approx(-20.0)


#============================================
def test_zero_rendered_size_uses_unit_scale() -> None:
	surface = build_surface(rendered_width=0.0, rendered_height=0.0)
	assert geometry.surface_scale(surface) == (1.0, 1.0)

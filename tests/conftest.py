"""
Pytest configuration and shared builders for certificate tests.
"""

# Standard Library
import io
import os
import sys

# PIP3 modules
import PIL.Image
import pypdf
import pypdf.generic
import pytest
import reportlab.pdfgen.canvas

#============================================


def _ensure_repo_on_path() -> None:
	"""
	Put the repository root on sys.path so the package imports uninstalled.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()

# local repo modules
import bulk_certificate.state  # noqa: E402


#============================================
def build_pdf_bytes(width: float = 600.0, height: float = 400.0, pages: int = 1) -> bytes:
	"""
	Build a blank PDF template in memory.
	"""
	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(buffer, pagesize=(width, height))
	for page_number in range(pages):
		pdf.drawString(10, 10, f"page {page_number + 1}")
		pdf.showPage()
	pdf.save()
	return buffer.getvalue()


#============================================
def build_cropped_pdf_bytes(crop: tuple[float, float, float, float]) -> bytes:
	"""
	Build a 600 x 400 PDF whose visible area is limited by a cropbox.

	Args:
		crop: Cropbox as (left, bottom, right, top) in points.

	Returns:
		PDF bytes.
	"""
	reader = pypdf.PdfReader(io.BytesIO(build_pdf_bytes()))
	writer = pypdf.PdfWriter()
	writer.add_page(reader.pages[0])
	writer.pages[0].cropbox = pypdf.generic.RectangleObject(list(crop))
	buffer = io.BytesIO()
	writer.write(buffer)
	return buffer.getvalue()


#============================================
def build_png_bytes(width: int = 300, height: int = 200, mode: str = "RGB") -> bytes:
	color = (240, 240, 200) if mode == "RGB" else (240, 240, 200, 255)
	image = PIL.Image.new(mode, (width, height), color)
	buffer = io.BytesIO()
	image.save(buffer, format="PNG")
	return buffer.getvalue()


#============================================
@pytest.fixture
def app_state():
	return bulk_certificate.state.new_app_state()


#============================================
@pytest.fixture
def pdf_template_bytes() -> bytes:
	return build_pdf_bytes()


#============================================
@pytest.fixture
def png_template_bytes() -> bytes:
	return build_png_bytes()

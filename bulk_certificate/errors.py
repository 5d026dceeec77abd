"""
Error taxonomy for template ingestion, datasets, presets and rendering.
"""


class CertificateError(Exception):
	"""
	Base class for user-facing failures.
	"""


class IngestionError(CertificateError):
	"""
	Template could not be read. No state was changed.
	"""


class ParseError(CertificateError):
	"""
	Tabular source was malformed or unreachable. The previous dataset is kept.
	"""


class ValidationError(CertificateError):
	"""
	Operation rejected at the call site. No state was changed.
	"""


class PresetError(CertificateError):
	"""
	Layout preset was malformed. Current fields are kept.
	"""


class RenderError(CertificateError):
	"""
	Per-row rendering failed. The whole batch is aborted.
	"""

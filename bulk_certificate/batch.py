"""
Batch generation over all data rows, with archive packaging.
"""

# Standard Library
import dataclasses
import io
import pathlib
import re
import zipfile

# local repo modules
import bulk_certificate as bcm
import bulk_certificate.config
import bulk_certificate.dataset
import bulk_certificate.errors
import bulk_certificate.render


BatchConfig = bcm.config.BatchConfig
DataRow = bcm.dataset.DataRow
RenderError = bcm.errors.RenderError
ValidationError = bcm.errors.ValidationError

PROGRESS_BAR_WIDTH = bcm.config.PROGRESS_BAR_WIDTH
PROGRESS_UPDATE_EVERY = bcm.config.PROGRESS_UPDATE_EVERY

UNSAFE_NAME_PATTERN = re.compile(r"[^A-Za-z0-9]")


@dataclasses.dataclass
class OutputEntry:
	name: str
	data: bytes
	row_index: int


@dataclasses.dataclass
class BatchResult:
	archive: bytes
	entries: list[str]
	skipped_rows: list[int]


#============================================
def print_progress(prefix: str, current: int, total: int) -> None:
	"""
	Print a simple progress bar.

	Args:
		prefix: Label text.
		current: Current count.
		total: Total count.
	"""
	if total <= 0:
		return
	percent = int(round((current / total) * 100.0))
	filled = int(round(PROGRESS_BAR_WIDTH * percent / 100.0))
	bar = "#" * filled + "-" * (PROGRESS_BAR_WIDTH - filled)
	print(f"{prefix} [{bar}] {current}/{total} ({percent}%)", end="\r")


#============================================
def sanitize_filename(value: str) -> str:
	"""
	Replace every character outside [A-Za-z0-9] with an underscore.

	Args:
		value: Input string.

	Returns:
		Sanitized string.
	"""
	return UNSAFE_NAME_PATTERN.sub("_", value)


#============================================
def identity_column(state) -> str | None:
	"""
	Return the column that names outputs and decides which rows are skipped.

	An explicit identity column on the state wins; otherwise the column
	bound to the first field is used.
	"""
	if state.identity_column:
		return state.identity_column
	if not state.fields:
		return None
	return state.fields[0].column


#============================================
def set_identity_column(state, column: str | None) -> None:
	if column and state.dataset.headers and column not in state.dataset.headers:
		raise ValidationError(f"Unknown identity column: {column}")
	state.identity_column = column or None


#============================================
def identity_value(row: DataRow, column: str | None) -> str:
	if not column:
		return ""
	return (row.values.get(column) or "").strip()


#============================================
def unique_name(name: str, used: set[str]) -> str:
	"""
	Make an archive entry name unique by suffixing _2, _3, ...

	Args:
		name: Candidate file name.
		used: Names already in the archive; updated in place.

	Returns:
		Unique name.
	"""
	candidate = name
	path = pathlib.PurePosixPath(name)
	counter = 2
	while candidate in used:
		candidate = f"{path.stem}_{counter}{path.suffix}"
		counter += 1
	used.add(candidate)
	return candidate


#============================================
def validate_ready(state) -> str:
	"""
	Check the state can generate and return the identity column.
	"""
	if state.template is None:
		raise ValidationError("Load a template before generating.")
	if not state.dataset.rows:
		raise ValidationError("Load a dataset with at least one row before generating.")
	column = identity_column(state)
	if not column:
		raise ValidationError("Bind the first text field to a data column before generating.")
	return column


#============================================
def render_entry(state, row: DataRow, column: str) -> OutputEntry:
	"""
	Render one eligible row into a named output.

	Args:
		state: AppState.
		row: DataRow with a non-blank identity value.
		column: Identity column.

	Returns:
		OutputEntry.
	"""
	extension = bcm.config.output_extension(state.output_kind)
	# names come from the raw cell; stripping only decides eligibility
	base_name = sanitize_filename(row.values.get(column) or "")
	try:
		data = bcm.render.render_row(
			state.template,
			state.fields,
			state.fonts,
			row.values,
			state.output_kind,
		)
	except Exception as exc:
		raise RenderError(f"Generation failed on row {row.index + 1}: {exc}") from exc
	return OutputEntry(name=f"{base_name}{extension}", data=data, row_index=row.index)


#============================================
def build_archive(entries: list[OutputEntry]) -> bytes:
	buffer = io.BytesIO()
	with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
		for entry in entries:
			archive.writestr(entry.name, entry.data)
	return buffer.getvalue()


#============================================
def generate_batch(state, config: BatchConfig | None = None) -> BatchResult:
	"""
	Render every eligible row in original order and package the outputs.

	A row is skipped when its identity value is blank. Rows are rendered
	one at a time; any render failure aborts the batch and nothing is
	packaged.

	Args:
		state: AppState.
		config: Batch configuration.

	Returns:
		BatchResult with the archive bytes.
	"""
	config = config or BatchConfig()
	column = validate_ready(state)
	rows = sorted(state.dataset.rows, key=lambda item: item.index)
	total = len(rows)
	used: set[str] = set()
	entries: list[OutputEntry] = []
	skipped: list[int] = []
	if config.verbose:
		print_progress("Rows", 0, total)
	for position, row in enumerate(rows, start=1):
		if not identity_value(row, column):
			skipped.append(row.index)
		else:
			entry = render_entry(state, row, column)
			entry.name = unique_name(entry.name, used)
			entries.append(entry)
		if config.verbose and (position % PROGRESS_UPDATE_EVERY == 0 or position == total):
			print_progress("Rows", position, total)
	if config.verbose:
		print()
		if skipped:
			print(f"Skipped rows with blank '{column}': {len(skipped)}")
	if not entries:
		raise ValidationError(f"No rows have a value in '{column}'.")
	return BatchResult(
		archive=build_archive(entries),
		entries=[entry.name for entry in entries],
		skipped_rows=skipped,
	)


#============================================
def generate_preview(state) -> OutputEntry:
	"""
	Render the first eligible row for preview instead of archiving it.

	Args:
		state: AppState.

	Returns:
		OutputEntry for the first row with a non-blank identity value.
	"""
	column = validate_ready(state)
	for row in sorted(state.dataset.rows, key=lambda item: item.index):
		if identity_value(row, column):
			return render_entry(state, row, column)
	raise ValidationError(f"No rows have a value in '{column}'.")


#============================================
def save_download(data: bytes, path: pathlib.Path) -> pathlib.Path:
	"""
	Write generated bytes to disk under the suggested name.

	Args:
		data: Output bytes.
		path: Target file path.

	Returns:
		The written path.
	"""
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_bytes(data)
	return path

"""
Tabular data source parsing and row editing.
"""

# Standard Library
import csv
import dataclasses
import io

# PIP3 modules
import requests

# local repo modules
import bulk_certificate as bcm
import bulk_certificate.config
import bulk_certificate.errors
import bulk_certificate.fields


REMOTE_TIMEOUT = bcm.config.REMOTE_TIMEOUT

ParseError = bcm.errors.ParseError
ValidationError = bcm.errors.ValidationError


@dataclasses.dataclass
class DataRow:
	values: dict[str, str]
	index: int


@dataclasses.dataclass
class Dataset:
	headers: list[str] = dataclasses.field(default_factory=list)
	rows: list[DataRow] = dataclasses.field(default_factory=list)


#============================================
def decode_text(data: bytes) -> str:
	"""
	Decode uploaded CSV bytes, dropping a UTF-8 byte order mark.
	"""
	try:
		return data.decode("utf-8-sig")
	except UnicodeDecodeError as exc:
		raise ParseError(f"CSV is not valid UTF-8: {exc}") from exc


#============================================
def parse_csv_text(text: str) -> Dataset:
	"""
	Parse CSV text with a header line into a Dataset.

	Blank lines are skipped. Short rows are padded with empty values.

	Args:
		text: CSV text.

	Returns:
		Dataset with rows indexed in file order.
	"""
	if text.startswith("\ufeff"):
		text = text[1:]
	reader = csv.reader(io.StringIO(text, newline=""))
	try:
		records = [record for record in reader if any(cell.strip() for cell in record)]
	except csv.Error as exc:
		raise ParseError(f"Malformed CSV at line {reader.line_num}: {exc}") from exc
	if not records:
		raise ParseError("CSV has no header line.")

	headers = [cell.strip() for cell in records[0]]
	if not any(headers):
		raise ParseError("CSV header line is empty.")
	seen: set[str] = set()
	for header in headers:
		if header in seen:
			raise ParseError(f"Duplicate CSV column: {header!r}")
		seen.add(header)

	rows: list[DataRow] = []
	for line_index, record in enumerate(records[1:]):
		if len(record) > len(headers):
			raise ParseError(
				f"Row {line_index + 1} has {len(record)} cells but the header has {len(headers)}."
			)
		values = {}
		for column_index, header in enumerate(headers):
			if column_index < len(record):
				values[header] = record[column_index]
			else:
				values[header] = ""
		rows.append(DataRow(values=values, index=line_index))
	return Dataset(headers=headers, rows=rows)


#============================================
def fetch_csv_text(url: str, session: requests.Session | None = None) -> str:
	"""
	Download CSV text from a remote URL.

	Args:
		url: HTTP(S) URL.
		session: Optional requests session.

	Returns:
		Response body as text.
	"""
	http = session or requests.Session()
	try:
		response = http.get(url, timeout=REMOTE_TIMEOUT)
		response.raise_for_status()
	except requests.RequestException as exc:
		raise ParseError(f"Could not fetch CSV from {url}: {exc}") from exc
	return decode_text(response.content)


#============================================
def load_dataset(state, dataset: Dataset) -> Dataset:
	"""
	Replace the dataset on the app state and bind unbound fields.

	An explicit identity column missing from the new headers is cleared, so
	naming falls back to the first field's column.

	Args:
		state: AppState.
		dataset: Parsed Dataset.

	Returns:
		The installed Dataset.
	"""
	state.dataset = dataset
	bcm.fields.bind_columns(state, dataset.headers)
	if state.identity_column not in dataset.headers:
		state.identity_column = None
	return dataset


#============================================
def load_csv_bytes(state, data: bytes) -> Dataset:
	"""
	Parse uploaded CSV bytes into the app state. Parse failures keep the previous dataset.
	"""
	dataset = parse_csv_text(decode_text(data))
	return load_dataset(state, dataset)


#============================================
def load_csv_url(state, url: str, session: requests.Session | None = None) -> Dataset:
	dataset = parse_csv_text(fetch_csv_text(url, session))
	return load_dataset(state, dataset)


#============================================
def find_row(dataset: Dataset, index: int) -> DataRow:
	for row in dataset.rows:
		if row.index == index:
			return row
	raise ValidationError(f"Unknown row: {index}")


#============================================
def set_cell(dataset: Dataset, index: int, column: str, value: str) -> DataRow:
	"""
	Edit one cell of a row.

	Args:
		dataset: Dataset.
		index: Original row index.
		column: Column name.
		value: New cell text.

	Returns:
		The edited DataRow.
	"""
	if column not in dataset.headers:
		raise ValidationError(f"Unknown column: {column}")
	row = find_row(dataset, index)
	row.values[column] = "" if value is None else str(value)
	return row


#============================================
def append_row(dataset: Dataset) -> DataRow:
	"""
	Append a row with every column empty.
	"""
	next_index = max((row.index for row in dataset.rows), default=-1) + 1
	row = DataRow(values={header: "" for header in dataset.headers}, index=next_index)
	dataset.rows.append(row)
	return row


#============================================
def remove_row(dataset: Dataset, index: int) -> None:
	"""
	Remove a row by original index. The last remaining row cannot be removed.

	Args:
		dataset: Dataset.
		index: Original row index.
	"""
	row = find_row(dataset, index)
	if len(dataset.rows) <= 1:
		raise ValidationError("At least one data row is required.")
	dataset.rows = [item for item in dataset.rows if item.index != row.index]


#============================================
def filter_rows(dataset: Dataset, query: str) -> list[DataRow]:
	"""
	Return rows with any cell containing the query, case-insensitive.

	Rows keep their original index so edits made through a filtered view
	land on the right row.

	Args:
		dataset: Dataset.
		query: Search text; blank returns every row.

	Returns:
		Matching rows in original order.
	"""
	needle = (query or "").strip().lower()
	if not needle:
		return list(dataset.rows)
	matches = []
	for row in dataset.rows:
		if any(needle in (value or "").lower() for value in row.values.values()):
			matches.append(row)
	return matches

"""
CLI entry points for batch certificate generation.
"""

# Standard Library
import argparse
import pathlib
import sys
import time

# local repo modules
import bulk_certificate as bcm
import bulk_certificate.batch
import bulk_certificate.config
import bulk_certificate.dataset
import bulk_certificate.errors
import bulk_certificate.fields
import bulk_certificate.presets
import bulk_certificate.state
import bulk_certificate.template


BatchConfig = bcm.config.BatchConfig
CertificateError = bcm.errors.CertificateError
ValidationError = bcm.errors.ValidationError

DEFAULT_ARCHIVE_NAME = bcm.config.DEFAULT_ARCHIVE_NAME
DEFAULT_OUTPUT_KIND = bcm.config.DEFAULT_OUTPUT_KIND
OUTPUT_KINDS = sorted(bcm.config.OUTPUT_EXTENSIONS)


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Args:
		argv: Optional argument list; defaults to sys.argv.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(
		description="Fill a certificate template with one output per CSV row.",
	)

	input_group = parser.add_argument_group("Inputs")
	input_group.add_argument("-t", "--template", dest="template_path", required=True, help="Template PDF, PNG or JPEG.")
	source_group = input_group.add_mutually_exclusive_group(required=True)
	source_group.add_argument("-c", "--csv", dest="csv_path", help="CSV file with a header line.")
	source_group.add_argument("-u", "--csv-url", dest="csv_url", help="URL of a CSV file.")
	input_group.add_argument("-p", "--preset", dest="preset_path", default=None, help="Layout preset JSON.")
	input_group.add_argument(
		"-f",
		"--font",
		dest="font_paths",
		action="append",
		default=[],
		help="TrueType font file; repeat for several fonts.",
	)

	output_group = parser.add_argument_group("Output")
	output_group.add_argument(
		"-o",
		"--output",
		dest="output_path",
		default=None,
		help=f"Output path (default {DEFAULT_ARCHIVE_NAME}, or the preview file name).",
	)
	output_group.add_argument(
		"-k",
		"--output-kind",
		dest="output_kind",
		choices=OUTPUT_KINDS,
		default=DEFAULT_OUTPUT_KIND,
		help="Output format for each row.",
	)
	output_group.add_argument(
		"-i",
		"--identity-column",
		dest="identity_column",
		default=None,
		help="Column used for file names and blank-row skipping (default: first field's column).",
	)
	output_group.add_argument("-s", "--save-preset", dest="save_preset_path", default=None, help="Write the layout preset used.")

	behavior_group = parser.add_argument_group("Behavior")
	behavior_group.add_argument("--preview", dest="preview", action="store_true", help="Render only the first eligible row.")
	behavior_group.add_argument("-q", "--quiet", dest="verbose", action="store_false", help="Hide progress output.")

	parser.set_defaults(preview=False, verbose=True)
	args = parser.parse_args(argv)
	return args


#============================================
def build_state(args: argparse.Namespace):
	"""
	Build the app state from CLI inputs.

	Args:
		args: Parsed argparse namespace.

	Returns:
		AppState ready for generation.
	"""
	state = bcm.state.new_app_state()
	template = bcm.template.ingest_template_path(state, pathlib.Path(args.template_path))
	print(f"Template: {args.template_path} ({template.kind}, {template.width:.0f} x {template.height:.0f})")

	if args.preset_path:
		fields = bcm.presets.load_preset_path(state, pathlib.Path(args.preset_path))
		print(f"Preset fields: {len(fields)}")

	uploads = []
	for font_path in args.font_paths:
		path = pathlib.Path(font_path)
		try:
			uploads.append((path.name, path.read_bytes()))
		except OSError as exc:
			raise ValidationError(f"Could not read font {path}: {exc}") from exc
	# presets choose their own fonts
	fonts = bcm.fields.add_fonts(state, uploads, assign_active=not args.preset_path)
	for font in fonts:
		print(f"Font loaded: {font.label}")

	if args.csv_url:
		dataset = bcm.dataset.load_csv_url(state, args.csv_url)
	else:
		try:
			data = pathlib.Path(args.csv_path).read_bytes()
		except OSError as exc:
			raise bcm.errors.ParseError(f"Could not read CSV {args.csv_path}: {exc}") from exc
		dataset = bcm.dataset.load_csv_bytes(state, data)
	print(f"Rows loaded: {len(dataset.rows)} ({', '.join(dataset.headers)})")

	bcm.state.set_output_kind(state, args.output_kind)
	if args.identity_column:
		bcm.batch.set_identity_column(state, args.identity_column)
	return state


#============================================
def run_pipeline(args: argparse.Namespace) -> pathlib.Path:
	"""
	Run generation from CLI inputs to a file on disk.

	Args:
		args: Parsed argparse namespace.

	Returns:
		Path of the written file.
	"""
	print("Bulk certificate pipeline")
	print(f"Output kind: {args.output_kind}")
	start_time = time.perf_counter()
	state = build_state(args)

	if args.save_preset_path:
		bcm.presets.save_preset_path(state, pathlib.Path(args.save_preset_path))
		print(f"Preset written: {args.save_preset_path}")

	if args.preview:
		entry = bcm.batch.generate_preview(state)
		output_path = pathlib.Path(args.output_path or entry.name)
		bcm.batch.save_download(entry.data, output_path)
		print(f"Preview written: {output_path}")
	else:
		config = BatchConfig(archive_name=args.output_path or DEFAULT_ARCHIVE_NAME, verbose=args.verbose)
		result = bcm.batch.generate_batch(state, config)
		output_path = bcm.batch.save_download(result.archive, pathlib.Path(config.archive_name))
		print(f"Files generated: {len(result.entries)}")
		print(f"Archive written: {output_path}")

	total_time = time.perf_counter() - start_time
	print(f"Timing: total={total_time:.2f}s")
	return output_path


#============================================
def main(argv: list[str] | None = None) -> int:
	"""
	Main entry point.
	"""
	args = parse_args(argv)
	try:
		run_pipeline(args)
	except CertificateError as exc:
		print(f"[FAIL] {exc}", file=sys.stderr)
		return 1
	return 0

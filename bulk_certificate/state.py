"""
Application state shared by the editing, rendering and batch modules.
"""

# Standard Library
import dataclasses

# local repo modules
import bulk_certificate as bcm
import bulk_certificate.config
import bulk_certificate.dataset
import bulk_certificate.fields
import bulk_certificate.template


TextField = bcm.fields.TextField
FontAsset = bcm.fields.FontAsset
Dataset = bcm.dataset.Dataset
TemplateAsset = bcm.template.TemplateAsset


@dataclasses.dataclass
class AppState:
	fields: list[TextField]
	active_field_id: str
	template: TemplateAsset | None = None
	fonts: list[FontAsset] = dataclasses.field(default_factory=list)
	dataset: Dataset = dataclasses.field(default_factory=Dataset)
	output_kind: str = bcm.config.DEFAULT_OUTPUT_KIND
	identity_column: str | None = None


#============================================
def new_app_state() -> AppState:
	"""
	Create an empty state holding the single required field.

	Returns:
		AppState.
	"""
	field = TextField(field_id=bcm.fields.new_field_id())
	return AppState(fields=[field], active_field_id=field.field_id)


#============================================
def set_output_kind(state: AppState, output_kind: str) -> str:
	"""
	Select the output kind, rejecting unknown kinds.
	"""
	normalized = bcm.config.normalize_output_kind(output_kind)
	state.output_kind = normalized
	return normalized

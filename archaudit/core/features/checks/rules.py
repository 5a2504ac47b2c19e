# (c) Copyright Datacraft, 2026
"""Rule configuration models supplied with each run."""
import logging
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .kinds import CheckKind, resolve_check_kind

logger = logging.getLogger(__name__)

# Gaps larger than this are summarised instead of listed number by number
MAX_MISSING_NUMBERS = 10_000


class PathMode(str, Enum):
	SEPARATOR = 'separator'
	TEMPLATE = 'template'


class _ConfigModel(BaseModel):
	model_config = ConfigDict(
		frozen=True,
		populate_by_name=True,
		alias_generator=to_camel,
		extra='ignore',
	)


class CheckItem(_ConfigModel):
	"""One enable-able, parameterized check."""
	kind: CheckKind = Field(validation_alias=AliasChoices('kind', 'code', 'itemCode', 'item_code'))
	enabled: bool = True
	parameters: dict[str, Any] = Field(default_factory=dict)

	@field_validator('kind', mode='before')
	@classmethod
	def resolve_kind(cls, value):
		kind = resolve_check_kind(value)
		if kind is None:
			raise ValueError(f"Unknown check code: {value!r}")
		return kind

	@property
	def code(self) -> str:
		return self.kind.value

	def get(self, *names: str, default: Any = None) -> Any:
		"""First non-empty parameter among ``names``."""
		for name in names:
			value = self.parameters.get(name)
			if value not in (None, ''):
				return value
		return default

	def get_float(self, *names: str, default: float) -> float:
		value = self.get(*names)
		try:
			return float(value) if value is not None else default
		except (TypeError, ValueError):
			logger.warning(f"Invalid numeric parameter {names[0]}={value!r} for {self.code}")
			return default

	def get_int(self, *names: str, default: int) -> int:
		return int(self.get_float(*names, default=default))

	def get_list(self, *names: str, default: list | None = None) -> list:
		value = self.get(*names)
		if value is None:
			return list(default or [])
		if isinstance(value, str):
			return [v.strip() for v in value.split(',') if v.strip()]
		return list(value)

	def get_bool(self, *names: str, default: bool = False) -> bool:
		value = self.get(*names)
		if value is None:
			return default
		if isinstance(value, str):
			return value.strip().lower() in ('true', '1', 'yes', 'strict')
		return bool(value)


class FormatRule(_ConfigModel):
	"""Format constraints for one metadata column."""
	non_empty: bool = False
	unique: bool = False
	regex: str = ''
	date_format: str = ''
	value_list: list[str] = Field(default_factory=list)

	def is_active(self) -> bool:
		return bool(self.non_empty or self.unique or self.regex or self.date_format or self.value_list)


class FolderChecks(_ConfigModel):
	existence: bool = True


class FileChecks(_ConfigModel):
	count_match: bool = False
	count_column: str = ''
	name_format: str = ''
	sequential: bool = False
	max_missing: int = Field(gt=0, default=MAX_MISSING_NUMBERS)


class ResourcePathConfig(_ConfigModel):
	"""How a row's resource folder path is composed from its columns."""
	base_path: str = ''
	path_fields: list[str] = Field(default_factory=list)
	path_mode: PathMode = PathMode.SEPARATOR
	template: str | None = None
	separator: str | None = None
	folder_checks: FolderChecks = Field(default_factory=FolderChecks)
	file_checks: FileChecks = Field(default_factory=FileChecks)

	def has_link_checks(self) -> bool:
		files = self.file_checks
		return bool(
			self.folder_checks.existence
			or (files.count_match and files.count_column)
			or files.name_format
			or files.sequential
		)


class RuleConfiguration(_ConfigModel):
	"""
	Everything a run needs to know about what to check.

	``items`` may be given as a list of ``{code, enabled, parameters}``
	objects or as a mapping of code to ``{enabled, parameters}``. Codes are
	resolved to :class:`CheckKind` here, once; unknown codes are dropped with
	a warning so the rest of the pipeline only ever sees known kinds.
	"""
	id: str | None = None
	name: str = 'default'
	items: list[CheckItem] = Field(default_factory=list)
	format_rules: dict[str, FormatRule] = Field(default_factory=dict)
	resource: ResourcePathConfig | None = Field(
		default=None,
		validation_alias=AliasChoices('resource', 'resourceConfig', 'resource_config'),
	)
	service_url: str | None = None

	@model_validator(mode='before')
	@classmethod
	def normalize_items(cls, data):
		if not isinstance(data, dict):
			return data
		raw_items = data.get('items')
		if raw_items is None:
			return data
		if isinstance(raw_items, dict):
			raw_items = [
				{'code': code, **(params if isinstance(params, dict) else {'enabled': bool(params)})}
				for code, params in raw_items.items()
			]
		items = []
		for raw in raw_items:
			if isinstance(raw, CheckItem):
				items.append(raw)
				continue
			code = None
			if isinstance(raw, dict):
				code = raw.get('kind') or raw.get('code') or raw.get('itemCode') or raw.get('item_code')
			if code is None or resolve_check_kind(code) is None:
				logger.warning(f"Ignoring unknown check item: {code!r}")
				continue
			items.append(raw)
		return {**data, 'items': items}

	def get_item(self, kind: CheckKind) -> CheckItem | None:
		for item in self.items:
			if item.kind == kind:
				return item
		return None

	def is_enabled(self, kind: CheckKind) -> bool:
		item = self.get_item(kind)
		return item is not None and item.enabled

	def enabled_kinds(self) -> list[CheckKind]:
		return [item.kind for item in self.items if item.enabled]

	def active_format_rules(self) -> dict[str, FormatRule]:
		return {column: rule for column, rule in self.format_rules.items() if rule.is_active()}

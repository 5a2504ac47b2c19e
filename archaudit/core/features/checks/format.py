# (c) Copyright Datacraft, 2026
"""Per-column format rules for metadata rows."""
import logging
import re
from datetime import datetime
from functools import lru_cache
from typing import Iterator, Sequence

from archaudit.core.features.results import CheckCategory, ErrorType, Finding
from .base import Row, RowChecker
from .kinds import CheckKind
from .rules import FormatRule, RuleConfiguration

logger = logging.getLogger(__name__)

# Java SimpleDateFormat tokens mapped to strftime directives
_DATE_TOKENS = {
	'yyyy': '%Y',
	'yy': '%y',
	'MM': '%m',
	'dd': '%d',
	'HH': '%H',
	'mm': '%M',
	'ss': '%S',
	'SSS': '%f',
}
_DATE_TOKEN_RE = re.compile('|'.join(sorted(_DATE_TOKENS, key=len, reverse=True)))


@lru_cache(maxsize=64)
def to_strptime_format(pattern: str) -> str:
	"""Accept either a strftime pattern or a ``yyyy-MM-dd`` style one."""
	if '%' in pattern:
		return pattern
	return _DATE_TOKEN_RE.sub(lambda m: _DATE_TOKENS[m.group(0)], pattern)


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern | None:
	try:
		return re.compile(pattern)
	except re.error as e:
		logger.warning(f"Invalid regex pattern {pattern!r}: {e}")
		return None


def matches_regex(value: str, pattern: str) -> bool:
	"""Full-match ``value``; an invalid pattern never fails a value."""
	compiled = _compile(pattern)
	if compiled is None:
		return True
	return compiled.fullmatch(value) is not None


def matches_date_format(value: str, pattern: str) -> bool:
	try:
		datetime.strptime(value, to_strptime_format(pattern))
		return True
	except ValueError:
		return False


def _cell_text(value) -> str | None:
	if value is None:
		return None
	return str(value)


class FormatRulesChecker(RowChecker):
	"""Validate column values against non-empty, regex, date, list and uniqueness rules."""

	kind = CheckKind.FORMAT_RULES
	name = 'Format rules'
	category = CheckCategory.FORMAT

	def is_enabled(self, rules: RuleConfiguration) -> bool:
		return bool(rules.active_format_rules())

	def iter_rows(self, rows: Sequence[Row], rules: RuleConfiguration) -> Iterator[tuple[int, list[Finding]]]:
		format_rules = rules.active_format_rules()
		seen: dict[str, set[str]] = {column: set() for column in format_rules}

		for row_index, row in enumerate(rows):
			findings = []
			for column, rule in format_rules.items():
				value = _cell_text(row.get(column))
				findings.extend(self._check_value(row_index, column, value, rule, seen[column]))
			yield row_index, findings

	def _check_value(
		self,
		row_index: int,
		column: str,
		value: str | None,
		rule: FormatRule,
		seen: set[str],
	) -> list[Finding]:
		findings = []
		if value is None or not value.strip():
			if rule.non_empty:
				findings.append(self.finding(
					ErrorType.NON_EMPTY, "Value is empty",
					row_index=row_index, column=column, value=value or '',
				))
			return findings

		if rule.regex and not matches_regex(value, rule.regex):
			findings.append(self.finding(
				ErrorType.REGEX, f"Value does not match pattern: {rule.regex}",
				row_index=row_index, column=column, value=value,
				expected_value=rule.regex,
			))

		if rule.date_format and not matches_date_format(value.strip(), rule.date_format):
			findings.append(self.finding(
				ErrorType.DATE_FORMAT, f"Value is not a date in format: {rule.date_format}",
				row_index=row_index, column=column, value=value,
				expected_value=rule.date_format,
			))

		if rule.value_list and value not in rule.value_list:
			findings.append(self.finding(
				ErrorType.VALUE_LIST, "Value is not in the allowed list",
				row_index=row_index, column=column, value=value,
				expected_value=', '.join(rule.value_list),
			))

		if rule.unique:
			if value in seen:
				findings.append(self.finding(
					ErrorType.UNIQUE, "Duplicate value found",
					row_index=row_index, column=column, value=value,
				))
			else:
				seen.add(value)
		return findings

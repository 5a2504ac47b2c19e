# (c) Copyright Datacraft, 2026
"""
Tolerant parser for two-step inspection responses.

The inspect endpoint answers with text that usually looks like JSON but is
not guaranteed to be well formed (Python reprs, trailing garbage, truncated
objects). Rather than a strict parse, each known field is located by its
quoted name and its value is scanned forward. Arrays are read with explicit
bracket-depth tracking so nested coordinate lists survive intact.
"""
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

FIELD_NAMES = (
	'blank', 'is_blank', 'rectify', 'house_angle', 'dpi', 'kb', 'quality',
	'bit_depth', 'page_size', 'format', 'stain', 'hole', 'edge_remove', 'edge',
)

_SCALAR_TERMINATORS = ',}]\n\r'
_INT_RE = re.compile(r'^[+-]?\d+$')
_FLOAT_RE = re.compile(r'^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$')


class _Missing:
	pass


MISSING = _Missing()


def parse_inspection_text(text: str) -> dict[str, Any]:
	"""
	Extract every known field from a loosely structured response body.

	Args:
		text: Raw response body

	Returns:
		Mapping of field name to decoded value for the fields found
	"""
	fields: dict[str, Any] = {}
	if not text:
		return fields
	for name in FIELD_NAMES:
		value = extract_field(text, name)
		if value is not MISSING:
			fields[name] = value
	return fields


def extract_field(text: str, name: str) -> Any:
	"""Return the value following ``"name":`` or MISSING."""
	for quote in ('"', "'"):
		token = f'{quote}{name}{quote}'
		start = text.find(token)
		while start != -1:
			pos = _skip_whitespace(text, start + len(token))
			if pos < len(text) and text[pos] in ':=':
				pos = _skip_whitespace(text, pos + 1)
				try:
					value, _ = read_value(text, pos)
					return value
				except ValueError as e:
					logger.debug(f"Skipping malformed field '{name}': {e}")
					return MISSING
			start = text.find(token, start + 1)
	return MISSING


def read_value(text: str, pos: int) -> tuple[Any, int]:
	"""Read one value starting at ``pos``; return it and the end position."""
	if pos >= len(text):
		raise ValueError("value expected at end of input")
	char = text[pos]
	if char == '[':
		return read_array(text, pos)
	if char in '"\'':
		end = text.find(char, pos + 1)
		if end == -1:
			raise ValueError("unterminated string")
		return text[pos + 1:end], end + 1
	end = pos
	while end < len(text) and text[end] not in _SCALAR_TERMINATORS:
		end += 1
	raw = text[pos:end].strip()
	if not raw:
		raise ValueError("empty scalar")
	return _decode_scalar(raw), end


def read_array(text: str, pos: int) -> tuple[list, int]:
	"""
	Read a (possibly nested) bracketed array starting at ``pos``.

	Returns:
		The decoded list and the position just past its closing bracket
	"""
	if text[pos] != '[':
		raise ValueError("array expected")
	stack: list[list] = []
	token = []
	depth = 0
	i = pos
	while i < len(text):
		char = text[i]
		if char == '[':
			depth += 1
			stack.append([])
		elif char == ']':
			_flush_token(token, stack)
			depth -= 1
			finished = stack.pop()
			if depth == 0:
				return finished, i + 1
			stack[-1].append(finished)
		elif char == ',':
			_flush_token(token, stack)
		elif char in '"\'':
			end = text.find(char, i + 1)
			if end == -1:
				raise ValueError("unterminated string in array")
			stack[-1].append(text[i + 1:end])
			i = end
		elif not char.isspace():
			token.append(char)
		i += 1
	raise ValueError(f"unbalanced brackets (depth {depth} at end of input)")


def _flush_token(token: list[str], stack: list[list]) -> None:
	if token:
		stack[-1].append(_decode_scalar(''.join(token)))
		token.clear()


def _decode_scalar(raw: str) -> Any:
	lowered = raw.lower()
	if lowered == 'true':
		return True
	if lowered == 'false':
		return False
	if lowered in ('null', 'none'):
		return None
	if _INT_RE.match(raw):
		return int(raw)
	if _FLOAT_RE.match(raw):
		return float(raw)
	return raw


def _skip_whitespace(text: str, pos: int) -> int:
	while pos < len(text) and text[pos].isspace():
		pos += 1
	return pos

from typing import Any
import json as basejson
from pathlib import Path
from enum import Enum


def asPrimitive(value: Any) -> Any:
	"""Converts the given value to a primitive value, that can be converted
	to JSON"""
	if value is None or type(value) in (bool, float, int, str):
		return value
	elif isinstance(value, tuple) and hasattr(value, "_fields"):
		return {k: asPrimitive(getattr(value, k)) for k in value._fields}
	elif isinstance(value, list) or isinstance(value, tuple) or isinstance(value, set):
		return [asPrimitive(v) for v in value]
	elif isinstance(value, dict):
		return {asPrimitive(k): asPrimitive(v) for k, v in value.items()}
	elif isinstance(value, Enum):
		return asPrimitive(value.value)
	elif isinstance(value, Path):
		return str(value)
	else:
		return value


def json(value: Any) -> bytes:
	"""Converts the value to UTF-8 encoded JSON."""
	return basejson.dumps(asPrimitive(value)).encode("utf8")


# EOF

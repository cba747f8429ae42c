import os
import sys
import time
from contextvars import ContextVar
from enum import Enum
from typing import Any, NamedTuple, TypeAlias

from .term import Term

# --
# Log entries are written to stderr, one line each, with their context
# rendered as `Key=value` pairs. Events (like incoming requests) are named
# rather than described.

ERR = sys.stderr

TValue: TypeAlias = str | int | float | bool | None

LogOrigin: ContextVar[str] = ContextVar("LogOrigin", default="dirserve")


class LogLevel(Enum):
	Debug = 0
	Info = 10
	Warning = 30
	Error = 40  # A failure the server recovers from
	Exception = 50  # An unexpected failure


# 256-color codes, by level
LOG_COLORS: dict[LogLevel, int] = {
	LogLevel.Debug: 31,
	LogLevel.Info: 75,
	LogLevel.Warning: 202,
	LogLevel.Error: 160,
	LogLevel.Exception: 124,
}

LOG_LEVELS: dict[str, LogLevel] = {_.name.lower(): _ for _ in LogLevel}

# Entries below that level are dropped before being formatted
LOG_LEVEL: LogLevel = LOG_LEVELS.get(
	os.getenv("DIRSERVE_LOG_LEVEL", "info").lower(), LogLevel.Info
)


class LogEntry(NamedTuple):
	origin: str
	time: float
	level: LogLevel
	message: str
	context: dict[str, TValue]
	# Events have a value, messages may have an icon
	isEvent: bool = False
	value: Any = None
	icon: str | None = None


def setLevel(level: LogLevel | str) -> LogLevel:
	"""Sets the minimum level of the entries that are written."""
	global LOG_LEVEL
	LOG_LEVEL = LOG_LEVELS[level.lower()] if isinstance(level, str) else level
	return LOG_LEVEL


def formatData(value: Any) -> str:
	"""Formats a value for a log line, keeping it short and unambiguous."""
	if value is None or (isinstance(value, (list, tuple, dict)) and not value):
		return "◌"
	elif isinstance(value, bool):
		return "✓" if value else "✗"
	elif isinstance(value, float):
		return f"{value:0.2f}"
	elif isinstance(value, str):
		# Quoted only when it would be confused with the next pair
		return repr(value) if " " in value else value
	elif isinstance(value, dict):
		return " ".join(
			f"{Term.BOLD}{k}{Term.RESET}={formatData(v)}" for k, v in value.items()
		)
	elif isinstance(value, (list, tuple)):
		return ",".join(formatData(_) for _ in value)
	else:
		return str(value)


def write(entry: LogEntry) -> LogEntry:
	if entry.level.value < LOG_LEVEL.value:
		return entry
	color: str = Term.Color(LOG_COLORS[entry.level])
	origin: str = f"{color}{Term.BOLD}[{entry.origin}]"
	if entry.isEvent:
		line = f"{origin} {entry.message}{Term.RESET} {formatData(entry.value)}"
	else:
		icon: str = f" {entry.icon}" if entry.icon else ""
		line = f"{origin}{Term.RESET}{icon} {entry.message}"
	ERR.write(f"{line} {formatData(entry.context)}{Term.RESET}\n")
	ERR.flush()
	return entry


def log(
	level: LogLevel,
	message: str,
	context: dict[str, TValue],
	*,
	isEvent: bool = False,
	value: Any = None,
	icon: str | None = None,
) -> LogEntry:
	return write(
		LogEntry(
			origin=LogOrigin.get(),
			time=time.time(),
			level=level,
			message=message,
			context=context,
			isEvent=isEvent,
			value=value,
			icon=icon,
		)
	)


def debug(message: str, *, icon: str | None = None, **context: TValue) -> LogEntry:
	return log(LogLevel.Debug, message, context, icon=icon)


def info(message: str, *, icon: str | None = None, **context: TValue) -> LogEntry:
	return log(LogLevel.Info, message, context, icon=icon)


def warning(message: str, *, icon: str | None = None, **context: TValue) -> LogEntry:
	return log(LogLevel.Warning, message, context, icon=icon)


def error(
	message: str,
	code: int | str | None,
	*,
	icon: str | None = None,
	**context: TValue,
) -> LogEntry:
	"""Logs a managed error, with a `code` that identifies it in the logs."""
	return log(
		LogLevel.Error,
		message,
		context | {"Code": code} if code else context,
		value=code,
		icon=icon,
	)


def event(name: str, value: Any = None, **context: TValue) -> LogEntry:
	return log(LogLevel.Info, name, context, isEvent=True, value=value)


def exception(
	exception: BaseException,
	message: str | None = None,
) -> BaseException:
	"""Writes the exception and its traceback, returning the exception so that
	it can be used like `raise exception(e)`."""
	summary: str = f"[{exception.__class__.__name__}] {exception}"
	try:
		ERR.write(f"!!! EXCP {f'{message}: {summary}' if message else summary}\n")
		tb = exception.__traceback__
		while tb:
			code = tb.tb_frame.f_code
			ERR.write(
				f"... in {code.co_name:15s} at {tb.tb_lineno:4d} in {code.co_filename}\n"
			)
			tb = tb.tb_next
		ERR.flush()
	except Exception:  # nosec: B110
		# This is called from exception handlers, where it must not raise
		pass
	return exception


# The level of each logging function, used by `logged`
LOGGED_LEVELS: dict[Any, LogLevel] = {
	debug: LogLevel.Debug,
	info: LogLevel.Info,
	event: LogLevel.Info,
	warning: LogLevel.Warning,
	error: LogLevel.Error,
}


def logged(item: Any) -> bool:
	"""Tells if the given logging function currently writes anything, so
	that expensive context is only computed when needed, as in
	`logged(debug) and debug(...)`."""
	return LOGGED_LEVELS.get(item, LogLevel.Exception).value >= LOG_LEVEL.value


# EOF

from __future__ import annotations

import logging
import os
import sys
import threading
import time
import traceback
from contextlib import contextmanager
from typing import Any
from loguru import logger


LOG_FORMAT = (
	"<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
	"<blue>{thread.name:^10}</blue> | "
	"[<level>{level:<8}</level>] | "
	"<white>{name}.{function}:{line}</white> | "
	"<level>{message}</level>"
)

LEVEL_NAMES = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")
DEFAULT_CONSOLE_LEVEL = "INFO"
DEFAULT_FILE_LEVEL = "DEBUG"


def parse_level(level_value: str | int | None, default: str = DEFAULT_CONSOLE_LEVEL) -> str:
	"""Map a config/env level (name or stdlib int) to a loguru level name."""
	if isinstance(level_value, int):
		level_value = logging.getLevelName(level_value)
	name = str(level_value or "").strip().upper()
	return name if name in LEVEL_NAMES else default


def _route_uncaught_exceptions() -> None:
	def _sys_hook(exc_type, exc_value, exc_tb):
		logger.opt(exception=(exc_type, exc_value, exc_tb)).critical("[_sys_hook] - uncaught_exception")

	def _thread_hook(args):
		if args.exc_type is SystemExit:
			return
		thread_name = getattr(args.thread, "name", "unknown")
		try:
			logger.opt(exception=(args.exc_type, args.exc_value, args.exc_traceback)).critical(
				f"[_thread_hook] - uncaught_thread_exception - thread={thread_name}"
			)
		except Exception:
			traceback.print_exception(args.exc_type, args.exc_value, args.exc_traceback, file=sys.stderr)

	sys.excepthook = _sys_hook
	threading.excepthook = _thread_hook


def setup_logging(
	app_name: str = "recording_console",
	log_dir: str = "log",
	log_level: str | int | None = None,
	file_level: str | int | None = None,
) -> str:
	"""
	Console sink plus a rotating, zipped file sink (10 MB, 50 files kept).

	LOG_LEVEL / LOG_FILE_LEVEL override the levels when none are passed.
	Returns the log file path.
	"""
	console_level = parse_level(log_level if log_level is not None else os.getenv("LOG_LEVEL"))
	resolved_file_level = parse_level(
		file_level if file_level is not None else os.getenv("LOG_FILE_LEVEL"),
		default=DEFAULT_FILE_LEVEL,
	)

	os.makedirs(log_dir, exist_ok=True)
	log_path = get_log_file_path(app_name=app_name, log_dir=log_dir)

	logger.remove()
	logger.configure(
		handlers=[
			{"sink": sys.stdout, "format": LOG_FORMAT, "colorize": True, "level": console_level},
			{
				"sink": log_path,
				"format": LOG_FORMAT,
				"rotation": "10 MB",
				"compression": "zip",
				"retention": 50,
				"colorize": False,
				"level": resolved_file_level,
			},
		]
	)
	_route_uncaught_exceptions()

	logger.info(
		f"[setup_logging] - logger_initialized - app_name={app_name} console_level={console_level} file_level={resolved_file_level} log_path={log_path}"
	)
	return log_path


def get_log_file_path(app_name: str = "recording_console", log_dir: str = "log") -> str:
	return os.path.join(log_dir, f"{app_name}.log")


def summarize_for_log(payload: Any, *, max_items: int = 10, max_text: int = 140) -> Any:
	"""Shorten request params/responses so one log line stays readable."""
	if isinstance(payload, dict):
		return {str(k): summarize_for_log(v, max_items=max_items, max_text=max_text) for k, v in list(payload.items())[:max_items]}
	if isinstance(payload, (list, tuple)):
		return [summarize_for_log(v, max_items=max_items, max_text=max_text) for v in list(payload)[:max_items]]
	if payload is None or isinstance(payload, (bool, int, float)):
		return payload
	text = str(payload)
	return f"{text[:max_text]}...({len(text)} chars)" if len(text) > max_text else text


@contextmanager
def log_timing(method_name: str, **context: Any):
	"""Debug-log start/end of an HTTP call with its duration; failures logged with traceback."""
	start = time.perf_counter()
	context_txt = " ".join(f"{k}={summarize_for_log(v)}" for k, v in context.items())
	logger.debug(f"[{method_name}] - start {context_txt}".strip())
	try:
		yield
	except Exception:
		duration_ms = round((time.perf_counter() - start) * 1000, 2)
		logger.exception(f"[{method_name}] - failed - duration_ms={duration_ms} {context_txt}".strip())
		raise
	duration_ms = round((time.perf_counter() - start) * 1000, 2)
	logger.debug(f"[{method_name}] - end - duration_ms={duration_ms} {context_txt}".strip())

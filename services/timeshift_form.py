from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable

from loguru import logger
from nicegui import run

from layout.observable_wrapper import ObservableWrapper
from services.settings_client import SettingsClient, SettingsLoadError, SettingsSaveError
from services.timeshift_config import GATED_FIELDS, TimeshiftConfig

SAVE_CONTROL = "save"

Runner = Callable[..., Awaitable[Any]]
RenderListener = Callable[[dict[str, bool]], None]


class LoadState(str, Enum):
	IDLE = "idle"
	LOADING = "loading"
	LOADED = "loaded"
	FAILED = "failed"


@dataclass
class SaveResult:
	ok: bool
	skipped: bool = False
	error: str = ""
	invalid: list[str] = field(default_factory=list)


def render_enabled_state(config: TimeshiftConfig, *, form_enabled: bool) -> dict[str, bool]:
	"""
	Derive the enabled flag of every control from the record and the form phase.

	This is the only place enablement is decided: it runs at construction with
	the defaults, on every unlimited-flag change and again after a load.
	"""
	state = {name: form_enabled for name in TimeshiftConfig.field_names()}
	for number_field, unlimited_field in GATED_FIELDS.items():
		state[number_field] = form_enabled and not bool(getattr(config, unlimited_field))
	state[SAVE_CONTROL] = form_enabled
	return state


class TimeshiftForm:
	"""In-memory state of the timeshift settings panel."""

	def __init__(self) -> None:
		self.values = ObservableWrapper(TimeshiftConfig())
		self.load_state = LoadState.IDLE
		self.load_error = ""
		self.saving = False
		self.enabled: dict[str, bool] = {}
		self._listeners: list[RenderListener] = []

		self.values.subscribe(set(GATED_FIELDS.values()), self._on_unlimited_changed, owner="timeshift_form")
		self.render()

	# ------------------------------------------------------------------ State

	@property
	def form_enabled(self) -> bool:
		return self.load_state == LoadState.LOADED

	@property
	def can_save(self) -> bool:
		return self.form_enabled and not self.saving

	def invalid_fields(self) -> list[str]:
		"""Editable numeric fields left blank; these block a save."""
		return [
			name for name in GATED_FIELDS
			if self.enabled.get(name, False) and getattr(self.values, name) is None
		]

	def snapshot(self) -> TimeshiftConfig:
		return dataclasses.replace(self.values.target)

	def set_value(self, name: str, value: Any) -> None:
		setattr(self.values, name, value)

	def on_render(self, listener: RenderListener) -> Callable[[], None]:
		"""Register a callback receiving every newly rendered enabled state."""
		self._listeners.append(listener)

		def unsubscribe() -> None:
			if listener in self._listeners:
				self._listeners.remove(listener)

		return unsubscribe

	def render(self) -> dict[str, bool]:
		self.enabled = render_enabled_state(self.values.target, form_enabled=self.form_enabled)
		for listener in list(self._listeners):
			listener(dict(self.enabled))
		return self.enabled

	def _on_unlimited_changed(self, name: str, old: Any, value: Any) -> None:
		logger.debug(f"[_on_unlimited_changed] - unlimited_flag_changed - field={name} old={old} new={value}")
		self.render()

	# ------------------------------------------------------------------ Load phases

	def begin_load(self) -> None:
		self.load_state = LoadState.LOADING
		self.load_error = ""
		self.render()

	def apply_loaded(self, record: TimeshiftConfig) -> None:
		self.values.update(record.to_dict())
		self.load_state = LoadState.LOADED
		# unlimited flags may not have changed, so sync enablement explicitly
		self.render()

	def fail_load(self, message: str) -> None:
		self.load_state = LoadState.FAILED
		self.load_error = message
		self.render()

	async def load(self, client: SettingsClient, runner: Runner = run.io_bound) -> bool:
		self.begin_load()
		try:
			record = await runner(client.load_settings)
		except SettingsLoadError as ex:
			logger.warning(f"[load] - timeshift_settings_load_failed - error={ex}")
			self.fail_load(str(ex))
			return False
		self.apply_loaded(record)
		logger.info(f"[load] - timeshift_settings_loaded - values={record.to_dict()}")
		return True

	# ------------------------------------------------------------------ Save

	async def save(self, client: SettingsClient, runner: Runner = run.io_bound) -> SaveResult:
		if not self.can_save:
			logger.debug(
				f"[save] - save_ignored - load_state={self.load_state.value} saving={self.saving}"
			)
			return SaveResult(ok=False, skipped=True)

		invalid = self.invalid_fields()
		if invalid:
			logger.info(f"[save] - save_refused_blank_required - fields={invalid}")
			return SaveResult(ok=False, invalid=invalid)

		self.saving = True
		record = self.snapshot()
		try:
			await runner(client.save_settings, record)
		except SettingsSaveError as ex:
			logger.warning(f"[save] - timeshift_settings_save_failed - errormsg={ex.errormsg}")
			return SaveResult(ok=False, error=ex.errormsg)
		finally:
			self.saving = False

		logger.info("[save] - timeshift_settings_saved")
		return SaveResult(ok=True)

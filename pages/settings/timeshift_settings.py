from __future__ import annotations

from typing import Any, Callable

from nicegui import run, ui
from loguru import logger

from layout.context import PageContext
from services.i18n import t
from services.settings_client import SettingsClientError
from services.timeshift_config import (
	FIELD_ENABLED,
	FIELD_MAX_PERIOD,
	FIELD_MAX_SIZE,
	FIELD_ONDEMAND,
	FIELD_PATH,
	FIELD_UNLIMITED_PERIOD,
	FIELD_UNLIMITED_SIZE,
	to_bool,
	to_number,
)
from services.timeshift_form import SAVE_CONTROL, TimeshiftForm

HELP_PAGE = "config_timeshift.html"


def add_timeshift_panel(parent: ui.element, index: int, ctx: PageContext) -> None:
	"""Build the timeshift settings panel inside `parent` at position `index`."""
	client = ctx.require_settings_client()
	form = TimeshiftForm()
	inputs: dict[str, ui.element] = {}
	coerce: dict[str, Callable[[Any], Any]] = {}

	def _bind(name: str, element: ui.element, convert: Callable[[Any], Any]) -> None:
		inputs[name] = element.mark(name)
		coerce[name] = convert
		element.on_value_change(lambda e, n=name: form.set_value(n, coerce[n](e.value)))

	def _required(name: str) -> Callable[[Any], bool]:
		# blank is only an error while the field is editable
		return lambda v: v is not None or not form.enabled.get(name, False)

	with parent:
		with ui.card().classes("w-full max-w-[760px]") as panel:
			with ui.row().classes("w-full items-center gap-2"):
				ui.icon("schedule").classes("text-primary text-2xl")
				ui.label(t("timeshift.title", "Timeshift")).classes("text-xl font-semibold")

			# toolbar: save left, help right
			with ui.row().classes("w-full items-center justify-between gap-2"):
				save_btn = ui.button(
					t("timeshift.save", "Save configuration"),
					icon="save",
					on_click=lambda: _save_changes(),
				).props("color=primary").mark("timeshift_save")
				save_btn.tooltip(t("timeshift.save_tooltip", "Save changes made to configuration below"))
				ui.button(t("timeshift.help", "Help"), icon="help_outline", on_click=lambda: _open_help()).props("flat")

			with ui.row().classes("w-full items-center gap-2") as load_error_row:
				ui.icon("error").classes("text-negative")
				load_error_label = ui.label("").classes("text-sm text-negative").mark("timeshift_load_error")
				ui.button(t("timeshift.retry", "Retry"), on_click=lambda: _load_settings()).props("flat dense color=negative")
			load_error_row.visible = False

			with ui.expansion(t("timeshift.options", "Timeshift Options"), icon="tune", value=True).classes("w-full"):
				with ui.column().classes("w-full gap-2"):
					_bind(FIELD_ENABLED, ui.checkbox(t("timeshift.enabled", "Enabled")), to_bool)
					_bind(FIELD_ONDEMAND, ui.checkbox(t("timeshift.ondemand", "On-Demand")), to_bool)
					_bind(
						FIELD_PATH,
						ui.input(t("timeshift.path", "Storage Path")).props("outlined").classes("w-[300px]"),
						lambda v: str(v or ""),
					)

					with ui.row().classes("w-full items-start gap-6 no-wrap"):
						with ui.column().classes("w-[300px] gap-2"):
							_bind(
								FIELD_MAX_PERIOD,
								ui.number(
									t("timeshift.max_period", "Max. Period (mins)"),
									min=0,
									precision=0,
									validation={t("timeshift.required", "Required"): _required(FIELD_MAX_PERIOD)},
								).props("outlined").classes("w-full"),
								to_number,
							)
							_bind(
								FIELD_MAX_SIZE,
								ui.number(
									t("timeshift.max_size", "Max. Size (MB)"),
									min=0,
									precision=0,
									validation={t("timeshift.required", "Required"): _required(FIELD_MAX_SIZE)},
								).props("outlined").classes("w-full"),
								to_number,
							)
						with ui.column().classes("w-[200px] gap-6 pt-4"):
							_bind(FIELD_UNLIMITED_PERIOD, ui.checkbox(t("timeshift.unlimited_period", "Unlimited time")), to_bool)
							_bind(FIELD_UNLIMITED_SIZE, ui.checkbox(t("timeshift.unlimited_size", "Unlimited size")), to_bool)

		saving_dialog = ui.dialog().props("persistent")
		with saving_dialog, ui.card().classes("items-center"):
			ui.spinner(size="lg")
			ui.label(t("timeshift.saving", "Saving Data..."))

	panel.move(target_index=index)

	# ------------------------------------------------------------------ State → widgets

	def _apply_enabled(state: dict[str, bool]) -> None:
		for name, element in inputs.items():
			element.set_enabled(state.get(name, False))
		save_btn.set_enabled(state.get(SAVE_CONTROL, False))

	def _push_values() -> None:
		values = form.snapshot().to_dict()
		for name, element in inputs.items():
			element.value = values[name]

	form.on_render(_apply_enabled)
	_apply_enabled(form.enabled)

	# ------------------------------------------------------------------ Load / save

	async def _load_settings() -> None:
		load_error_row.visible = False
		ok = await form.load(client)
		if ok:
			_push_values()
			return
		message = t("timeshift.load_failed", "Loading settings failed: {error}", error=form.load_error)
		load_error_label.set_text(message)
		load_error_row.visible = True
		ui.notify(message, type="negative")

	async def _save_changes() -> None:
		if not form.can_save:
			logger.debug("[_save_changes] - save_click_ignored - form busy or not loaded")
			return
		# show the "Required" hint on every blank editable number, not just the first
		checks = [inputs[name].validate() for name in (FIELD_MAX_PERIOD, FIELD_MAX_SIZE)]
		if not all(checks) or form.invalid_fields():
			logger.debug(f"[_save_changes] - save_click_refused - invalid={form.invalid_fields()}")
			return
		saving_dialog.open()
		try:
			result = await form.save(client)
		finally:
			saving_dialog.close()
		if result.error:
			_alert(t("timeshift.save_failed", "Save failed"), result.error)

	def _alert(title: str, message: str) -> None:
		d = ui.dialog()
		with d, ui.card().classes("w-[420px] max-w-[95vw]"):
			ui.label(title).classes("text-lg font-semibold")
			ui.label(message).classes("text-sm whitespace-pre-wrap")
			with ui.row().classes("w-full justify-end"):
				ui.button(t("common.close", "Close"), on_click=d.close).props("flat")
		d.on("hide", lambda _e=None: d.delete())
		d.open()

	async def _open_help() -> None:
		error_text = ""
		try:
			content = await run.io_bound(client.fetch_help, HELP_PAGE)
		except SettingsClientError as ex:
			logger.warning(f"[_open_help] - help_fetch_failed - page={HELP_PAGE} error={ex}")
			content = None
			error_text = str(ex)

		d = ui.dialog()
		with d, ui.card().classes("w-[900px] max-w-[95vw]"):
			ui.label(t("timeshift.help_title", "Timeshift Configuration")).classes("text-lg font-semibold")
			with ui.scroll_area().classes("w-full h-[60vh]"):
				if content is not None:
					ui.html(content, sanitize=False)
				else:
					ui.label(error_text).classes("text-sm text-negative")
			with ui.row().classes("w-full justify-end"):
				ui.button(t("common.close", "Close"), on_click=d.close).props("flat")
		d.open()

	with panel:
		ui.timer(0.0, _load_settings, once=True)
	logger.debug(f"[add_timeshift_panel] - panel_mounted - index={index} url={client.url}")

from __future__ import annotations

from nicegui import ui

from layout.context import PageContext
from pages.settings.settings_layout import render_settings_header
from pages.settings import timeshift_settings
from services.i18n import t
from loguru import logger

DEFAULT_PANEL = "recording.timeshift"


def render(container: ui.element, ctx: PageContext) -> None:
	logger.debug(f"[render] - settings_page_render_start")
	container.style("overflow: hidden !important;")
	container.style("min-height: 0 !important;")

	with container:
		with ui.column().classes("w-full h-full min-h-0 min-w-0"):
			render_settings_header(
				ctx,
				title=t("settings.title", "Settings"),
				subtitle=t("settings.subtitle", "Manage recording server configuration."),
			)

			with ui.row().classes("w-full flex-1 min-h-0 min-w-0 overflow-hidden gap-4 no-wrap items-stretch"):
				# Left navigation scroll
				left_col = ui.column().classes("w-[260px] min-w-[220px] max-w-[320px] h-full min-h-0 overflow-y-auto shrink-0")

				nodes = [
					{
						"id": "recording",
						"label": f"⏺️ {t('settings.recording.title', 'Recording')}",
						"children": [
							{"id": "recording.timeshift", "label": f"⏱️ {t('timeshift.title', 'Timeshift')}"},
						],
					},
				]

				leaf_ids: set[str] = set()

				def _collect_leaf_ids(items: list[dict]) -> None:
					for n in items:
						children = n.get("children")
						if children:
							_collect_leaf_ids(children)
						else:
							leaf_ids.add(n.get("id"))

				_collect_leaf_ids(nodes)

				# Right side: the scroll container for settings panels
				right_col = ui.column().classes("flex-1 h-full min-h-0 min-w-0 overflow-y-auto overflow-x-hidden")

				def render_panel(panel_id: str) -> None:
					logger.info(f"[render_panel] - panel_selected - panel_id={panel_id}")
					right_col.clear()

					if panel_id == "recording.timeshift":
						timeshift_settings.add_timeshift_panel(right_col, 0, ctx)
					else:
						with right_col:
							ui.label(t("settings.select_hint", "Select a section from the tree.")).classes("text-sm text-gray-500")

				def on_select(e) -> None:
					node_id = getattr(e, "value", None)
					logger.debug(f"[on_select] - tree_node_selected - node_id={node_id}")
					if node_id in leaf_ids:
						render_panel(node_id)

				with left_col:
					ui.label(t("settings.sections", "Sections")).classes("text-sm text-gray-500 leading-none")
					nav_tree = ui.tree(nodes, label_key="label", on_select=on_select).classes("w-full mt-0 pt-0")
					nav_tree.props("dense")
					nav_tree.expand()

				render_panel(DEFAULT_PANEL)

from nicegui import ui

from layout.context import PageContext
from layout.main_area import build_main_area
from pages.settings import settings_page
from services.app_config import get_app_config
from services.logging_setup import setup_logging
from services.settings_client import SettingsClient
from loguru import logger


# ------------------------------------------------------------------
# GLOBAL BACKEND (PROCESS LIFETIME)
# ------------------------------------------------------------------

APP_CONFIG = get_app_config()

setup_logging(
	app_name="recording_console",
	log_dir=APP_CONFIG.logging.log_dir,
	log_level=APP_CONFIG.logging.console_level,
	file_level=APP_CONFIG.logging.file_level,
)
logger.info(f"Starting NiceGUI - backend={APP_CONFIG.backend.base_url}")


# ------------------------------------------------------------------
# UI
# ------------------------------------------------------------------

@ui.page("/")
def index():
	ui.colors(primary="#3b82f6")
	if APP_CONFIG.ui.dark_mode:
		ui.dark_mode().enable()

	ui.add_head_html("""
	<style>
		html, body { height: 100%; margin: 0; overflow: hidden; }
	</style>
	""")

	# --------- PER SESSION CONTEXT ---------
	ctx = PageContext()
	ctx.config = APP_CONFIG
	ctx.settings_client = SettingsClient(APP_CONFIG.backend)

	def _close_client() -> None:
		ctx.settings_client.session.close()

	ui.context.client.on_disconnect(_close_client)

	with ui.header().classes("items-center h-16"):
		ui.label(APP_CONFIG.ui.title).classes("text-lg font-semibold")

	with ui.column().classes("w-full p-4 gap-4").style("height: calc(100vh - 64px);"):
		build_main_area(ctx)
	settings_page.render(ctx.main_area, ctx)


ui.run(
	title=APP_CONFIG.ui.title,
	port=APP_CONFIG.ui.port,
	reload=False,
)

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from nicegui import ui

from services.app_config import AppConfig
from services.settings_client import SettingsClient


@dataclass
class PageContext:
	# -----------------------------
	# Layout UI references
	# -----------------------------

	# The container where the current page content is rendered
	main_area: Optional[ui.column] = None

	# -------- Configuration (process wide) --------
	# Loaded once at startup from config/app_config.json.
	config: Optional[AppConfig] = None

	# -------- UI → recording server communication --------
	# Client for the server's settings endpoints. Created per page session so
	# every browser tab holds its own HTTP session.
	settings_client: Optional[SettingsClient] = None

	def require_settings_client(self) -> SettingsClient:
		if self.settings_client is None:
			raise RuntimeError("PageContext has no settings client")
		return self.settings_client

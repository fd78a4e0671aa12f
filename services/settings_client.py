from __future__ import annotations

from typing import Any

import requests
from loguru import logger

from services.app_config import BackendConfig
from services.logging_setup import log_timing, summarize_for_log
from services.timeshift_config import TimeshiftConfig

TIMESHIFT_ENDPOINT = "timeshift"
OP_LOAD = "loadSettings"
OP_SAVE = "saveSettings"


# ------------------------------------------------------------------ Errors

class SettingsClientError(Exception):
	"""Base error of the settings endpoint client."""


class SettingsLoadError(SettingsClientError):
	pass


class SettingsSaveError(SettingsClientError):
	def __init__(self, errormsg: str) -> None:
		super().__init__(errormsg)
		self.errormsg = errormsg


# ------------------------------------------------------------------ Client

def _join_url(base_url: str, path: str) -> str:
	base = str(base_url or "").rstrip("/")
	suffix = str(path or "").lstrip("/")
	if not base:
		return suffix
	return f"{base}/{suffix}" if suffix else base


def _parse_json(resp: requests.Response) -> Any:
	try:
		return resp.json()
	except ValueError:
		return None


class SettingsClient:
	"""
	Client for the recording server's key/value settings endpoints.

	Both operations POST form parameters to the same path; the `op` parameter
	selects between reading and writing the configuration record.
	"""

	def __init__(
		self,
		backend: BackendConfig,
		endpoint: str = TIMESHIFT_ENDPOINT,
		session: requests.Session | None = None,
	) -> None:
		self.backend = backend
		self.endpoint = endpoint
		self.session = session or requests.Session()
		self.session.headers.update({str(k): str(v) for k, v in (backend.headers or {}).items()})

	@property
	def url(self) -> str:
		return _join_url(self.backend.base_url, self.endpoint)

	def _post(self, params: dict[str, str]) -> requests.Response:
		return self.session.post(
			self.url,
			data=params,
			timeout=float(self.backend.timeout_s),
			verify=bool(self.backend.verify_ssl),
		)

	def load_settings(self) -> TimeshiftConfig:
		with log_timing("load_settings", url=self.url):
			try:
				resp = self._post({"op": OP_LOAD})
			except requests.RequestException as ex:
				raise SettingsLoadError(f"Settings request failed: {ex}") from ex

		if not (200 <= int(resp.status_code) < 300):
			raise SettingsLoadError(f"HTTP {resp.status_code}")

		payload = _parse_json(resp)
		if not isinstance(payload, dict):
			raise SettingsLoadError("Settings response is not a JSON object")

		config = payload.get("config")
		if isinstance(config, list) and len(config) == 1:
			config = config[0]
		if not isinstance(config, dict):
			raise SettingsLoadError("Settings response has no 'config' object")

		logger.debug(f"[load_settings] - response_parsed - config={summarize_for_log(config)}")
		return TimeshiftConfig.from_dict(config)

	def save_settings(self, config: TimeshiftConfig) -> None:
		params = {"op": OP_SAVE, **config.to_form_params()}
		with log_timing("save_settings", url=self.url, params=params):
			try:
				resp = self._post(params)
			except requests.RequestException as ex:
				raise SettingsSaveError(f"Settings request failed: {ex}") from ex

		payload = _parse_json(resp)
		errormsg = ""
		success = True
		if isinstance(payload, dict):
			raw_errormsg = payload.get("errormsg")
			# blank text is no error; otherwise the server wording goes out unchanged
			if raw_errormsg and str(raw_errormsg).strip():
				errormsg = str(raw_errormsg)
			if "success" in payload:
				success = bool(payload.get("success"))

		if errormsg:
			raise SettingsSaveError(errormsg)
		if not (200 <= int(resp.status_code) < 300):
			raise SettingsSaveError(f"HTTP {resp.status_code}")
		if not success:
			raise SettingsSaveError("Save was rejected by the server")

	def fetch_help(self, page: str) -> str:
		"""Return the HTML of a documentation page served next to the settings endpoint."""
		url = _join_url(self.backend.base_url, _join_url(self.backend.docs_path, page))
		try:
			resp = self.session.get(url, timeout=float(self.backend.timeout_s), verify=bool(self.backend.verify_ssl))
		except requests.RequestException as ex:
			raise SettingsClientError(f"Help request failed: {ex}") from ex
		if not (200 <= int(resp.status_code) < 300):
			raise SettingsClientError(f"HTTP {resp.status_code}")
		return resp.text

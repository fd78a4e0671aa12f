from __future__ import annotations

import asyncio
import unittest

from services.settings_client import SettingsLoadError, SettingsSaveError
from services.timeshift_config import TimeshiftConfig
from services.timeshift_form import LoadState, SAVE_CONTROL, TimeshiftForm, render_enabled_state


async def _direct(fn, *args, **kwargs):
    return fn(*args, **kwargs)


def _record(**overrides) -> TimeshiftConfig:
    values = dict(
        timeshift_enabled=True,
        timeshift_ondemand=False,
        timeshift_path="/var/lib/timeshift",
        timeshift_unlimited_period=False,
        timeshift_max_period=60,
        timeshift_unlimited_size=False,
        timeshift_max_size=10000,
    )
    values.update(overrides)
    return TimeshiftConfig(**values)


class _FakeClient:
    def __init__(self, record: TimeshiftConfig | None = None, load_error: str = "", save_error: str = "") -> None:
        self.record = record
        self.load_error = load_error
        self.save_error = save_error
        self.saved: list[dict[str, str]] = []
        self.on_load = None

    def load_settings(self) -> TimeshiftConfig:
        if self.on_load:
            self.on_load()
        if self.load_error:
            raise SettingsLoadError(self.load_error)
        return self.record

    def save_settings(self, config: TimeshiftConfig) -> None:
        self.saved.append(config.to_form_params())
        if self.save_error:
            raise SettingsSaveError(self.save_error)


class TimeshiftFormTests(unittest.TestCase):
    def _loaded_form(self, record: TimeshiftConfig) -> TimeshiftForm:
        form = TimeshiftForm()
        self.assertTrue(asyncio.run(form.load(_FakeClient(record), runner=_direct)))
        return form

    def test_initial_render_disables_everything(self) -> None:
        form = TimeshiftForm()
        self.assertEqual(form.load_state, LoadState.IDLE)
        self.assertFalse(any(form.enabled.values()))
        self.assertIn(SAVE_CONTROL, form.enabled)

    def test_fields_disabled_while_load_in_flight(self) -> None:
        form = TimeshiftForm()
        client = _FakeClient(_record())
        seen: dict[str, bool] = {}
        client.on_load = lambda: seen.update(form.enabled)

        asyncio.run(form.load(client, runner=_direct))

        self.assertTrue(seen)
        self.assertFalse(any(seen.values()))
        self.assertEqual(form.load_state, LoadState.LOADED)
        self.assertTrue(all(form.enabled.values()))

    def test_load_syncs_period_and_size_independently(self) -> None:
        form = self._loaded_form(_record(timeshift_unlimited_period=True, timeshift_unlimited_size=False))
        self.assertFalse(form.enabled["timeshift_max_period"])
        self.assertTrue(form.enabled["timeshift_max_size"])

        form = self._loaded_form(_record(timeshift_unlimited_period=False, timeshift_unlimited_size=True))
        self.assertTrue(form.enabled["timeshift_max_period"])
        self.assertFalse(form.enabled["timeshift_max_size"])

    def test_toggle_unlimited_updates_enabled_state_immediately(self) -> None:
        form = self._loaded_form(_record())
        rendered: list[dict[str, bool]] = []
        form.on_render(rendered.append)

        form.set_value("timeshift_unlimited_period", True)
        self.assertFalse(form.enabled["timeshift_max_period"])
        self.assertTrue(form.enabled["timeshift_max_size"])
        self.assertEqual(len(rendered), 1)

        form.set_value("timeshift_unlimited_period", False)
        self.assertTrue(form.enabled["timeshift_max_period"])

        form.set_value("timeshift_unlimited_size", True)
        self.assertFalse(form.enabled["timeshift_max_size"])
        self.assertTrue(form.enabled["timeshift_max_period"])

    def test_other_fields_do_not_rerender(self) -> None:
        form = self._loaded_form(_record())
        rendered: list[dict[str, bool]] = []
        form.on_render(rendered.append)
        form.set_value("timeshift_path", "/tmp/ts")
        form.set_value("timeshift_max_period", 90)
        self.assertEqual(rendered, [])

    def test_unchanged_save_resubmits_loaded_values(self) -> None:
        record = _record(timeshift_unlimited_size=True, timeshift_max_size=None)
        form = self._loaded_form(record)
        client = _FakeClient(record)

        result = asyncio.run(form.save(client, runner=_direct))

        self.assertTrue(result.ok)
        self.assertEqual(client.saved, [record.to_form_params()])

    def test_save_failure_returns_server_message_and_keeps_values(self) -> None:
        form = self._loaded_form(_record())
        form.set_value("timeshift_max_period", 120)
        before = form.snapshot()

        result = asyncio.run(form.save(_FakeClient(save_error="disk full"), runner=_direct))

        self.assertFalse(result.ok)
        self.assertFalse(result.skipped)
        self.assertEqual(result.error, "disk full")
        self.assertEqual(form.snapshot(), before)
        self.assertFalse(form.saving)
        self.assertTrue(form.can_save)

    def test_load_failure_leaves_form_disabled(self) -> None:
        form = TimeshiftForm()
        ok = asyncio.run(form.load(_FakeClient(load_error="HTTP 500"), runner=_direct))

        self.assertFalse(ok)
        self.assertEqual(form.load_state, LoadState.FAILED)
        self.assertEqual(form.load_error, "HTTP 500")
        self.assertFalse(any(form.enabled.values()))

        # flag changes after a failed load never enable anything
        form.set_value("timeshift_unlimited_period", True)
        form.set_value("timeshift_unlimited_period", False)
        self.assertFalse(any(form.enabled.values()))

    def test_save_refused_before_load(self) -> None:
        form = TimeshiftForm()
        client = _FakeClient()
        result = asyncio.run(form.save(client, runner=_direct))
        self.assertTrue(result.skipped)
        self.assertEqual(client.saved, [])

    def test_invalid_fields_lists_blank_editable_numbers(self) -> None:
        form = self._loaded_form(_record())
        self.assertEqual(form.invalid_fields(), [])

        form.set_value("timeshift_max_period", None)
        form.set_value("timeshift_max_size", None)
        self.assertEqual(form.invalid_fields(), ["timeshift_max_period", "timeshift_max_size"])

        form.set_value("timeshift_unlimited_size", True)
        self.assertEqual(form.invalid_fields(), ["timeshift_max_period"])

    def test_save_refused_when_required_number_blank(self) -> None:
        form = self._loaded_form(_record())
        form.set_value("timeshift_max_period", None)
        client = _FakeClient()

        result = asyncio.run(form.save(client, runner=_direct))

        self.assertFalse(result.ok)
        self.assertFalse(result.skipped)
        self.assertEqual(result.invalid, ["timeshift_max_period"])
        self.assertEqual(client.saved, [])
        self.assertTrue(form.can_save)

    def test_unlimited_checked_allows_blank_number(self) -> None:
        form = self._loaded_form(_record())
        form.set_value("timeshift_unlimited_period", True)
        form.set_value("timeshift_max_period", None)
        client = _FakeClient()

        result = asyncio.run(form.save(client, runner=_direct))

        self.assertTrue(result.ok)
        self.assertEqual(client.saved[0]["timeshift_max_period"], "")
        self.assertEqual(client.saved[0]["timeshift_unlimited_period"], "1")

    def test_overlapping_save_is_ignored(self) -> None:
        form = self._loaded_form(_record())
        client = _FakeClient()
        started = asyncio.Event()
        release = asyncio.Event()

        async def _slow(fn, *args, **kwargs):
            started.set()
            await release.wait()
            return fn(*args, **kwargs)

        async def scenario():
            first = asyncio.create_task(form.save(client, runner=_slow))
            await started.wait()
            second = await form.save(client, runner=_slow)
            release.set()
            return await first, second

        first, second = asyncio.run(scenario())

        self.assertTrue(first.ok)
        self.assertTrue(second.skipped)
        self.assertEqual(len(client.saved), 1)


class RenderEnabledStateTests(unittest.TestCase):
    def test_gated_fields_follow_flags_only_when_form_enabled(self) -> None:
        config = TimeshiftConfig(timeshift_unlimited_period=True)
        state = render_enabled_state(config, form_enabled=True)
        self.assertFalse(state["timeshift_max_period"])
        self.assertTrue(state["timeshift_max_size"])
        self.assertTrue(state["timeshift_path"])

        state = render_enabled_state(TimeshiftConfig(), form_enabled=False)
        self.assertFalse(any(state.values()))


if __name__ == "__main__":
    unittest.main()

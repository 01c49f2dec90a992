import unittest

from openrouter_search.orchestrator.router import ModeSignals, select_mode
from openrouter_search.utils.config import Settings


class TestSelectMode(unittest.TestCase):
    def test_explicit_mode_is_honored(self):
        self.assertEqual(select_mode(ModeSignals(configured_mode="mcp", port_assigned=True)), "mcp")
        self.assertEqual(select_mode(ModeSignals(configured_mode="web")), "web")

    def test_auto_without_deployment_signals_runs_mcp(self):
        self.assertEqual(select_mode(ModeSignals()), "mcp")

    def test_auto_with_port_runs_web(self):
        self.assertEqual(select_mode(ModeSignals(port_assigned=True)), "web")

    def test_auto_with_platform_marker_runs_web(self):
        self.assertEqual(select_mode(ModeSignals(platform_markers=("RENDER",))), "web")


class TestModeSignals(unittest.TestCase):
    def setUp(self):
        self.settings = Settings(openrouter_api_key="sk-test")

    def test_empty_environment(self):
        signals = ModeSignals.from_environ({}, self.settings)
        self.assertFalse(signals.is_deployment)
        self.assertEqual(signals.configured_mode, "auto")

    def test_port_and_markers_are_detected(self):
        signals = ModeSignals.from_environ(
            {"PORT": "10000", "HEROKU_APP_NAME": "app", "NODE_ENV": "Production"},
            self.settings,
        )
        self.assertTrue(signals.port_assigned)
        self.assertEqual(signals.platform_markers, ("HEROKU_APP_NAME", "NODE_ENV"))

    def test_non_production_env_is_not_a_marker(self):
        signals = ModeSignals.from_environ({"NODE_ENV": "development"}, self.settings)
        self.assertFalse(signals.is_deployment)

    def test_port_override_counts_as_assigned(self):
        signals = ModeSignals.from_environ({}, self.settings, port_override=True)
        self.assertEqual(select_mode(signals), "web")


if __name__ == "__main__":
    unittest.main()

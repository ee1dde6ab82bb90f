import unittest

from blobphish.config import Configuration
from blobphish.model import LAUNCH, QUIT
from blobphish.session import MainModel
from blobphish.styles import load_styles

STYLES = load_styles()


class TestMainModel(unittest.TestCase):
    def test_requires_configuration(self):
        with self.assertRaises(ValueError):
            MainModel(None, STYLES)

    def test_help_toggles_and_keeps_running(self):
        model = MainModel(Configuration(), STYLES)
        expanded, effect = model.transition("?")
        self.assertTrue(expanded.help_expanded)
        self.assertIsNone(effect)
        collapsed, effect = expanded.transition("?")
        self.assertFalse(collapsed.help_expanded)
        self.assertIsNone(effect)
        self.assertFalse(collapsed.quitting)

    def test_quit_keys(self):
        for key in ("q", "esc", "ctrl+c"):
            model, effect = MainModel(Configuration(), STYLES).transition(key)
            self.assertTrue(model.quitting)
            self.assertIs(effect, QUIT)

    def test_quitting_is_terminal(self):
        model, _ = MainModel(Configuration(), STYLES).transition("q")
        for key in ("?", "q", "enter"):
            after, effect = model.transition(key)
            self.assertIs(after, model)
            self.assertIsNone(effect)

    def test_launch_requires_targets(self):
        idle, effect = MainModel(Configuration(command="scan"), STYLES).transition("enter")
        self.assertIsNone(effect)
        self.assertFalse(idle.can_launch)

        ready = MainModel(Configuration(command="scan", emails="a@x.com"), STYLES)
        model, effect = ready.transition("enter")
        self.assertIs(effect, LAUNCH)
        self.assertIs(model, ready)

    def test_render_shows_banner_and_command(self):
        plain = MainModel(Configuration(command="scan", ips="10.0.0.1"), STYLES).render().plain
        self.assertIn("#########", plain)
        self.assertIn("Command: scan", plain)
        self.assertIn("IPs: 10.0.0.1", plain)
        self.assertIn("enter: run workflow", plain)

    def test_render_without_command(self):
        plain = MainModel(Configuration(), STYLES).render().plain
        self.assertNotIn("Command:", plain)
        self.assertNotIn("enter: run workflow", plain)

    def test_render_help_panel_when_expanded(self):
        model = MainModel(Configuration(), STYLES)
        self.assertNotIn("q  quit", model.render().plain)
        expanded, _ = model.transition("?")
        plain = expanded.render().plain
        self.assertIn("?  help", plain)
        self.assertIn("q  quit", plain)

    def test_goodbye_replaces_everything(self):
        model, _ = MainModel(Configuration(command="scan"), STYLES, help_expanded=True).transition("q")
        self.assertEqual(model.render().plain.strip(), "Goodbye!")


if __name__ == "__main__":
    unittest.main()

import io
import signal
import time
import unittest
from contextlib import redirect_stderr

from rich.console import Console

from blobphish.cli import EXIT_FAILURE, EXIT_OK, main
from blobphish.keys import TerminalError
from blobphish.logging_bootstrap import setup_logging

NO_ENV = "-env=/nonexistent/blobphish/.env"


class ScriptedKeys:
    def __init__(self, script=()):
        self.pending = list(script)
        self.restored = 0

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.restored += 1

    def read_key(self, timeout):
        if self.pending:
            return self.pending.pop(0)
        time.sleep(timeout)
        raise AssertionError("key script exhausted")


class UnavailableTerminal:
    def __enter__(self):
        raise TerminalError("standard input is not a terminal")

    def __exit__(self, exc_type, exc, tb):
        return None


class RecordingExecutor:
    def __init__(self):
        self.calls = []

    def __call__(self, step, config):
        self.calls.append((step.key, config.command))


def _console():
    stream = io.StringIO()
    return Console(file=stream, width=120, force_terminal=False), stream


class TestMain(unittest.TestCase):
    def test_quit_from_main_view_exits_cleanly(self):
        console, stream = _console()
        keys = ScriptedKeys(["?", "q"])
        status = main(["scan", NO_ENV], console=console, keys=keys)
        self.assertEqual(status, EXIT_OK)
        self.assertIn("Goodbye!", stream.getvalue())
        self.assertEqual(keys.restored, 1)

    def test_workflow_runs_and_returns_to_main_view(self):
        console, stream = _console()
        executor = RecordingExecutor()
        keys = ScriptedKeys(["enter", "enter", "down", "enter", "q"])
        status = main(
            ["scan", NO_ENV, "-emails=a@x.com", "-ips=10.0.0.1"],
            console=console,
            keys=keys,
            execute=executor,
        )
        self.assertEqual(status, EXIT_OK)
        self.assertEqual(executor.calls, [("emails", "scan")])
        output = stream.getvalue()
        self.assertIn("Step 1 of 2", output)
        self.assertIn("Workflow finished", output)
        self.assertIn("skipped: ips", output)
        self.assertIn("Goodbye!", output)
        self.assertEqual(keys.restored, 4)

    def test_exit_option_shows_summary(self):
        console, stream = _console()
        executor = RecordingExecutor()
        keys = ScriptedKeys(["enter", "up", "enter", "q"])
        status = main(["scan", NO_ENV, "-urls=https://example.com"], console=console, keys=keys, execute=executor)
        self.assertEqual(status, EXIT_OK)
        self.assertEqual(executor.calls, [])
        self.assertIn("Workflow exited", stream.getvalue())
        self.assertIn("not run: urls", stream.getvalue())

    def test_quit_key_in_prompt_ends_session(self):
        console, stream = _console()
        keys = ScriptedKeys(["enter", "esc", "q"])
        status = main(["scan", NO_ENV, "-emails=a@x.com"], console=console, keys=keys)
        self.assertEqual(status, EXIT_OK)
        self.assertIn("Process terminated by user", stream.getvalue())
        self.assertNotIn("Workflow", stream.getvalue())
        self.assertEqual(keys.pending, ["q"])

    def test_terminal_failure_is_reported(self):
        console, stream = _console()
        status = main(["scan", NO_ENV], console=console, keys=UnavailableTerminal())
        self.assertEqual(status, EXIT_FAILURE)
        self.assertIn("standard input is not a terminal", stream.getvalue())

    def test_flag_error_exits_with_status_one(self):
        console, stream = _console()
        with self.assertRaises(SystemExit) as ctx:
            main(["scan", "-max-depth=deep"], console=console, keys=ScriptedKeys())
        self.assertEqual(ctx.exception.code, 1)

    def test_verbose_logs_the_env_file_lookup(self):
        console, _ = _console()
        errors = io.StringIO()
        try:
            with redirect_stderr(errors):
                main(["scan", NO_ENV, "-verbose=true"], console=console, keys=ScriptedKeys(["q"]))
        finally:
            setup_logging()
        self.assertIn("env file not found: /nonexistent/blobphish/.env", errors.getvalue())

    def test_signal_handlers_are_restored(self):
        before = signal.getsignal(signal.SIGTERM)
        console, _ = _console()
        main(["scan", NO_ENV], console=console, keys=ScriptedKeys(["q"]))
        self.assertEqual(signal.getsignal(signal.SIGTERM), before)


if __name__ == "__main__":
    unittest.main()

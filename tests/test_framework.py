import io
import json
import os
import signal
import tempfile
import unittest
from unittest import mock

from cbshell.common_lib import CancellationToken
from cbshell.framework import HelperLib, main
from tests.test_cluster_config import CONFIG


class CommandLineTest(unittest.TestCase):
    def test_command_keeps_its_options(self):
        options = HelperLib.parse_cmd_line_options(
            ["-i", "clusters.ini", "buckets", "update", "default",
             "--ram", "256", "--clusters", "a,b"])
        self.assertEqual(options.ini, "clusters.ini")
        self.assertEqual(options.log_level, "info")
        self.assertEqual(options.command,
                         ["buckets", "update", "default", "--ram", "256",
                          "--clusters", "a,b"])

    def test_create_log_config(self):
        with tempfile.TemporaryDirectory() as tmp_dir:
            conf = os.path.join(tmp_dir, "cbsh.logging.conf")
            log_file = os.path.join(tmp_dir, "cbsh.log")
            HelperLib.create_log_config(conf, log_file, "debug")
            with open(conf) as conf_file:
                content = conf_file.read()
        self.assertIn("args=('%s', 'a')" % log_file, content)
        self.assertIn("level=DEBUG", content)
        self.assertNotIn("@@", content)


class SignalHandlerTest(unittest.TestCase):
    def setUp(self):
        self.previous = signal.getsignal(signal.SIGINT)

    def tearDown(self):
        signal.signal(signal.SIGINT, self.previous)

    def test_first_ctrl_c_cancels_second_interrupts(self):
        ctrl_c = CancellationToken()
        HelperLib.register_signal_handlers(ctrl_c)
        handler = signal.getsignal(signal.SIGINT)
        handler(signal.SIGINT, None)
        self.assertTrue(ctrl_c.cancelled)
        self.assertIs(signal.getsignal(signal.SIGINT),
                      signal.default_int_handler)
        self.assertRaises(KeyboardInterrupt, signal.getsignal(signal.SIGINT),
                          signal.SIGINT, None)


@mock.patch.object(HelperLib, "register_signal_handlers")
@mock.patch.object(HelperLib, "configure_logging")
class MainTest(unittest.TestCase):
    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.ini = os.path.join(self.tmp_dir.name, "clusters.ini")
        with open(self.ini, "w") as ini_file:
            ini_file.write(CONFIG)

    def tearDown(self):
        self.tmp_dir.cleanup()

    def test_prints_rows_as_json(self, configure_logging, register_signals):
        with mock.patch("sys.stdout", new_callable=io.StringIO) as stdout:
            self.assertEqual(main(["-i", self.ini, "clusters"]), 0)
        rows = [json.loads(line) for line in stdout.getvalue().splitlines()]
        self.assertEqual([r["identifier"] for r in rows], ["cloud", "local"])
        self.assertTrue(rows[0]["active"])
        configure_logging.assert_called_once_with("info", mock.ANY)
        self.assertEqual(register_signals.call_count, 1)

    def test_error_exits_with_message(self, configure_logging,
                                      register_signals):
        with mock.patch("sys.stderr", new_callable=io.StringIO) as stderr:
            with self.assertRaises(SystemExit) as ctx:
                main(["-i", self.ini, "clusters", "use", "missing"])
        self.assertEqual(ctx.exception.code, 1)
        self.assertIn("Cluster 'missing' not found", stderr.getvalue())


if __name__ == "__main__":
    unittest.main()

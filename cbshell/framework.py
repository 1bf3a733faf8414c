import json
import logging
import logging.config
import os
import sys
import tempfile
from argparse import ArgumentParser
from signal import SIGINT, default_int_handler, signal

from cbshell.cluster_config import ClusterConfigParser
from cbshell.cluster_utils.cluster_registry import ClusterRegistry
from cbshell.commands import default_commands
from cbshell.common_lib import CancellationToken
from cbshell.exceptions import ShellError
from cbshell.global_vars import logger

LOG_CONFIG_TEMPLATE = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                                   "conf", "cbsh.logging.conf")


class HelperLib(object):
    @staticmethod
    def print_and_exit(msg=None, exit_code=0):
        if msg is not None:
            print("Error: %s" % msg, file=sys.stderr)
        sys.exit(exit_code)

    @staticmethod
    def register_signal_handlers(ctrl_c):
        # First ctrl-c cancels the in-flight request, a second one raises
        # KeyboardInterrupt
        def handle_kill_signal(signum, frame):
            logger.get("shell").warning("Interrupted by signal %s" % signum)
            ctrl_c.cancel()
            signal(SIGINT, default_int_handler)
        signal(SIGINT, handle_kill_signal)

    @staticmethod
    def parse_cmd_line_options(argv=None):
        parser = ArgumentParser(
            prog="cbsh", allow_abbrev=False,
            description="Couchbase cluster administration shell")
        parser.add_argument("-i", "--ini", dest="ini",
                            help="Path to .ini file containing the cluster "
                                 "definitions, e.g -i clusters.ini")
        parser.add_argument("-l", "--log-level", dest="log_level",
                            default="info",
                            help="Log level: debug, info, warning, error")
        parser.add_argument("--log-file", dest="log_file",
                            default=os.path.join(tempfile.gettempdir(),
                                                 "cbsh.log"),
                            help="File to write the logs to")
        parser.add_argument("command", nargs="+",
                            help="Command followed by its arguments, "
                                 "e.g buckets update default --ram 256")
        options, unknown = parser.parse_known_args(argv)
        # Options of the shell command itself (--clusters etc)
        options.command.extend(unknown)
        return options

    @staticmethod
    def create_log_config(log_config_file_name, log_file_name, log_level):
        with open(LOG_CONFIG_TEMPLATE) as tmpl_log_file:
            template = tmpl_log_file.read()
        template = template.replace("@@FILENAME@@",
                                    log_file_name.replace('\\', '/'))
        template = template.replace("@@LEVEL@@", log_level.upper())
        with open(log_config_file_name, "w") as log_file:
            log_file.write(template)

    @staticmethod
    def configure_logging(log_level="info", log_file=None):
        log_file = log_file or os.path.join(tempfile.gettempdir(), "cbsh.log")
        log_dir = os.path.dirname(os.path.abspath(log_file))
        log_config_filename = os.path.join(log_dir, "cbsh.logging.conf")
        HelperLib.create_log_config(log_config_filename, log_file, log_level)
        logging.config.fileConfig(log_config_filename,
                                  disable_existing_loggers=False)


def main(argv=None):
    options = HelperLib.parse_cmd_line_options(argv)
    HelperLib.configure_logging(options.log_level, options.log_file)
    log = logger.get("shell")

    ctrl_c = CancellationToken()
    HelperLib.register_signal_handlers(ctrl_c)
    try:
        if options.ini:
            registry = ClusterConfigParser.parse_from_file(options.ini)
        else:
            registry = ClusterRegistry()
        rows = default_commands(registry).run(options.command, ctrl_c=ctrl_c)
    except ShellError as e:
        log.error(str(e))
        HelperLib.print_and_exit(str(e), exit_code=1)
    except KeyboardInterrupt:
        log.error("Interrupted")
        HelperLib.print_and_exit("Interrupted", exit_code=130)
    for row in rows:
        print(json.dumps(row, sort_keys=True, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())

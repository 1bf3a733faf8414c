from argparse import ArgumentParser

from cbshell.common_lib import CancellationToken
from cbshell.exceptions import GenericError
from cbshell.global_vars import logger


class CommandArgumentParser(ArgumentParser):
    """ArgumentParser reporting bad input as an error instead of exiting"""
    def error(self, message):
        raise GenericError("%s: %s" % (self.prog, message))

    def exit(self, status=0, message=None):
        if status:
            raise GenericError(message or "%s failed" % self.prog)
        raise GenericError(message or self.format_usage())


class Command(object):
    """
    Base of every shell command.
    Sub classes set name/usage, describe their arguments in signature()
    and implement execute(), which returns a list of row dicts.
    """
    name = None
    usage = None

    def __init__(self, registry):
        self.registry = registry
        self.log = logger.get("shell")

    def signature(self):
        return CommandArgumentParser(prog=self.name, description=self.usage,
                                     add_help=False)

    def parse(self, argv):
        return self.signature().parse_args(argv)

    def execute(self, args, ctrl_c):
        raise NotImplementedError()

    def run(self, argv, ctrl_c=None):
        args = self.parse(argv)
        self.log.debug("Running %s with %s" % (self.name, vars(args)))
        return self.execute(args, ctrl_c or CancellationToken())


class CommandSet(object):
    def __init__(self):
        self.__commands = dict()

    def add(self, command):
        self.__commands[command.name] = command

    def names(self):
        return sorted(self.__commands.keys())

    def get(self, name):
        try:
            return self.__commands[name]
        except KeyError:
            raise GenericError("Unknown command '%s'" % name)

    def lookup(self, words):
        """
        Match the longest command name prefix of words
        :return: command, remaining words
        """
        for length in range(len(words), 0, -1):
            name = " ".join(words[:length])
            if name in self.__commands:
                return self.__commands[name], list(words[length:])
        raise GenericError("Unknown command '%s'" % " ".join(words))

    def run(self, words, ctrl_c=None):
        command, argv = self.lookup(words)
        return command.run(argv, ctrl_c=ctrl_c)


def default_commands(registry):
    from cbshell.commands.analytics import AnalyticsDatasets, \
        AnalyticsDataverses
    from cbshell.commands.buckets import BucketsGet, BucketsUpdate
    from cbshell.commands.clusters import ClustersList, ClustersRegister, \
        ClustersUnregister, ClustersUse
    from cbshell.commands.query import QueryIndexes
    from cbshell.commands.vector import VectorSearch

    command_set = CommandSet()
    for command in [ClustersRegister, ClustersUnregister, ClustersList,
                    ClustersUse, BucketsGet, BucketsUpdate, QueryIndexes,
                    AnalyticsDataverses, AnalyticsDatasets, VectorSearch]:
        command_set.add(command(registry))
    return command_set

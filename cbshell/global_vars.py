import logging


class Logger(object):
    """
    Hands out the named loggers used across the shell.
    Handlers and levels come from the logging config applied by
    framework.HelperLib.configure_logging()
    """
    def __init__(self):
        self.__loggers = dict()

    def get(self, name):
        if name not in self.__loggers:
            self.__loggers[name] = logging.getLogger(name)
        return self.__loggers[name]


logger = Logger()

import re

from cbshell.exceptions import ClusterNotFound, NoActiveCluster

# Identifiers in a --clusters value are separated by commas
# (optionally with whitespace)
IDENTIFIER_DELIMITER = re.compile(r"\s*,\s*")


def split_identifiers(value):
    if value is None:
        return list()
    if isinstance(value, str):
        value = IDENTIFIER_DELIMITER.split(value.strip())
    identifiers = list()
    for identifier in value:
        identifier = identifier.strip()
        # Keep the first occurrence, drop repeats and empty entries
        if identifier and identifier not in identifiers:
            identifiers.append(identifier)
    return identifiers


def cluster_identifiers_from(registry, clusters=None, default_active=True):
    """
    Resolve the target clusters of a command.

    :param registry: ClusterRegistry to resolve against
    :param clusters: None, a comma separated string or a list of identifiers
    :param default_active: Fall back to the active cluster if no target given
    :return: Ordered, non-empty list of registered identifiers.
             The registry may change afterwards, so callers still have to
             handle ClusterNotFound when fetching each cluster.
    """
    identifiers = split_identifiers(clusters)
    if not identifiers:
        active = registry.active() if default_active else None
        if active is None:
            raise NoActiveCluster()
        identifiers = [active]

    for identifier in identifiers:
        if not registry.contains(identifier):
            raise ClusterNotFound(identifier)
    return identifiers

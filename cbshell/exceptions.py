# -*- coding: utf-8 -*-
"""
Errors raised by the registry, the request dispatchers and the bucket
settings reconciler. Every error carries the structured details needed to
render a precise message, plus the cluster / operation it happened in.
"""


class ShellError(Exception):
    # Base class for all shell errors

    def __init__(self, msg):
        super(ShellError, self).__init__(msg)
        self.msg = msg
        self.cluster = None
        self.operation = None

    def in_context(self, cluster=None, operation=None):
        """
        Attach the cluster identifier and the operation that was in progress.
        Context that is already set is not overwritten.
        :return: self, to allow `raise err.in_context(...)`
        """
        if self.cluster is None:
            self.cluster = cluster
        if self.operation is None:
            self.operation = operation
        return self

    def __str__(self):
        prefix = list()
        if self.operation:
            prefix.append(self.operation)
        if self.cluster:
            prefix.append("cluster '%s'" % self.cluster)
        if prefix:
            return "%s: %s" % (" on ".join(prefix), self.msg)
        return self.msg


class GenericError(ShellError):
    pass


class ClusterNotFound(ShellError):
    def __init__(self, identifier, msg=None):
        self.identifier = identifier
        super(ClusterNotFound, self).__init__(
            msg or "Cluster '%s' not found" % identifier)


class NoActiveCluster(ShellError):
    # Raised when neither a target list nor an active cluster is available
    def __init__(self):
        super(NoActiveCluster, self).__init__(
            "No target clusters given and no active cluster is set")


class BucketNotFound(ShellError):
    def __init__(self, name):
        self.name = name
        super(BucketNotFound, self).__init__("Bucket '%s' not found" % name)


class CapabilityConflict(ShellError):
    def __init__(self, reason):
        self.reason = reason
        super(CapabilityConflict, self).__init__(reason)


class ParseError(ShellError):
    def __init__(self, field, value, allowed=None):
        self.field = field
        self.value = value
        self.allowed = tuple(allowed) if allowed else tuple()
        msg = "Failed to parse %s '%s'" % (field, value)
        if self.allowed:
            msg += ". Allowed values for %s are %s" \
                   % (field, ", ".join(self.allowed))
        super(ParseError, self).__init__(msg)


class DeserializeError(ShellError):
    def __init__(self, detail):
        self.detail = detail
        super(DeserializeError, self).__init__(
            "Failed to decode response: %s" % detail)


class SerializeError(ShellError):
    def __init__(self, detail):
        self.detail = detail
        super(SerializeError, self).__init__(
            "Failed to encode request: %s" % detail)


class UnexpectedStatusCode(ShellError):
    def __init__(self, code, body):
        self.code = code
        self.body = body
        super(UnexpectedStatusCode, self).__init__(
            "Unexpected status code %s, body: %s" % (code, body))


class TransportError(ShellError):
    def __init__(self, detail):
        self.detail = detail
        super(TransportError, self).__init__(
            "Request failed: %s" % detail)


class Cancelled(TransportError):
    def __init__(self):
        super(Cancelled, self).__init__("request was cancelled")

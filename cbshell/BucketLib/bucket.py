import json
from urllib.parse import parse_qsl, urlencode

from cbshell.constants.cb_constants import CbServer
from cbshell.exceptions import DeserializeError, ParseError, SerializeError


class BucketType(object):
    COUCHBASE = "couchbase"
    EPHEMERAL = "ephemeral"
    MEMCACHED = "memcached"

    values = [COUCHBASE, EPHEMERAL, MEMCACHED]

    # The management API still reports couchbase buckets as 'membase'
    ONPREM_ALIASES = {"membase": COUCHBASE}
    ONPREM_NAMES = {COUCHBASE: "membase"}

    @staticmethod
    def from_wire(value, onprem=False):
        if onprem:
            value = BucketType.ONPREM_ALIASES.get(value, value)
        if value not in BucketType.values:
            raise DeserializeError("Unknown bucket type '%s'" % value)
        return value


class DurabilityLevel(object):
    NONE = "none"
    MAJORITY = "majority"
    MAJORITY_AND_PERSIST_TO_ACTIVE = "majorityAndPersistActive"
    PERSIST_TO_MAJORITY = "persistToMajority"

    values = [NONE, MAJORITY, MAJORITY_AND_PERSIST_TO_ACTIVE,
              PERSIST_TO_MAJORITY]

    # Older shells advertised 'one' for the no-durability level
    aliases = {"one": NONE}

    @staticmethod
    def parse(value):
        """
        Parse the user supplied (case-sensitive) durability level
        :raises ParseError: naming the allowed values
        """
        if value in DurabilityLevel.values:
            return value
        if value in DurabilityLevel.aliases:
            return DurabilityLevel.aliases[value]
        raise ParseError("durability level", value,
                         allowed=DurabilityLevel.values)

    @staticmethod
    def from_wire(value):
        if value is None:
            return DurabilityLevel.NONE
        if value not in DurabilityLevel.values:
            raise DeserializeError("Unknown durability level '%s'" % value)
        return value


def wire_uint(field, value):
    """
    Convert a (signed) wire integer into a non-negative int
    :raises DeserializeError: for non integers and negative values
    """
    if isinstance(value, bool):
        raise DeserializeError("%s must be an integer, got %s"
                               % (field, value))
    try:
        int_value = int(value)
    except (TypeError, ValueError):
        raise DeserializeError("%s must be an integer, got %s"
                               % (field, value))
    if isinstance(value, float) and value != int_value:
        raise DeserializeError("%s must be an integer, got %s"
                               % (field, value))
    if int_value < 0:
        raise DeserializeError("%s must not be negative, got %s"
                               % (field, value))
    return int_value


def wire_bool(field, value):
    if isinstance(value, bool):
        return value
    if value in [0, 1, "0", "1"]:
        return int(value) == 1
    if isinstance(value, str) and value.lower() in ["true", "false"]:
        return value.lower() == "true"
    raise DeserializeError("%s must be a boolean, got %s" % (field, value))


class BucketSettings(object):
    """
    Canonical bucket configuration.
    Built fresh from a fetch response, edited in place and then re-encoded
    for the backend it came from. max_expiry is in seconds.
    """
    class Onprem(object):
        # Management API JSON keys
        name = "name"
        bucketType = "bucketType"
        replicaNumber = "replicaNumber"
        quota = "quota"
        controllers = "controllers"
        durabilityMinLevel = "durabilityMinLevel"
        maxTTL = "maxTTL"
        nodes = "nodes"
        # Update form keys
        ramQuotaMB = "ramQuotaMB"
        flushEnabled = "flushEnabled"

    # Fields which the onprem update form does not carry
    FORM_EXCLUDED_FIELDS = ["name", "bucket_type", "status"]

    class Cloud(object):
        # Capella JSON keys
        name = "name"
        type = "type"
        memory = "memoryAllocationInMb"
        replicas = "replicas"
        flush = "flush"
        durability = "durabilityLevel"
        ttl = "timeToLiveInSeconds"
        status = "status"

    def __init__(self, name, bucket_type=BucketType.COUCHBASE,
                 num_replicas=1, ram_quota_mb=100, flush_enabled=False,
                 minimum_durability_level=DurabilityLevel.NONE,
                 max_expiry=0, status=None):
        if not name:
            raise DeserializeError("Bucket name cannot be empty")
        self.__name = name
        self.bucket_type = bucket_type
        self.num_replicas = num_replicas
        self.ram_quota_mb = ram_quota_mb
        self.flush_enabled = flush_enabled
        self.minimum_durability_level = minimum_durability_level
        self.max_expiry = max_expiry
        self.status = status

    @property
    def name(self):
        # Reconciliation key, fixed once fetched
        return self.__name

    def fields(self):
        return {"name": self.name,
                "bucket_type": self.bucket_type,
                "num_replicas": self.num_replicas,
                "ram_quota_mb": self.ram_quota_mb,
                "flush_enabled": self.flush_enabled,
                "minimum_durability_level": self.minimum_durability_level,
                "max_expiry": self.max_expiry,
                "status": self.status}

    def copy(self):
        return BucketSettings(**self.fields())

    def __eq__(self, other):
        return isinstance(other, BucketSettings) \
            and self.fields() == other.fields()

    def __ne__(self, other):
        return not self.__eq__(other)

    def __str__(self):
        return self.name

    def __repr__(self):
        return "BucketSettings(%s)" % ", ".join(
            "%s=%r" % (k, v) for k, v in sorted(self.fields().items()))

    # Onprem projection
    @staticmethod
    def from_onprem_json(content):
        """
        :param content: dict from GET /pools/default/buckets/<name>
        """
        onprem = BucketSettings.Onprem
        if not isinstance(content, dict):
            raise DeserializeError("Expected a bucket object, got %s"
                                   % type(content).__name__)
        try:
            quota = content[onprem.quota]
            # rawRAM is the per node quota, which is what ramQuotaMB sets
            ram = quota.get("rawRAM", quota.get("ram"))
            settings = BucketSettings(
                content[onprem.name],
                bucket_type=BucketType.from_wire(
                    content.get(onprem.bucketType,
                                BucketType.COUCHBASE), onprem=True),
                num_replicas=wire_uint(
                    onprem.replicaNumber,
                    content.get(onprem.replicaNumber, 0)),
                ram_quota_mb=wire_uint("quota.ram", ram) // 1024 // 1024,
                flush_enabled="flush" in (
                    content.get(onprem.controllers) or dict()),
                minimum_durability_level=DurabilityLevel.from_wire(
                    content.get(onprem.durabilityMinLevel)),
                max_expiry=wire_uint(onprem.maxTTL,
                                     content.get(onprem.maxTTL, 0)))
        except KeyError as e:
            raise DeserializeError("Missing bucket field %s" % e)
        except AttributeError as e:
            raise DeserializeError("Malformed bucket object: %s" % e)
        nodes = content.get(onprem.nodes) or list()
        if nodes and isinstance(nodes[0], dict):
            settings.status = nodes[0].get("status")
        return settings

    def to_onprem_json(self):
        onprem = BucketSettings.Onprem
        ram = self.ram_quota_mb * 1024 * 1024
        content = {
            onprem.name: self.name,
            onprem.bucketType:
                BucketType.ONPREM_NAMES.get(self.bucket_type,
                                            self.bucket_type),
            onprem.replicaNumber: self.num_replicas,
            onprem.quota: {"ram": ram, "rawRAM": ram},
            onprem.controllers: dict(),
            onprem.durabilityMinLevel: self.minimum_durability_level,
            onprem.maxTTL: self.max_expiry,
            onprem.nodes: list()}
        if self.flush_enabled:
            content[onprem.controllers]["flush"] = \
                "%s/%s/controller/doFlush" % (CbServer.Rest.BUCKETS,
                                              self.name)
        if self.status is not None:
            content[onprem.nodes].append({"status": self.status})
        return content

    def as_form(self):
        """
        Update form for POST /pools/default/buckets/<name>.
        Name, type and status are never sent (FORM_EXCLUDED_FIELDS)
        :return: dict of form params
        """
        onprem = BucketSettings.Onprem
        form = {onprem.ramQuotaMB: self.ram_quota_mb,
                onprem.flushEnabled: int(self.flush_enabled)}
        if self.bucket_type != BucketType.MEMCACHED:
            form[onprem.replicaNumber] = self.num_replicas
            form[onprem.durabilityMinLevel] = \
                self.minimum_durability_level
            form[onprem.maxTTL] = self.max_expiry
        return form

    def to_form_payload(self):
        try:
            return urlencode(self.as_form())
        except (TypeError, ValueError) as e:
            raise SerializeError(str(e))

    @staticmethod
    def from_form_payload(payload, name, bucket_type=BucketType.COUCHBASE):
        onprem = BucketSettings.Onprem
        form = dict(parse_qsl(payload, keep_blank_values=True))
        try:
            return BucketSettings(
                name, bucket_type=bucket_type,
                num_replicas=wire_uint(
                    onprem.replicaNumber,
                    form.get(onprem.replicaNumber, 0)),
                ram_quota_mb=wire_uint(onprem.ramQuotaMB,
                                       form[onprem.ramQuotaMB]),
                flush_enabled=wire_bool(
                    onprem.flushEnabled,
                    form.get(onprem.flushEnabled, 0)),
                minimum_durability_level=DurabilityLevel.from_wire(
                    form.get(onprem.durabilityMinLevel)),
                max_expiry=wire_uint(onprem.maxTTL,
                                     form.get(onprem.maxTTL, 0)))
        except KeyError as e:
            raise DeserializeError("Missing form field %s" % e)

    # Cloud projection
    @staticmethod
    def from_cloud_json(content):
        """
        :param content: one bucket dict of the Capella bucket collection
        """
        cloud = BucketSettings.Cloud
        if not isinstance(content, dict):
            raise DeserializeError("Expected a bucket object, got %s"
                                   % type(content).__name__)
        try:
            return BucketSettings(
                content[cloud.name],
                bucket_type=BucketType.from_wire(
                    content.get(cloud.type, BucketType.COUCHBASE)),
                num_replicas=wire_uint(cloud.replicas,
                                       content[cloud.replicas]),
                ram_quota_mb=wire_uint(cloud.memory, content[cloud.memory]),
                flush_enabled=wire_bool(cloud.flush,
                                        content.get(cloud.flush, False)),
                minimum_durability_level=DurabilityLevel.from_wire(
                    content.get(cloud.durability)),
                max_expiry=wire_uint(cloud.ttl, content.get(cloud.ttl, 0)),
                status=content.get(cloud.status))
        except KeyError as e:
            raise DeserializeError("Missing bucket field %s" % e)

    def to_cloud_json(self):
        cloud = BucketSettings.Cloud
        content = {cloud.name: self.name,
                   cloud.type: self.bucket_type,
                   cloud.memory: self.ram_quota_mb,
                   cloud.replicas: self.num_replicas,
                   cloud.flush: self.flush_enabled,
                   cloud.durability: self.minimum_durability_level,
                   cloud.ttl: self.max_expiry}
        if self.status is not None:
            content[cloud.status] = self.status
        return content

    @staticmethod
    def cloud_collection_payload(buckets):
        """
        :param buckets: list of cloud bucket dicts
        :return: JSON string of the whole collection
        """
        try:
            return json.dumps(buckets)
        except (TypeError, ValueError) as e:
            raise SerializeError(str(e))

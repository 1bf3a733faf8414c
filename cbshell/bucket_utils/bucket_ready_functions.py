"""
Bucket settings fetch and read-modify-write update against registered
clusters, on-prem through the management API and on Capella through the
whole-collection bucket API.
"""

from cbshell.BucketLib.bucket import BucketSettings, DurabilityLevel
from cbshell.constants.capella_constants import Capella
from cbshell.exceptions import BucketNotFound, CapabilityConflict, \
    DeserializeError, ParseError, ShellError
from cbshell.global_vars import logger


def parse_uint(field, value):
    """
    Convert a command's signed integer option into a non-negative int
    :raises ParseError: for negative or non integer values
    """
    if isinstance(value, bool):
        raise ParseError(field, value)
    try:
        int_value = int(value)
    except (TypeError, ValueError):
        raise ParseError(field, value)
    if int_value < 0 or (isinstance(value, float) and value != int_value):
        raise ParseError(field, value)
    return int_value


def parse_bool(field, value):
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ["true", "false"]:
        return value.lower() == "true"
    raise ParseError(field, value, allowed=["true", "false"])


class BucketSettingsEdit(object):
    """
    Sparse set of field overrides. A field left as None was not requested
    and is never touched by apply().
    """
    fields = ["ram_quota_mb", "num_replicas", "flush_enabled",
              "minimum_durability_level", "max_expiry"]

    # Settings the Capella hosted tier does not expose
    hosted_restricted = {"flush_enabled": "flush",
                         "minimum_durability_level": "durability",
                         "max_expiry": "expiry"}

    def __init__(self, ram_quota_mb=None, num_replicas=None,
                 flush_enabled=None, minimum_durability_level=None,
                 max_expiry=None):
        self.ram_quota_mb = ram_quota_mb
        self.num_replicas = num_replicas
        self.flush_enabled = flush_enabled
        self.minimum_durability_level = minimum_durability_level
        self.max_expiry = max_expiry

    @staticmethod
    def from_options(ram=None, replicas=None, flush=None, durability=None,
                     expiry=None):
        """
        Validate raw command options into an edit set
        :raises ParseError: on the first invalid option
        """
        edit = BucketSettingsEdit()
        if ram is not None:
            edit.ram_quota_mb = parse_uint("ram quota", ram)
        if replicas is not None:
            edit.num_replicas = parse_uint("num replicas", replicas)
        if flush is not None:
            edit.flush_enabled = parse_bool("flush", flush)
        if durability is not None:
            edit.minimum_durability_level = DurabilityLevel.parse(durability)
        if expiry is not None:
            edit.max_expiry = parse_uint("expiry", expiry)
        return edit

    def requested(self):
        return dict((field, getattr(self, field))
                    for field in BucketSettingsEdit.fields
                    if getattr(self, field) is not None)

    def is_empty(self):
        return not self.requested()

    def hosted_conflicts(self):
        """
        :return: Option names requested here which the hosted tier rejects
        """
        return [option for field, option
                in sorted(BucketSettingsEdit.hosted_restricted.items())
                if getattr(self, field) is not None]

    def apply(self, settings):
        for field, value in self.requested().items():
            setattr(settings, field, value)
        return settings

    def __repr__(self):
        return "BucketSettingsEdit(%s)" % ", ".join(
            "%s=%r" % (k, v) for k, v in sorted(self.requested().items()))


class BucketUtils(object):
    log = logger.get("infra")

    @staticmethod
    def check_hosted_capabilities(identifier, environment, edit):
        """
        Hosted Capella clusters do not allow flush/durability/expiry edits.
        Called before any request which would apply such an edit.
        """
        if environment != Capella.Environment.HOSTED:
            return
        conflicts = edit.hosted_conflicts()
        if conflicts:
            raise CapabilityConflict(
                "%s cannot be used against hosted Capella cluster '%s'"
                % (", ".join(conflicts), identifier))

    @staticmethod
    def check_environment_known(identifier, environment, edit):
        """
        Flush/durability/expiry edits need a known Capella environment,
        otherwise they would only be rejected after the cluster lookup.
        """
        if environment is not None:
            return
        conflicts = edit.hosted_conflicts()
        if conflicts:
            raise CapabilityConflict(
                "%s cannot be used against Capella cluster '%s' with an "
                "unknown environment, register it with --capella-environment"
                % (", ".join(conflicts), identifier))

    # Fetch
    @staticmethod
    def get_bucket(registry, identifier, name, ctrl_c=None, timeout=None):
        """
        :return: BucketSettings of the named bucket on the cluster
        """
        operation = "buckets get"
        try:
            cluster = registry.get(identifier)
            timeout = timeout or cluster.timeouts.management
            if cluster.is_capella():
                api = registry.capella_org_for_cluster(cluster).client()
                cluster_id = api.find_cluster_id(identifier, timeout,
                                                 ctrl_c=ctrl_c)
                buckets = api.get_cluster_buckets(cluster_id, timeout,
                                                  ctrl_c=ctrl_c)
                index = BucketUtils.find_bucket_index(buckets, name)
                return BucketSettings.from_cloud_json(buckets[index])
            rest = registry.rest_client(identifier).bucket
            response = rest.get_bucket_info(name, timeout=timeout,
                                            ctrl_c=ctrl_c)
            return BucketSettings.from_onprem_json(response.json())
        except ShellError as e:
            raise e.in_context(identifier, operation)

    @staticmethod
    def get_all_buckets(registry, identifier, ctrl_c=None, timeout=None):
        """
        :return: list of BucketSettings, in server order
        """
        operation = "buckets get"
        try:
            cluster = registry.get(identifier)
            timeout = timeout or cluster.timeouts.management
            if cluster.is_capella():
                api = registry.capella_org_for_cluster(cluster).client()
                cluster_id = api.find_cluster_id(identifier, timeout,
                                                 ctrl_c=ctrl_c)
                return [BucketSettings.from_cloud_json(b) for b in
                        api.get_cluster_buckets(cluster_id, timeout,
                                                ctrl_c=ctrl_c)]
            rest = registry.rest_client(identifier).bucket
            content = rest.get_bucket_info(timeout=timeout,
                                           ctrl_c=ctrl_c).json()
            if not isinstance(content, list):
                raise DeserializeError("Expected a list of buckets")
            return [BucketSettings.from_onprem_json(b) for b in content]
        except ShellError as e:
            raise e.in_context(identifier, operation)

    @staticmethod
    def find_bucket_index(buckets, name):
        for index, bucket in enumerate(buckets):
            if isinstance(bucket, dict) \
                    and bucket.get(BucketSettings.Cloud.name) == name:
                return index
        raise BucketNotFound(name)

    # Update
    @staticmethod
    def update_bucket(registry, identifiers, name, edit, ctrl_c=None,
                      timeout=None):
        """
        Apply the sparse edit to the bucket on each cluster, in order.
        Stops at the first failure. Clusters updated before the failure
        keep their new settings, there is no rollback.

        :param registry: ClusterRegistry
        :param identifiers: Resolved cluster identifiers
        :param name: Bucket name
        :param edit: BucketSettingsEdit
        :param ctrl_c: CancellationToken shared by every request
        :param timeout: Per request management timeout override (seconds)
        :return: list of updated BucketSettings, one per cluster
        """
        operation = "buckets update"
        updated = list()
        for identifier in identifiers:
            BucketUtils.log.debug("Updating bucket %s on %s with %s"
                                  % (name, identifier, edit))
            try:
                cluster = registry.get(identifier)
                if cluster.is_capella():
                    org = registry.capella_org_for_cluster(cluster)
                    settings = BucketUtils.update_cloud_bucket(
                        cluster, org.client(), name, edit,
                        ctrl_c=ctrl_c, timeout=timeout)
                else:
                    settings = BucketUtils.update_onprem_bucket(
                        cluster, registry.rest_client(identifier).bucket,
                        name, edit, ctrl_c=ctrl_c, timeout=timeout)
            except ShellError as e:
                BucketUtils.log.error("Updating bucket %s on %s failed: %s"
                                      % (name, identifier, e.msg))
                raise e.in_context(identifier, operation)
            BucketUtils.log.info("Bucket %s updated on %s"
                                 % (name, identifier))
            updated.append(settings)
        return updated

    @staticmethod
    def update_onprem_bucket(cluster, bucket_api, name, edit, ctrl_c=None,
                             timeout=None):
        """
        GET the bucket, apply the edit and POST the full update form.
        The server treats the form as a partial update.
        """
        timeout = timeout or cluster.timeouts.management
        response = bucket_api.get_bucket_info(name, timeout=timeout,
                                              ctrl_c=ctrl_c)
        settings = BucketSettings.from_onprem_json(response.json())
        edit.apply(settings)
        bucket_api.edit_bucket(name, settings.to_form_payload(),
                               timeout=timeout, ctrl_c=ctrl_c)
        return settings

    @staticmethod
    def update_cloud_bucket(cluster, capella_api, name, edit, ctrl_c=None,
                            timeout=None):
        """
        Capella has no per bucket update: read the whole collection,
        replace the target entry in place and PUT the collection back.
        Last writer wins for the whole collection, so the collection is
        always re-read right before writing.

        Hosted tier edits of flush/durability/expiry are rejected before
        any request when the registered environment is hosted or unknown.
        The environment reported by the lookup is checked again before the
        bucket collection is read.
        """
        timeout = timeout or cluster.timeouts.management
        environment = cluster.capella.environment
        BucketUtils.check_hosted_capabilities(cluster.identifier,
                                              environment, edit)
        BucketUtils.check_environment_known(cluster.identifier,
                                            environment, edit)

        capella_cluster = capella_api.find_cluster(cluster.identifier,
                                                   timeout, ctrl_c=ctrl_c)
        BucketUtils.check_hosted_capabilities(
            cluster.identifier, capella_cluster.environment, edit)

        buckets = capella_api.get_cluster_buckets(capella_cluster.id,
                                                  timeout, ctrl_c=ctrl_c)
        index = BucketUtils.find_bucket_index(buckets, name)
        # Order preserving: the edited entry goes back to its own slot
        raw_bucket = buckets.pop(index)
        settings = BucketSettings.from_cloud_json(raw_bucket)
        edit.apply(settings)

        # Keep keys this shell does not model
        new_bucket = dict(raw_bucket)
        new_bucket.update(settings.to_cloud_json())
        buckets.insert(index, new_bucket)

        capella_api.update_cluster_buckets(
            capella_cluster.id,
            BucketSettings.cloud_collection_payload(buckets),
            timeout, ctrl_c=ctrl_c)
        return settings

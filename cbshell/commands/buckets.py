from cbshell.bucket_utils.bucket_ready_functions import BucketSettingsEdit, \
    BucketUtils
from cbshell.cluster_utils.resolver import cluster_identifiers_from
from cbshell.commands import Command
from cbshell.exceptions import ShellError


def bucket_to_row(bucket, identifier, is_cloud):
    return {"cluster": identifier,
            "name": bucket.name,
            "type": bucket.bucket_type,
            "replicas": bucket.num_replicas,
            "min_durability_level": bucket.minimum_durability_level,
            "ram_quota": bucket.ram_quota_mb * 1024 * 1024,
            "flush_enabled": bucket.flush_enabled,
            "max_expiry": bucket.max_expiry,
            "status": bucket.status or "",
            "cloud": is_cloud}


class BucketsGet(Command):
    name = "buckets get"
    usage = "Fetches buckets through the HTTP API"

    def signature(self):
        parser = super(BucketsGet, self).signature()
        parser.add_argument("--bucket", default=None,
                            help="the name of the bucket")
        parser.add_argument("--clusters", default=None,
                            help="the clusters which should be contacted")
        parser.add_argument("--timeout", type=float, default=None,
                            help="management timeout in seconds")
        return parser

    def execute(self, args, ctrl_c):
        identifiers = cluster_identifiers_from(self.registry, args.clusters)
        rows = list()
        for identifier in identifiers:
            try:
                is_cloud = self.registry.get(identifier).is_capella()
                if args.bucket:
                    buckets = [BucketUtils.get_bucket(
                        self.registry, identifier, args.bucket,
                        ctrl_c=ctrl_c, timeout=args.timeout)]
                else:
                    buckets = BucketUtils.get_all_buckets(
                        self.registry, identifier,
                        ctrl_c=ctrl_c, timeout=args.timeout)
            except ShellError as e:
                raise e.in_context(identifier, self.name)
            rows.extend(bucket_to_row(b, identifier, is_cloud)
                        for b in buckets)
        return rows


class BucketsUpdate(Command):
    name = "buckets update"
    usage = "Updates a bucket"

    def signature(self):
        parser = super(BucketsUpdate, self).signature()
        parser.add_argument("name", help="the name of the bucket")
        parser.add_argument("--ram", type=int, default=None,
                            help="the amount of ram to allocate (mb)")
        parser.add_argument("--replicas", type=int, default=None,
                            help="the number of replicas for the bucket")
        parser.add_argument("--flush", default=None,
                            help="whether to enable flush (true/false)")
        parser.add_argument("--durability", default=None,
                            help="the minimum durability level")
        parser.add_argument("--expiry", type=int, default=None,
                            help="the maximum expiry for documents created "
                                 "in this bucket (seconds)")
        parser.add_argument("--clusters", default=None,
                            help="the clusters which should be contacted")
        parser.add_argument("--timeout", type=float, default=None,
                            help="management timeout in seconds")
        return parser

    def execute(self, args, ctrl_c):
        edit = BucketSettingsEdit.from_options(
            ram=args.ram, replicas=args.replicas, flush=args.flush,
            durability=args.durability, expiry=args.expiry)
        identifiers = cluster_identifiers_from(self.registry, args.clusters)
        self.log.debug("Running buckets update for bucket %s" % args.name)
        updated = BucketUtils.update_bucket(self.registry, identifiers,
                                            args.name, edit, ctrl_c=ctrl_c,
                                            timeout=args.timeout)
        return [bucket_to_row(bucket, identifier,
                              self.registry.get(identifier).is_capella())
                for identifier, bucket in zip(identifiers, updated)]

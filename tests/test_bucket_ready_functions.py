import json
import unittest
from urllib.parse import parse_qsl

from cbshell.bucket_utils.bucket_ready_functions import BucketSettingsEdit, \
    BucketUtils
from cbshell.cluster_utils.cluster_registry import ClusterRegistry
from cbshell.exceptions import BucketNotFound, CapabilityConflict, \
    ClusterNotFound, UnexpectedStatusCode
from tests.fake_http import FakeSession, capella_cluster, \
    capella_clusters_json, capella_org, cloud_bucket_json, \
    onprem_bucket_json, onprem_cluster

BUCKETS = "/v2/clusters/c1/buckets"


class BucketUtilsTestBase(unittest.TestCase):
    def setUp(self):
        self.registry = ClusterRegistry()
        self.capella_session = FakeSession()
        self.registry.add_capella_org(capella_org("org",
                                                  self.capella_session))
        self.sessions = dict()

    def add_onprem(self, identifier):
        self.registry.register(onprem_cluster(identifier))
        session = FakeSession()
        self.registry.rest_client(identifier).set_session(session)
        self.sessions[identifier] = session
        return session

    def add_cloud(self, identifier="cloud", environment=None,
                  listed_environment="vpc", buckets=None):
        self.registry.register(capella_cluster(identifier,
                                               environment=environment))
        self.capella_session.add("GET", "/v3/clusters",
                                 body=capella_clusters_json(
                                     ("c1", identifier, listed_environment)))
        if buckets is not None:
            self.capella_session.add("GET", BUCKETS, body=buckets)
        self.capella_session.add("PUT", BUCKETS, status=202)


class OnpremBucketTest(BucketUtilsTestBase):
    def test_update_posts_merged_form(self):
        session = self.add_onprem("local")
        session.add("GET", "/pools/default/buckets/default",
                    body=onprem_bucket_json("default", ram_mb=100,
                                            replicas=1, max_ttl=30))
        session.add("POST", "/pools/default/buckets/default")
        edit = BucketSettingsEdit.from_options(ram=256)

        updated = BucketUtils.update_bucket(self.registry, ["local"],
                                            "default", edit)
        self.assertEqual(updated[0].ram_quota_mb, 256)
        self.assertEqual(len(session.calls_for("GET")), 1)
        post = session.calls_for("POST")
        self.assertEqual(len(post), 1)
        form = dict(parse_qsl(post[0]["kwargs"]["data"]))
        self.assertEqual(form, {"ramQuotaMB": "256",
                                "replicaNumber": "1",
                                "flushEnabled": "0",
                                "durabilityMinLevel": "none",
                                "maxTTL": "30"})

    def test_get_failure_sends_no_update(self):
        session = self.add_onprem("local")
        session.add("GET", "/pools/default/buckets/default", status=404,
                    body="Requested resource not found.")
        edit = BucketSettingsEdit.from_options(ram=256)
        with self.assertRaises(UnexpectedStatusCode) as ctx:
            BucketUtils.update_bucket(self.registry, ["local"], "default",
                                      edit)
        self.assertEqual(ctx.exception.cluster, "local")
        self.assertEqual(ctx.exception.operation, "buckets update")
        self.assertEqual(session.calls_for("POST"), list())

    def test_fail_fast_across_clusters(self):
        first = self.add_onprem("x")
        second = self.add_onprem("y")
        first.add("GET", "/pools/default/buckets/default", status=500,
                  body="internal error")
        second.add("GET", "/pools/default/buckets/default",
                   body=onprem_bucket_json("default"))
        edit = BucketSettingsEdit.from_options(replicas=2)
        with self.assertRaises(UnexpectedStatusCode) as ctx:
            BucketUtils.update_bucket(self.registry, ["x", "y"], "default",
                                      edit)
        self.assertEqual(ctx.exception.cluster, "x")
        self.assertEqual(second.calls, list())

    def test_earlier_clusters_stay_updated(self):
        first = self.add_onprem("x")
        self.add_onprem("y")
        first.add("GET", "/pools/default/buckets/default",
                  body=onprem_bucket_json("default"))
        first.add("POST", "/pools/default/buckets/default")
        edit = BucketSettingsEdit.from_options(replicas=2)
        with self.assertRaises(UnexpectedStatusCode) as ctx:
            BucketUtils.update_bucket(self.registry, ["x", "y"], "default",
                                      edit)
        self.assertEqual(ctx.exception.cluster, "y")
        self.assertEqual(len(first.calls_for("POST")), 1)

    def test_unregistered_cluster(self):
        edit = BucketSettingsEdit.from_options(ram=128)
        with self.assertRaises(ClusterNotFound) as ctx:
            BucketUtils.update_bucket(self.registry, ["gone"], "default",
                                      edit)
        self.assertEqual(ctx.exception.cluster, "gone")

    def test_get_bucket_and_all_buckets(self):
        session = self.add_onprem("local")
        session.add("GET", "/pools/default/buckets/travel",
                    body=onprem_bucket_json("travel", ram_mb=200))
        session.add("GET", "/pools/default/buckets",
                    body=[onprem_bucket_json("travel"),
                          onprem_bucket_json("beer", bucket_type="memcached")])
        bucket = BucketUtils.get_bucket(self.registry, "local", "travel")
        self.assertEqual(bucket.ram_quota_mb, 200)
        buckets = BucketUtils.get_all_buckets(self.registry, "local")
        self.assertEqual([b.name for b in buckets], ["travel", "beer"])
        self.assertEqual(buckets[1].bucket_type, "memcached")


class CloudBucketTest(BucketUtilsTestBase):
    def test_update_preserves_collection_order(self):
        buckets = [cloud_bucket_json("A"),
                   cloud_bucket_json("B", ram_mb=100,
                                     storageBackend="magma"),
                   cloud_bucket_json("C")]
        self.add_cloud(buckets=buckets)
        edit = BucketSettingsEdit.from_options(ram=256, replicas=2)

        updated = BucketUtils.update_bucket(self.registry, ["cloud"], "B",
                                            edit)
        self.assertEqual(updated[0].ram_quota_mb, 256)
        put = self.capella_session.calls_for("PUT", BUCKETS)
        self.assertEqual(len(put), 1)
        body = json.loads(put[0]["kwargs"]["data"])
        self.assertEqual([b["name"] for b in body], ["A", "B", "C"])
        self.assertEqual(body[0], buckets[0])
        self.assertEqual(body[2], buckets[2])
        self.assertEqual(body[1]["memoryAllocationInMb"], 256)
        self.assertEqual(body[1]["replicas"], 2)
        self.assertEqual(body[1]["storageBackend"], "magma")

    def test_missing_bucket_sends_no_update(self):
        self.add_cloud(buckets=[cloud_bucket_json("A")])
        edit = BucketSettingsEdit.from_options(ram=256)
        with self.assertRaises(BucketNotFound) as ctx:
            BucketUtils.update_bucket(self.registry, ["cloud"], "B", edit)
        self.assertEqual(ctx.exception.name, "B")
        self.assertEqual(ctx.exception.cluster, "cloud")
        self.assertEqual(self.capella_session.calls_for("PUT"), list())

    def test_known_hosted_cluster_is_rejected_before_any_request(self):
        self.add_cloud(environment="hosted",
                       buckets=[cloud_bucket_json("A")])
        edit = BucketSettingsEdit.from_options(durability="majority")
        with self.assertRaises(CapabilityConflict):
            BucketUtils.update_bucket(self.registry, ["cloud"], "A", edit)
        self.assertEqual(self.capella_session.calls, list())

    def test_hosted_cluster_found_by_lookup_is_rejected(self):
        self.add_cloud(environment="vpc", listed_environment="hosted",
                       buckets=[cloud_bucket_json("A")])
        edit = BucketSettingsEdit.from_options(flush="true")
        with self.assertRaises(CapabilityConflict):
            BucketUtils.update_bucket(self.registry, ["cloud"], "A", edit)
        self.assertEqual(len(self.capella_session.calls), 1)
        self.assertEqual(self.capella_session.calls_for("GET", BUCKETS),
                         list())

    def test_hosted_cluster_accepts_ram_update(self):
        self.add_cloud(environment="hosted", listed_environment="hosted",
                       buckets=[cloud_bucket_json("A")])
        edit = BucketSettingsEdit.from_options(ram=512)
        BucketUtils.update_bucket(self.registry, ["cloud"], "A", edit)
        self.assertEqual(len(self.capella_session.calls_for("PUT")), 1)

    def test_unknown_environment_is_rejected_before_any_request(self):
        self.add_cloud(listed_environment="vpc",
                       buckets=[cloud_bucket_json("A")])
        edit = BucketSettingsEdit.from_options(ram=512, flush="true")
        with self.assertRaises(CapabilityConflict) as ctx:
            BucketUtils.update_bucket(self.registry, ["cloud"], "A", edit)
        self.assertIn("--capella-environment", str(ctx.exception))
        self.assertEqual(ctx.exception.cluster, "cloud")
        self.assertEqual(self.capella_session.calls, list())

    def test_unknown_environment_accepts_ram_update(self):
        self.add_cloud(buckets=[cloud_bucket_json("A")])
        edit = BucketSettingsEdit.from_options(ram=512)
        BucketUtils.update_bucket(self.registry, ["cloud"], "A", edit)
        self.assertEqual(len(self.capella_session.calls_for("PUT")), 1)

    def test_capella_cluster_not_found(self):
        self.registry.register(capella_cluster("cloud"))
        self.capella_session.add("GET", "/v3/clusters",
                                 body=capella_clusters_json())
        edit = BucketSettingsEdit.from_options(ram=512)
        with self.assertRaises(ClusterNotFound):
            BucketUtils.update_bucket(self.registry, ["cloud"], "A", edit)

    def test_get_cloud_buckets(self):
        self.add_cloud(buckets=[cloud_bucket_json("A"),
                                cloud_bucket_json("B", ram_mb=300)])
        bucket = BucketUtils.get_bucket(self.registry, "cloud", "B")
        self.assertEqual(bucket.ram_quota_mb, 300)
        self.assertEqual(
            [b.name for b in BucketUtils.get_all_buckets(self.registry,
                                                         "cloud")],
            ["A", "B"])
        with self.assertRaises(BucketNotFound) as ctx:
            BucketUtils.get_bucket(self.registry, "cloud", "Z")
        self.assertEqual(ctx.exception.operation, "buckets get")


if __name__ == "__main__":
    unittest.main()

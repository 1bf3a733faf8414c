import os
import tempfile
import unittest
from unittest import mock

from cbshell.cluster_config import ClusterConfigParser
from cbshell.exceptions import ClusterNotFound, GenericError, ParseError

CONFIG = """
[global]
username = Administrator
password = p%ss
active = cloud

[clusters]
1 = local
2 = cloud

[local]
hosts = 10.1.1.1, 10.1.1.2
management_timeout = 30
search_timeout = 2.5

[cloud]
hosts = cb.abcd.cloud.couchbase.com
username = admin
tls = true
capella_organization = my-org
capella_environment = hosted

[capella]
1 = my-org

[my-org]
url = https://cloudapi.example.com
access_key = access
secret_key = secret
"""


class ClusterConfigParserTest(unittest.TestCase):
    def test_parse(self):
        registry = ClusterConfigParser.parse_from_string(CONFIG)
        self.assertEqual(registry.identifiers(), ["cloud", "local"])
        self.assertEqual(registry.active(), "cloud")

        local = registry.get("local")
        self.assertEqual(local.hosts, ("10.1.1.1", "10.1.1.2"))
        self.assertEqual(local.username, "Administrator")
        self.assertEqual(local.password, "p%ss")
        self.assertFalse(local.tls)
        self.assertEqual(local.timeouts.management, 30)
        self.assertEqual(local.timeouts.search, 2.5)
        self.assertEqual(local.timeouts.query, 75)
        self.assertFalse(local.is_capella())

        cloud = registry.get("cloud")
        self.assertEqual(cloud.username, "admin")
        self.assertTrue(cloud.tls)
        self.assertEqual(cloud.capella_org, "my-org")
        self.assertEqual(cloud.capella.environment, "hosted")
        org = registry.capella_org_for_cluster(cloud)
        self.assertEqual(org.url, "https://cloudapi.example.com")
        self.assertEqual(org.client().ACCESS, "access")

    def test_keys_from_environment(self):
        config = CONFIG.replace("access_key = access\n", "") \
            .replace("secret_key = secret\n", "")
        with mock.patch.dict(os.environ,
                             {"CBSH_CAPELLA_ACCESS_KEY": "env-access",
                              "CBSH_CAPELLA_SECRET_KEY": "env-secret"}):
            registry = ClusterConfigParser.parse_from_string(config)
        client = registry.capella_org("my-org").client()
        self.assertEqual(client.ACCESS, "env-access")
        self.assertEqual(client.SECRET, "env-secret")

    def test_missing_capella_keys(self):
        config = CONFIG.replace("access_key = access\n", "")
        with mock.patch.dict(os.environ, clear=True):
            self.assertRaises(GenericError,
                              ClusterConfigParser.parse_from_string, config)

    def test_invalid_values(self):
        self.assertRaises(ParseError, ClusterConfigParser.parse_from_string,
                          CONFIG.replace("tls = true", "tls = sometimes"))
        self.assertRaises(ParseError, ClusterConfigParser.parse_from_string,
                          CONFIG.replace("management_timeout = 30",
                                         "management_timeout = -1"))
        self.assertRaises(ParseError, ClusterConfigParser.parse_from_string,
                          CONFIG.replace("capella_environment = hosted",
                                         "capella_environment = shared"))

    def test_missing_sections(self):
        self.assertRaises(GenericError, ClusterConfigParser.parse_from_string,
                          CONFIG.replace("[local]", "[other]"))
        self.assertRaises(ClusterNotFound,
                          ClusterConfigParser.parse_from_string,
                          CONFIG.replace("active = cloud", "active = nope"))

    def test_parse_from_file(self):
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = os.path.join(tmp_dir, "clusters.ini")
            with open(path, "w") as ini_file:
                ini_file.write(CONFIG)
            registry = ClusterConfigParser.parse_from_file(path)
            self.assertEqual(len(registry.clusters()), 2)
            self.assertRaises(GenericError,
                              ClusterConfigParser.parse_from_file,
                              os.path.join(tmp_dir, "missing.ini"))


if __name__ == "__main__":
    unittest.main()

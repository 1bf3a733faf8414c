"""
Builds a ClusterRegistry from an ini file:

    [global]
    username = Administrator
    password = password
    active = local

    [clusters]
    1 = local
    2 = cloud

    [local]
    hosts = 10.1.1.1,10.1.1.2
    management_timeout = 30

    [cloud]
    hosts = cb.abcd.cloud.couchbase.com
    tls = true
    capella_organization = my-org
    capella_environment = hosted

    [capella]
    1 = my-org

    [my-org]
    url = https://cloudapi.cloud.couchbase.com
    access_key = ...
    secret_key = ...

Options missing in a cluster section fall back to [global].
"""
import os
from configparser import ConfigParser

from cbshell.cluster_utils.cluster_registry import CapellaOrganization, \
    ClusterRegistry
from cbshell.cluster_utils.remote_cluster import CapellaReference, \
    ClusterTimeouts, RemoteCluster
from cbshell.constants.capella_constants import Capella
from cbshell.exceptions import GenericError, ParseError
from cbshell.global_vars import logger


class ClusterConfigParser(object):
    log = logger.get("infra")

    @staticmethod
    def parse_from_file(input_file, registry=None):
        config = ConfigParser(interpolation=None)
        if not config.read(input_file):
            raise GenericError("Unable to read config file %s" % input_file)
        return ClusterConfigParser.parse_config(config, registry)

    @staticmethod
    def parse_from_string(content, registry=None):
        config = ConfigParser(interpolation=None)
        config.read_string(content)
        return ClusterConfigParser.parse_config(config, registry)

    @staticmethod
    def parse_config(config, registry=None):
        registry = registry or ClusterRegistry()
        global_properties = dict()
        if config.has_section("global"):
            for option in config.options("global"):
                global_properties[option] = config.get("global", option)

        if config.has_section("capella"):
            for org_id in ClusterConfigParser.get_list(config, "capella"):
                registry.add_capella_org(
                    ClusterConfigParser.get_capella_org(config, org_id))

        if config.has_section("clusters"):
            for identifier in ClusterConfigParser.get_list(config,
                                                           "clusters"):
                registry.register(ClusterConfigParser.get_cluster(
                    config, identifier, global_properties))

        active = global_properties.get("active")
        if active:
            registry.set_active(active)
        ClusterConfigParser.log.info("Loaded clusters %s, active: %s"
                                     % (registry.identifiers(),
                                        registry.active()))
        return registry

    @staticmethod
    def get_list(config, section):
        values = list()
        for option in config.options(section):
            values.append(config.get(section, option).strip())
        return values

    @staticmethod
    def get_option(config, section, option, global_properties, default=None):
        if config.has_section(section) and config.has_option(section, option):
            return config.get(section, option)
        return global_properties.get(option, default)

    @staticmethod
    def to_bool(option, value):
        if isinstance(value, bool):
            return value
        if value.lower() in ["true", "1", "yes"]:
            return True
        if value.lower() in ["false", "0", "no"]:
            return False
        raise ParseError(option, value, allowed=["true", "false"])

    @staticmethod
    def to_seconds(option, value):
        try:
            seconds = float(value)
        except ValueError:
            raise ParseError(option, value)
        if seconds <= 0:
            raise ParseError(option, value)
        return seconds

    @staticmethod
    def get_cluster(config, identifier, global_properties):
        if not config.has_section(identifier):
            raise GenericError("No section [%s] for cluster %s"
                               % (identifier, identifier))

        def get(option, default=None):
            return ClusterConfigParser.get_option(
                config, identifier, option, global_properties, default)

        hosts = get("hosts")
        if not hosts:
            raise GenericError("Cluster %s has no hosts" % identifier)

        overrides = dict()
        for category in ClusterTimeouts.categories:
            option = "%s_timeout" % category
            value = get(option)
            if value is not None:
                overrides[category] = ClusterConfigParser.to_seconds(option,
                                                                     value)

        capella = None
        org_id = get("capella_organization")
        if org_id:
            environment = get("capella_environment")
            if environment is not None and environment not in [
                    Capella.Environment.HOSTED, Capella.Environment.VPC]:
                raise ParseError("capella_environment", environment,
                                 allowed=[Capella.Environment.HOSTED,
                                          Capella.Environment.VPC])
            capella = CapellaReference(org_id, environment)

        return RemoteCluster(
            identifier, hosts, get("username", ""), get("password", ""),
            tls=ClusterConfigParser.to_bool("tls", get("tls", "false")),
            timeouts=ClusterTimeouts().with_overrides(**overrides),
            capella=capella)

    @staticmethod
    def get_capella_org(config, org_id):
        if not config.has_section(org_id):
            raise GenericError("No section [%s] for Capella organization"
                               % org_id)
        url = config.get(org_id, "url", fallback=Capella.default_url)
        access_key = config.get(org_id, "access_key", fallback=None) \
            or os.environ.get(Capella.EnvVars.ACCESS_KEY)
        secret_key = config.get(org_id, "secret_key", fallback=None) \
            or os.environ.get(Capella.EnvVars.SECRET_KEY)
        return CapellaOrganization(org_id, url, secret_key, access_key)

# -*- coding: utf-8 -*-
from cbshell.capellaAPI.CapellaAPIRequests import CapellaAPIRequests
from cbshell.constants.capella_constants import Capella
from cbshell.exceptions import ClusterNotFound, DeserializeError


class CapellaCluster(object):
    def __init__(self, cluster_id, name, environment):
        self.id = cluster_id
        self.name = name
        self.environment = environment

    def is_hosted(self):
        return self.environment == Capella.Environment.HOSTED

    def __repr__(self):
        return "CapellaCluster(%s, %s, %s)" % (self.id, self.name,
                                               self.environment)


class CapellaAPI(CapellaAPIRequests):

    def __init__(self, url, secret, access):
        super(CapellaAPI, self).__init__(url, secret, access)
        self.perPage = 100

    # Cluster methods
    def get_clusters(self, timeout, ctrl_c=None, name=None):
        params = {"perPage": self.perPage}
        if name:
            params["name"] = name
        response = self.capella_api_get(Capella.Api.CLUSTERS, timeout,
                                        ctrl_c=ctrl_c, params=params)
        content = response.json()
        try:
            return content["data"]["items"]
        except (KeyError, TypeError):
            raise DeserializeError("Cluster listing has no data.items: %s"
                                   % response.content)

    def find_cluster(self, name, timeout, ctrl_c=None):
        """
        Resolve the human cluster name to the control plane's cluster
        :return: CapellaCluster object
        """
        for cluster in self.get_clusters(timeout, ctrl_c=ctrl_c, name=name):
            if cluster.get("name") == name:
                if "id" not in cluster:
                    raise DeserializeError("Cluster '%s' has no id" % name)
                return CapellaCluster(cluster["id"], cluster["name"],
                                      cluster.get("environment"))
        raise ClusterNotFound(name)

    def find_cluster_id(self, name, timeout, ctrl_c=None):
        return self.find_cluster(name, timeout, ctrl_c=ctrl_c).id

    # Cluster buckets
    def get_cluster_buckets(self, cluster_id, timeout, ctrl_c=None):
        """
        The API only exposes the whole bucket collection of a cluster
        :return: list of bucket dicts, as sent by the server
        """
        response = self.capella_api_get(Capella.Api.BUCKETS.format(cluster_id),
                                        timeout, ctrl_c=ctrl_c)
        buckets = response.json()
        if not isinstance(buckets, list):
            raise DeserializeError("Expected a list of buckets, got: %s"
                                   % response.content)
        return buckets

    def update_cluster_buckets(self, cluster_id, buckets, timeout,
                               ctrl_c=None):
        """
        Replaces the complete bucket collection of the cluster
        :param buckets: list of bucket dicts, every bucket to keep
        """
        return self.capella_api_put(Capella.Api.BUCKETS.format(cluster_id),
                                    buckets, timeout, ctrl_c=ctrl_c)

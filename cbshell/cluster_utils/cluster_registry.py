from threading import Lock

from cbshell.capellaAPI.CapellaAPI import CapellaAPI
from cbshell.cb_server_rest_util.rest_client import RestConnection
from cbshell.exceptions import ClusterNotFound, GenericError
from cbshell.global_vars import logger


class CapellaOrganization(object):
    """
    Capella organization shared by every registered cluster referring to it.
    Holds the one authenticated API client used for all those clusters.
    """
    def __init__(self, org_id, url, secret_key, access_key, api_client=None):
        self.id = org_id
        self.url = url
        self.api_client = api_client \
            or CapellaAPI(url, secret_key, access_key)

    def client(self):
        return self.api_client

    def __repr__(self):
        return "CapellaOrganization(%s, %s)" % (self.id, self.url)


class ClusterRegistry(object):
    """
    Table of identifier -> RemoteCluster plus the active identifier.
    One lock guards the whole table. It is never held across a network call:
    callers take a snapshot (get / rest_client / capella_client) and do I/O
    after the lock is released.
    """
    def __init__(self):
        self.log = logger.get("infra")
        self.__lock = Lock()
        self.__clusters = dict()
        self.__rest_clients = dict()
        self.__capella_orgs = dict()
        self.__active = None

    def register(self, cluster, activate=False):
        """
        Insert or replace the cluster under its identifier
        :param cluster: RemoteCluster object
        :param activate: Make the cluster the active default target
        """
        with self.__lock:
            if cluster.identifier in self.__clusters:
                self.log.debug("Replacing registered cluster %s"
                               % cluster.identifier)
            self.__clusters[cluster.identifier] = cluster
            self.__rest_clients.pop(cluster.identifier, None)
            if activate or self.__active is None:
                self.__active = cluster.identifier
        self.log.info("Registered cluster %s" % cluster.identifier)

    def unregister(self, identifier):
        """
        :return: True if the identifier was registered, False otherwise
        """
        with self.__lock:
            if self.__clusters.pop(identifier, None) is None:
                return False
            self.__rest_clients.pop(identifier, None)
            if self.__active == identifier:
                self.__active = None
        self.log.info("Unregistered cluster %s" % identifier)
        return True

    def get(self, identifier):
        with self.__lock:
            try:
                return self.__clusters[identifier]
            except KeyError:
                raise ClusterNotFound(identifier)

    def contains(self, identifier):
        with self.__lock:
            return identifier in self.__clusters

    def identifiers(self):
        with self.__lock:
            return sorted(self.__clusters.keys())

    def clusters(self):
        with self.__lock:
            return [self.__clusters[c] for c in sorted(self.__clusters)]

    def active(self):
        with self.__lock:
            return self.__active

    def set_active(self, identifier):
        with self.__lock:
            if identifier not in self.__clusters:
                raise ClusterNotFound(identifier)
            self.__active = identifier
        self.log.info("Active cluster set to %s" % identifier)

    def rest_client(self, identifier):
        """
        :return: Cached RestConnection for the registered on-prem cluster
        """
        with self.__lock:
            if identifier not in self.__clusters:
                raise ClusterNotFound(identifier)
            if identifier not in self.__rest_clients:
                self.__rest_clients[identifier] = \
                    RestConnection(self.__clusters[identifier])
            return self.__rest_clients[identifier]

    # Capella organizations
    def add_capella_org(self, organization):
        with self.__lock:
            self.__capella_orgs[organization.id] = organization

    def remove_capella_org(self, org_id):
        with self.__lock:
            return self.__capella_orgs.pop(org_id, None) is not None

    def capella_org(self, org_id):
        with self.__lock:
            try:
                return self.__capella_orgs[org_id]
            except KeyError:
                raise GenericError("Capella organization '%s' is not "
                                   "registered" % org_id)

    def capella_org_for_cluster(self, cluster):
        if cluster.capella_org is None:
            raise GenericError("Cluster '%s' is not managed by Capella"
                               % cluster.identifier)
        return self.capella_org(cluster.capella_org)

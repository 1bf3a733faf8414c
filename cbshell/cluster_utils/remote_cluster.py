from cbshell.constants.cb_constants import CbServer


class ClusterTimeouts(object):
    """Per category request timeouts, in seconds"""
    MANAGEMENT = "management"
    QUERY = "query"
    ANALYTICS = "analytics"
    SEARCH = "search"

    categories = [MANAGEMENT, QUERY, ANALYTICS, SEARCH]

    def __init__(self, management=CbServer.Timeouts.MANAGEMENT,
                 query=CbServer.Timeouts.QUERY,
                 analytics=CbServer.Timeouts.ANALYTICS,
                 search=CbServer.Timeouts.SEARCH):
        self.management = management
        self.query = query
        self.analytics = analytics
        self.search = search

    def get(self, category):
        if category not in ClusterTimeouts.categories:
            raise ValueError("Unknown timeout category '%s'" % category)
        return getattr(self, category)

    def with_overrides(self, **overrides):
        """
        Returns a new ClusterTimeouts with the given (non None) categories
        replaced. Used for per-command timeout options.
        """
        values = dict((c, self.get(c)) for c in ClusterTimeouts.categories)
        for category, value in overrides.items():
            if value is None:
                continue
            if category not in values:
                raise ValueError("Unknown timeout category '%s'" % category)
            values[category] = value
        return ClusterTimeouts(**values)

    def __eq__(self, other):
        return isinstance(other, ClusterTimeouts) \
            and all(self.get(c) == other.get(c)
                    for c in ClusterTimeouts.categories)

    def __repr__(self):
        return "ClusterTimeouts(%s)" % ", ".join(
            "%s=%s" % (c, self.get(c)) for c in ClusterTimeouts.categories)


class CapellaReference(object):
    """
    Link from a registered cluster to the Capella organization managing it.
    environment is optional: when the operator already knows the cluster is
    on the hosted tier, capability checks happen without any lookup.
    """
    def __init__(self, organization_id, environment=None):
        self.organization_id = organization_id
        self.environment = environment

    def __repr__(self):
        return "CapellaReference(%s, %s)" % (self.organization_id,
                                             self.environment)


class RemoteCluster(object):
    """
    Connection profile of one registered cluster.
    Fields are set once at registration, only timeouts may be replaced
    through with_timeouts() which returns a copy.
    """
    def __init__(self, identifier, hosts, username, password,
                 tls=False, timeouts=None, capella=None):
        if not identifier:
            raise ValueError("Cluster identifier cannot be empty")
        if isinstance(hosts, str):
            hosts = [h.strip() for h in hosts.split(",") if h.strip()]
        self.__identifier = identifier
        self.__hosts = tuple(hosts)
        self.__username = username
        self.__password = password
        self.__tls = tls
        self.__timeouts = timeouts or ClusterTimeouts()
        self.__capella = capella

    @property
    def identifier(self):
        return self.__identifier

    @property
    def hosts(self):
        return self.__hosts

    @property
    def username(self):
        return self.__username

    @property
    def password(self):
        return self.__password

    @property
    def tls(self):
        return self.__tls

    @property
    def timeouts(self):
        return self.__timeouts

    @property
    def capella(self):
        return self.__capella

    @property
    def capella_org(self):
        if self.__capella is None:
            return None
        return self.__capella.organization_id

    def is_capella(self):
        return self.__capella is not None

    def with_timeouts(self, **overrides):
        return RemoteCluster(self.__identifier, self.__hosts,
                             self.__username, self.__password,
                             tls=self.__tls,
                             timeouts=self.__timeouts.with_overrides(
                                 **overrides),
                             capella=self.__capella)

    def __str__(self):
        return self.__identifier

    def __repr__(self):
        return "RemoteCluster(%s, hosts=%s, capella=%s)" \
               % (self.__identifier, ",".join(self.__hosts),
                  self.capella_org)

from cbshell.cluster_utils.remote_cluster import CapellaReference, \
    ClusterTimeouts, RemoteCluster
from cbshell.commands import Command
from cbshell.constants.capella_constants import Capella
from cbshell.exceptions import ClusterNotFound


class ClustersRegister(Command):
    name = "clusters register"
    usage = "Registers a cluster for use with the shell"

    def signature(self):
        parser = super(ClustersRegister, self).signature()
        parser.add_argument("identifier",
                            help="the identifier to use for this cluster")
        parser.add_argument("hosts",
                            help="comma separated list of seed hosts")
        parser.add_argument("--username", required=True)
        parser.add_argument("--password", required=True)
        parser.add_argument("--tls", action="store_true", default=False,
                            help="use https for management requests")
        parser.add_argument("--capella-organization", dest="capella_org",
                            help="Capella organization managing the cluster")
        parser.add_argument("--capella-environment", dest="capella_env",
                            choices=[Capella.Environment.HOSTED,
                                     Capella.Environment.VPC])
        for category in ClusterTimeouts.categories:
            parser.add_argument("--%s-timeout" % category, type=float,
                                dest="%s_timeout" % category,
                                help="%s timeout in seconds" % category)
        parser.add_argument("--activate", action="store_true", default=False,
                            help="make this the active cluster")
        return parser

    def execute(self, args, ctrl_c):
        capella = None
        if args.capella_org:
            capella = CapellaReference(args.capella_org, args.capella_env)
        timeouts = ClusterTimeouts().with_overrides(
            **dict((c, getattr(args, "%s_timeout" % c))
                   for c in ClusterTimeouts.categories))
        cluster = RemoteCluster(args.identifier, args.hosts,
                                args.username, args.password,
                                tls=args.tls, timeouts=timeouts,
                                capella=capella)
        self.registry.register(cluster, activate=args.activate)
        return list()


class ClustersUnregister(Command):
    name = "clusters unregister"
    usage = "Unregisters a cluster from the shell"

    def signature(self):
        parser = super(ClustersUnregister, self).signature()
        parser.add_argument("identifier",
                            help="the identifier of the cluster")
        return parser

    def execute(self, args, ctrl_c):
        if not self.registry.unregister(args.identifier):
            raise ClusterNotFound(
                args.identifier,
                "identifier '%s' is not registered to a cluster"
                % args.identifier)
        return list()


class ClustersList(Command):
    name = "clusters"
    usage = "Lists all registered clusters"

    def execute(self, args, ctrl_c):
        active = self.registry.active()
        rows = list()
        for cluster in self.registry.clusters():
            rows.append({"active": cluster.identifier == active,
                         "identifier": cluster.identifier,
                         "hosts": ",".join(cluster.hosts),
                         "username": cluster.username,
                         "tls": cluster.tls,
                         "capella_organization": cluster.capella_org or ""})
        return rows


class ClustersUse(Command):
    name = "clusters use"
    usage = "Sets the active cluster"

    def signature(self):
        parser = super(ClustersUse, self).signature()
        parser.add_argument("identifier",
                            help="the identifier of the cluster")
        return parser

    def execute(self, args, ctrl_c):
        self.registry.set_active(args.identifier)
        return list()

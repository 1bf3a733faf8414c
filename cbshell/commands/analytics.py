from cbshell.cluster_utils.resolver import cluster_identifiers_from
from cbshell.commands import Command
from cbshell.commands.query import query_results
from cbshell.exceptions import ShellError


class AnalyticsStatementCommand(Command):
    statement = None

    def signature(self):
        parser = super(AnalyticsStatementCommand, self).signature()
        parser.add_argument("--clusters", default=None,
                            help="the clusters which should be contacted")
        return parser

    def execute(self, args, ctrl_c):
        rows = list()
        for identifier in cluster_identifiers_from(self.registry,
                                                   args.clusters):
            self.log.debug("Running analytics query %s" % self.statement)
            try:
                rest = self.registry.rest_client(identifier)
                content = rest.analytics.execute_statement_on_cbas(
                    self.statement, ctrl_c=ctrl_c).json()
                for result in query_results(content):
                    result["cluster"] = identifier
                    rows.append(result)
            except ShellError as e:
                raise e.in_context(identifier, self.name)
        return rows


class AnalyticsDataverses(AnalyticsStatementCommand):
    name = "analytics dataverses"
    usage = "Lists all analytics dataverses"
    statement = "SELECT d.* FROM Metadata.`Dataverse` d " \
                "WHERE d.DataverseName <> \"Metadata\""


class AnalyticsDatasets(AnalyticsStatementCommand):
    name = "analytics datasets"
    usage = "Lists all analytics datasets"
    statement = "SELECT d.* FROM Metadata.`Dataset` d " \
                "WHERE d.DataverseName <> \"Metadata\""

from cbshell.cluster_utils.resolver import cluster_identifiers_from
from cbshell.commands import Command
from cbshell.exceptions import DeserializeError, ShellError

INDEXES_STATEMENT = \
    "select keyspace_id as `bucket`, name, state, `using` as `type`, " \
    "ifmissing(condition, null) as condition, " \
    "ifmissing(is_primary, false) as `primary`, index_key " \
    "from system:indexes"


def query_results(content):
    """
    :param content: Decoded query/analytics service response
    :return: list of result rows
    """
    if not isinstance(content, dict):
        raise DeserializeError("Query toplevel result not an object "
                               "- malformed response")
    results = content.get("results")
    if not isinstance(results, list):
        raise DeserializeError("Query result not an array "
                               "- malformed response")
    return results


class QueryIndexes(Command):
    name = "query indexes"
    usage = "Lists all query indexes"

    def signature(self):
        parser = super(QueryIndexes, self).signature()
        parser.add_argument("--definitions", action="store_true",
                            default=False,
                            help="fetch the index definitions instead")
        parser.add_argument("--with-meta", dest="with_meta",
                            action="store_true", default=False,
                            help="includes related metadata in the result")
        parser.add_argument("--clusters", default=None,
                            help="the clusters which should be contacted")
        return parser

    def execute(self, args, ctrl_c):
        rows = list()
        for identifier in cluster_identifiers_from(self.registry,
                                                   args.clusters):
            try:
                rest = self.registry.rest_client(identifier)
                if args.definitions:
                    rows.extend(self.index_definitions(identifier, rest,
                                                       ctrl_c))
                    continue
                content = rest.query.run_query(INDEXES_STATEMENT,
                                               ctrl_c=ctrl_c).json()
                if args.with_meta:
                    content["cluster"] = identifier
                    rows.append(content)
                    continue
                for result in query_results(content):
                    result["cluster"] = identifier
                    rows.append(result)
            except ShellError as e:
                raise e.in_context(identifier, self.name)
        return rows

    @staticmethod
    def index_definitions(identifier, rest, ctrl_c):
        content = rest.bucket.get_index_status(
            timeout=rest.cluster.timeouts.query, ctrl_c=ctrl_c).json()
        try:
            indexes = content["indexes"]
            return [{"cluster": identifier,
                     "bucket": d["bucket"],
                     "scope": d.get("scope") or "",
                     "collection": d.get("collection") or "",
                     "name": d["indexName"],
                     "status": d["status"],
                     "storage_mode": d["storageMode"],
                     "replicas": d["numReplica"],
                     "definition": d["definition"]}
                    for d in indexes]
        except (KeyError, TypeError) as e:
            raise DeserializeError("Malformed index status: %s" % e)

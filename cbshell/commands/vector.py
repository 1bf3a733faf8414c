from cbshell.bucket_utils.bucket_ready_functions import parse_uint
from cbshell.cluster_utils.resolver import cluster_identifiers_from
from cbshell.commands import Command
from cbshell.exceptions import DeserializeError, GenericError, ParseError, \
    ShellError

DEFAULT_SCOPE = "_default"
DEFAULT_NEIGHBORS = 3


def qualified_index_name(index, bucket, scope=None):
    return "%s.%s.%s" % (bucket, scope or DEFAULT_SCOPE, index)


def vector_search_payload(vector, field, neighbors, query=None,
                          timeout=None):
    """
    knn query body. Without a text query only the vector neighbours match.
    :param timeout: Server side timeout in seconds
    """
    payload = {"query": {"query": query} if query else {"match_none": {}},
               "knn": [{"field": field, "vector": vector, "k": neighbors}]}
    if timeout is not None:
        payload["ctl"] = {"timeout": int(timeout * 1000)}
    return payload


def search_hits(content):
    try:
        return [{"id": hit["id"], "score": str(hit["score"])}
                for hit in content["hits"]]
    except (KeyError, TypeError) as e:
        raise DeserializeError("Malformed search result: %s" % e)


class VectorSearch(Command):
    name = "vector search"
    usage = "Performs a vector search query"

    def signature(self):
        parser = super(VectorSearch, self).signature()
        parser.add_argument("index", help="the index name")
        parser.add_argument("field",
                            help="name of the vector field the index was "
                                 "built on")
        parser.add_argument("vector", nargs="*", type=float,
                            help="the vector used for searching")
        parser.add_argument("--query", default=None,
                            help="the text to query for using a query "
                                 "string query")
        parser.add_argument("--neighbors", type=int,
                            default=DEFAULT_NEIGHBORS,
                            help="number of neighbors returned by vector "
                                 "search (default = 3)")
        parser.add_argument("--bucket", default=None,
                            help="the name of the bucket")
        parser.add_argument("--scope", default=None,
                            help="the name of the scope")
        parser.add_argument("--clusters", default=None,
                            help="the clusters which should be contacted")
        return parser

    def execute(self, args, ctrl_c):
        if not args.vector:
            raise GenericError("Could not parse input vector")
        neighbors = parse_uint("neighbors", args.neighbors)
        if neighbors == 0:
            raise ParseError("neighbors", args.neighbors)
        if not args.bucket:
            raise GenericError("Could not auto-select a bucket - "
                               "please use --bucket instead")
        index = qualified_index_name(args.index, args.bucket, args.scope)

        rows = list()
        for identifier in cluster_identifiers_from(self.registry,
                                                   args.clusters):
            try:
                rest = self.registry.rest_client(identifier)
                timeout = rest.cluster.timeouts.search
                payload = vector_search_payload(args.vector, args.field,
                                                neighbors, query=args.query,
                                                timeout=timeout)
                content = rest.search.run_fts_query(
                    index, payload, timeout=timeout, ctrl_c=ctrl_c).json()
                for hit in search_hits(content):
                    hit["cluster"] = identifier
                    rows.append(hit)
            except ShellError as e:
                raise e.in_context(identifier, self.name)
        return rows

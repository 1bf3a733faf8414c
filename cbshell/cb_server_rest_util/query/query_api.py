"""
https://docs.couchbase.com/server/current/n1ql-rest-query/index.html
"""
import json

from cbshell.cb_server_rest_util.connection import CBRestConnection
from cbshell.constants.cb_constants import CbServer


class QueryRestAPI(CBRestConnection):
    def __init__(self, cluster):
        super(QueryRestAPI, self).__init__()

        self.set_server_values(cluster)
        self.set_endpoint_urls(cluster)

    def run_query(self, statement, query_context=None,
                  timeout=None, ctrl_c=None):
        """
        POST :: /query/service
        :param statement: N1QL statement
        :param query_context: Optional 'bucket.scope' context
        :param timeout: Defaults to the cluster's query timeout
        """
        if timeout is None:
            timeout = self.timeouts.query
        api = self.query_url + CbServer.Rest.QUERY_SERVICE
        params = {"statement": statement, "timeout": "%ss" % timeout}
        if query_context:
            params["query_context"] = query_context
        self.log.debug("Running query: %s" % statement)
        return self.request(api, self.POST,
                            params=json.dumps(params),
                            headers=self.get_headers_for_content_type_json(),
                            timeout=timeout, ctrl_c=ctrl_c)

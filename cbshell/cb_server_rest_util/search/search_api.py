"""
https://docs.couchbase.com/server/current/rest-api/rest-fts.html
"""
import json

from requests.utils import quote

from cbshell.cb_server_rest_util.connection import CBRestConnection
from cbshell.constants.cb_constants import CbServer


class SearchRestAPI(CBRestConnection):
    def __init__(self, cluster):
        super(SearchRestAPI, self).__init__()

        self.set_server_values(cluster)
        self.set_endpoint_urls(cluster)

    def run_fts_query(self, index_name, param_data, timeout=None,
                      ctrl_c=None):
        """
        POST :: /api/index/{index_name}/query
        docs.couchbase.com/server/current/rest-api/rest-fts-query.html
        :param index_name: Index name, 'bucket.scope.index' for scoped indexes
        :param param_data: Query body as a dict
        :param timeout: Defaults to the cluster's search timeout
        """
        if timeout is None:
            timeout = self.timeouts.search
        api = self.fts_url + CbServer.Rest.SEARCH_QUERY.format(
            quote(index_name, safe=""))
        self.log.debug("Running search query on %s: %s"
                       % (index_name, param_data))
        return self.request(api, self.POST,
                            params=json.dumps(param_data),
                            headers=self.get_headers_for_content_type_json(),
                            timeout=timeout, ctrl_c=ctrl_c)

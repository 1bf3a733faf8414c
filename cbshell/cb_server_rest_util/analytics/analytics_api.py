"""
https://docs.couchbase.com/server/current/analytics-rest-service/index.html
"""
import json

from cbshell.cb_server_rest_util.connection import CBRestConnection
from cbshell.constants.cb_constants import CbServer


class AnalyticsRestAPI(CBRestConnection):
    def __init__(self, cluster):
        super(AnalyticsRestAPI, self).__init__()

        self.set_server_values(cluster)
        self.set_endpoint_urls(cluster)

    def execute_statement_on_cbas(self, statement, timeout=None,
                                  ctrl_c=None):
        """
        POST /analytics/service
        :param timeout: Defaults to the cluster's analytics timeout
        """
        if timeout is None:
            timeout = self.timeouts.analytics
        api = self.cbas_url + CbServer.Rest.ANALYTICS_SERVICE
        params = {"statement": statement, "timeout": "%ss" % timeout}
        self.log.debug("Running analytics statement: %s" % statement)
        return self.request(api, self.POST,
                            params=json.dumps(params),
                            headers=self.get_headers_for_content_type_json(),
                            timeout=timeout, ctrl_c=ctrl_c)

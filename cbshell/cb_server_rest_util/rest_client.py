import requests

from cbshell.cb_server_rest_util.analytics.analytics_api import \
    AnalyticsRestAPI
from cbshell.cb_server_rest_util.buckets.buckets_api import BucketRestApi
from cbshell.cb_server_rest_util.query.query_api import QueryRestAPI
from cbshell.cb_server_rest_util.search.search_api import SearchRestAPI


class RestConnection(object):
    """
    Service APIs of one on-prem cluster, all sharing a single session
    """
    def __init__(self, cluster):
        self.cluster = cluster
        self.session = requests.Session()

        self.bucket = BucketRestApi(self.cluster)
        self.query = QueryRestAPI(self.cluster)
        self.analytics = AnalyticsRestAPI(self.cluster)
        self.search = SearchRestAPI(self.cluster)
        self.set_session(self.session)

    def set_session(self, session):
        self.session = session
        for api in [self.bucket, self.query, self.analytics, self.search]:
            api.session = session

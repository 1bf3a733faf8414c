from requests.utils import quote

from cbshell.cb_server_rest_util.connection import CBRestConnection
from cbshell.constants.cb_constants import CbServer


class BucketRestApi(CBRestConnection):
    def __init__(self, cluster):
        super(BucketRestApi, self).__init__()

        self.set_server_values(cluster)
        self.set_endpoint_urls(cluster)

    def get_bucket_info(self, bucket_name=None, timeout=None, ctrl_c=None):
        """
        GET :: /pools/default/buckets
        GET :: /pools/default/buckets/<bucket_name>
        docs.couchbase.com/server/current/rest-api/rest-buckets-summary.html
        """
        api = self.base_url + CbServer.Rest.BUCKETS
        if bucket_name:
            api += "/%s" % quote(bucket_name, safe="")
        return self.request(api, timeout=timeout, ctrl_c=ctrl_c)

    def edit_bucket(self, bucket_name, payload, timeout=None, ctrl_c=None):
        """
        POST :: /pools/default/buckets/<bucket_name>
        docs.couchbase.com/server/current/rest-api/rest-bucket-create.html

        Partial update, params not part of payload keep their server values
        :param payload: Form encoded string
        """
        api = self.base_url + CbServer.Rest.BUCKETS \
            + "/%s" % quote(bucket_name, safe="")
        return self.request(api, self.POST, params=payload,
                            timeout=timeout, ctrl_c=ctrl_c)

    def get_index_status(self, timeout=None, ctrl_c=None):
        """
        GET :: /indexStatus
        """
        api = self.base_url + CbServer.Rest.INDEX_STATUS
        return self.request(api, timeout=timeout, ctrl_c=ctrl_c)

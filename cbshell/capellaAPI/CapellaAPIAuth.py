import base64
import hashlib
import hmac
import time
from urllib.parse import urlsplit

from requests.auth import AuthBase


class CapellaAPIAuth(AuthBase):
    """
    Signs Capella management API requests.
    Signature is base64(HMAC-SHA256(secret, "METHOD\\nPATH[?QUERY]\\nMILLIS"))
    sent as 'Bearer <access>:<signature>' with the same millis in
    Couchbase-Timestamp.
    """

    def __init__(self, secret, access):
        self.ACCESS_KEY = access
        self.SECRET_KEY = secret

    @staticmethod
    def signed_path(url):
        parts = urlsplit(url)
        if parts.query:
            return "%s?%s" % (parts.path, parts.query)
        return parts.path

    def signature(self, method, path, timestamp):
        message = "%s\n%s\n%s" % (method, path, timestamp)
        digest = hmac.new(self.SECRET_KEY.encode(), message.encode(),
                          digestmod=hashlib.sha256).digest()
        return base64.b64encode(digest).decode()

    def __call__(self, r):
        timestamp = str(int(time.time() * 1000))
        signature = self.signature(r.method, self.signed_path(r.url),
                                   timestamp)
        r.headers.update({
            'Authorization': 'Bearer %s:%s' % (self.ACCESS_KEY, signature),
            'Couchbase-Timestamp': timestamp,
            'Content-Type': 'application/json'})
        return r

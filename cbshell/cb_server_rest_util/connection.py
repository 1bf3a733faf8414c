import base64
import json
from concurrent.futures import ThreadPoolExecutor, wait

import requests

from cbshell.common_lib import CancellationToken, Deadline
from cbshell.constants.cb_constants import CbServer
from cbshell.exceptions import DeserializeError, TransportError, \
    UnexpectedStatusCode
from cbshell.global_vars import logger

READ_CHUNK_SIZE = 16 * 1024
# Seconds between ctrl_c / deadline checks while a call is in flight
REQUEST_POLL_INTERVAL = 0.05

request_pool = ThreadPoolExecutor(max_workers=8,
                                  thread_name_prefix="rest_request")


class RestResponse(object):
    def __init__(self, status, content):
        self.status = status
        self.content = content

    def json(self):
        try:
            return json.loads(self.content)
        except ValueError as e:
            raise DeserializeError(str(e))

    def __repr__(self):
        return "RestResponse(%s, %s bytes)" % (self.status, len(self.content))


def check_status(response):
    """
    Success is one of CbServer.success_codes,
    anything else raises UnexpectedStatusCode with the body verbatim
    """
    if response.status not in CbServer.success_codes:
        raise UnexpectedStatusCode(response.status, response.content)
    return response


def read_response(session, method, url, deadline, ctrl_c, request_args):
    """
    Runs on a request_pool worker: connect, wait for the headers and read
    the body, checking ctrl_c and the deadline between chunks
    :return: status code, raw body
    """
    response = session.request(method, url,
                               timeout=max(deadline.remaining(), 0.001),
                               stream=True, **request_args)
    chunks = list()
    try:
        for chunk in response.iter_content(chunk_size=READ_CHUNK_SIZE):
            ctrl_c.check()
            deadline.check()
            chunks.append(chunk)
    finally:
        response.close()
    return response.status_code, b"".join(chunks)


def send_request(session, method, url, deadline, ctrl_c,
                 log=None, **request_args):
    """
    Perform a single HTTP call bounded by the deadline and the ctrl_c token.
    There are no retries: a failed attempt is raised to the caller.

    The call runs on a worker thread while this thread polls ctrl_c and the
    deadline, so a cancel also aborts a call still waiting for the server.
    An abandoned call has its session closed and finishes in the background
    within the remaining deadline.

    :param session: requests.Session to use
    :param deadline: common_lib.Deadline object
    :param ctrl_c: common_lib.CancellationToken
    :return: RestResponse (unclassified)
    """
    log = log or logger.get("rest_api")
    ctrl_c.check()
    deadline.check()
    future = request_pool.submit(read_response, session, method, url,
                                 deadline, ctrl_c, request_args)
    while True:
        done, _ = wait([future], timeout=min(REQUEST_POLL_INTERVAL,
                                             max(deadline.remaining(), 0)))
        if done:
            break
        try:
            ctrl_c.check()
            deadline.check()
        except TransportError as e:
            log.warning("Abandoning %s %s: %s" % (method, url, e.msg))
            future.cancel()
            session.close()
            raise

    try:
        status, body = future.result()
    except requests.exceptions.Timeout as e:
        raise TransportError("%s %s timed out: %s" % (method, url, e))
    except requests.exceptions.RequestException as e:
        raise TransportError("%s %s failed: %s" % (method, url, e))

    content = body.decode("utf-8", errors="replace")
    log.debug("%s %s returned %s: %s" % (method, url, status, content))
    return RestResponse(status, content)


class CBRestConnection(object):
    GET = "GET"
    POST = "POST"

    def __init__(self):
        """
        Contains the place-holders. Need to be initialized by the
        implementing *_api.py file / module
        """
        # Basic info about the cluster
        self.identifier = None
        self.host = None
        self.port = None
        self.username = None
        self.password = None
        self.tls = False
        self.timeouts = None

        # Valid URL endpoints for reusing
        self.base_url = None
        self.query_url = None
        self.fts_url = None
        self.cbas_url = None

        self.session = None
        self.log = logger.get("rest_api")

    @staticmethod
    def split_host(host_str):
        """
        :param host_str: 'host' or 'host:port'
        :return: host, port (None if not given)
        """
        if host_str.startswith("["):
            # IPv6 literal
            host, _, port = host_str[1:].partition("]")
            port = port.lstrip(":")
            return "[%s]" % host, int(port) if port else None
        if host_str.count(":") == 1:
            host, port = host_str.split(":")
            return host, int(port)
        return host_str, None

    def set_server_values(self, cluster):
        self.identifier = cluster.identifier
        self.host, self.port = self.split_host(cluster.hosts[0])
        self.username = cluster.username
        self.password = cluster.password
        self.tls = cluster.tls
        self.timeouts = cluster.timeouts

    def set_endpoint_urls(self, cluster):
        port = self.port
        query_port = CbServer.n1ql_port
        fts_port = CbServer.fts_port
        cbas_port = CbServer.cbas_port
        if self.tls:
            query_port = CbServer.ssl_n1ql_port
            fts_port = CbServer.ssl_fts_port
            cbas_port = CbServer.ssl_cbas_port
            port = port or CbServer.ssl_port
        else:
            port = port or CbServer.port

        generic_url = "http://{0}:{1}"
        if self.tls:
            generic_url = "https://{0}:{1}"

        self.port = port
        self.base_url = generic_url.format(self.host, port)
        self.query_url = generic_url.format(self.host, query_port)
        self.fts_url = generic_url.format(self.host, fts_port)
        self.cbas_url = generic_url.format(self.host, cbas_port)

    def create_headers(self, username=None, password=None,
                       content_type='application/x-www-form-urlencoded'):
        username = username or self.username
        password = password or self.password
        authorization = base64.b64encode(
            '{}:{}'.format(username, password).encode()).decode()
        return {'Content-Type': content_type,
                'Authorization': 'Basic %s' % authorization,
                'Accept': '*/*'}

    def get_headers_for_content_type_json(self):
        return self.create_headers(content_type='application/json')

    def request(self, api, method='GET', params=None, headers=None,
                timeout=None, ctrl_c=None):
        """
        :param api: Full URL to call
        :param method: HTTP method
        :param params: Query params for GET, body payload otherwise
        :param headers: Defaults to form-encoded basic auth headers
        :param timeout: Seconds until the deadline of this request.
                        Defaults to the cluster's management timeout
        :param ctrl_c: CancellationToken to honour
        :return: RestResponse with a success status code
        """
        if timeout is None:
            timeout = self.timeouts.management
        deadline = Deadline.after(timeout)
        ctrl_c = ctrl_c or CancellationToken()
        self.session = self.session or requests.Session()
        headers = headers or self.create_headers()

        request_args = {"headers": headers, "verify": False}
        if method.upper() == self.GET:
            if params:
                request_args["params"] = params
        elif params is not None:
            request_args["data"] = params

        self.log.info("%s %s" % (method, api))
        response = send_request(self.session, method, api, deadline, ctrl_c,
                                log=self.log, **request_args)
        return check_status(response)

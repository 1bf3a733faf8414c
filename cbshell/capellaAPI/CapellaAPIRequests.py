# -*- coding: utf-8 -*-
# Generic/Built-in
import json

import requests

from cbshell.capellaAPI.CapellaAPIAuth import CapellaAPIAuth
from cbshell.cb_server_rest_util.connection import check_status, send_request
from cbshell.common_lib import CancellationToken, Deadline
from cbshell.exceptions import GenericError, SerializeError
from cbshell.global_vars import logger


class CapellaAPIRequests(object):

    def __init__(self, url, secret, access):
        # handles http requests - GET, PUT to the Couchbase Cloud APIs
        if not access:
            raise GenericError("Missing Capella access key")
        if not secret:
            raise GenericError("Missing Capella secret key")
        self.API_BASE_URL = url.rstrip("/")
        self.SECRET = secret
        self.ACCESS = access

        self._log = logger.get("capella_api")

        # We will re-use the first session we setup to avoid
        # the overhead of creating new sessions for each request
        self.network_session = requests.Session()

    def _request(self, method, api_endpoint, timeout, ctrl_c, **request_args):
        """
        One attempt, bounded by a fresh deadline of `timeout` seconds
        :return: RestResponse with a success status code
        """
        self._log.info("%s %s" % (method, api_endpoint))
        deadline = Deadline.after(timeout)
        response = send_request(self.network_session, method,
                                self.API_BASE_URL + api_endpoint,
                                deadline, ctrl_c or CancellationToken(),
                                log=self._log,
                                auth=CapellaAPIAuth(self.SECRET, self.ACCESS),
                                verify=True, **request_args)
        return check_status(response)

    # Methods
    def capella_api_get(self, api_endpoint, timeout, ctrl_c=None,
                        params=None):
        return self._request("GET", api_endpoint, timeout, ctrl_c,
                             params=params)

    def capella_api_put(self, api_endpoint, request_body, timeout,
                        ctrl_c=None):
        try:
            payload = request_body if isinstance(request_body, str) \
                else json.dumps(request_body)
        except (TypeError, ValueError) as e:
            raise SerializeError(str(e))
        self._log.debug("Request body: %s" % payload)
        return self._request("PUT", api_endpoint, timeout, ctrl_c,
                             data=payload,
                             headers={"Content-Type": "application/json"})

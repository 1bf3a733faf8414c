class CbServer(object):
    port = 8091
    ssl_port = 18091
    n1ql_port = 8093
    ssl_n1ql_port = 18093
    fts_port = 8094
    ssl_fts_port = 18094
    cbas_port = 8095
    ssl_cbas_port = 18095

    # Status codes treated as a successful management response
    success_codes = (200, 201, 202)

    class Timeouts(object):
        # Seconds
        MANAGEMENT = 75
        QUERY = 75
        ANALYTICS = 75
        SEARCH = 75

    class Rest(object):
        BUCKETS = "/pools/default/buckets"
        INDEX_STATUS = "/indexStatus"
        QUERY_SERVICE = "/query/service"
        ANALYTICS_SERVICE = "/analytics/service"
        SEARCH_QUERY = "/api/index/{0}/query"

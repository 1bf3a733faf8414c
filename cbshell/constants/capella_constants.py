class Capella(object):
    default_url = "https://cloudapi.cloud.couchbase.com"

    class Environment(object):
        HOSTED = "hosted"
        VPC = "vpc"

    class Api(object):
        CLUSTERS = "/v3/clusters"
        BUCKETS = "/v2/clusters/{0}/buckets"

    class EnvVars(object):
        ACCESS_KEY = "CBSH_CAPELLA_ACCESS_KEY"
        SECRET_KEY = "CBSH_CAPELLA_SECRET_KEY"

"""
Header names used on the wire.

Request headers carry the caller's claim; response headers report the
verification status back to the caller.
"""

HEADER_PREFIX = "X-Trusted-App-"

# Request headers
HEADER_PROVIDER_ID = HEADER_PREFIX + "ProviderID"
HEADER_CERTIFICATE = HEADER_PREFIX + "Cert"
HEADER_SIGNATURE = HEADER_PREFIX + "Signature"

# Response headers
HEADER_STATUS = HEADER_PREFIX + "Status"
HEADER_ERROR_CODE = HEADER_PREFIX + "Error-Code"  # reserved
HEADER_ERROR_MESSAGE = HEADER_PREFIX + "Error-Message"  # reserved

STATUS_OK = "OK"
STATUS_ERROR = "Error"

# Set by proxies that rewrite the URL the caller actually signed
HEADER_REQUESTED_URI = "X-Requested-URI"

"""feedgate.security

Egress guard primitives.

- ssrf: pure IP classification
- dial: httpcore backends that resolve, classify and dial the checked IP
- redaction: keep tokens out of logs
"""

from feedgate.security.dial import AsyncSafeNetworkBackend, DialAttempt, SafeNetworkBackend
from feedgate.security.redaction import redact_payload, redact_secrets, redact_url
from feedgate.security.ssrf import AddressClass, classify_ip, is_non_public_ip, is_public_ip

__all__ = [
    "AddressClass",
    "AsyncSafeNetworkBackend",
    "DialAttempt",
    "SafeNetworkBackend",
    "classify_ip",
    "is_non_public_ip",
    "is_public_ip",
    "redact_payload",
    "redact_secrets",
    "redact_url",
]

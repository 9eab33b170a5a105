"""HTTP adapters - Implementations of TransportPort.

Available implementations:
- RetryingTransport: httpx-based transport with timeout, backoff,
  proxy routing and cancellation
"""

from .retrying_transport import RetryingTransport, classify_status, provider_detail

__all__ = ["RetryingTransport", "classify_status", "provider_detail"]

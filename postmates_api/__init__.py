"""
postmates-api — Unofficial client for the Postmates private web API.

Postmates keeps a shopper's session in cookies rather than a token, so this
package treats the ordering flow as a chain of stateless calls that pass a
cookie jar from step to step:

  core/     Cookie codec, HTTP client, error classifier, workflow state machine
  config/   Default settings and browser header profiles
  web/      Thin FastAPI app exposing one route per workflow step

Install with: pip install -e . (from the repository root)
"""

from .core import (
    CartSession,
    CartWorkflow,
    PostmatesClient,
    RemoteAPIError,
    Stage,
)

"""
Core package — The cookie-chained Postmates cart workflow.

Each module handles one concern:

  cookie_codec.py      Set-Cookie lines <-> cookie jar <-> cookie header, location encoding
  errors.py            Exception types and the non-2xx response classifier
  models.py            StepResult, LocationSelection, CatalogItem, CartItem
  postmates_client.py  One HTTP call per workflow step
  menu.py              Catalog items out of a store payload
  workflow.py          CartSession state machine (location -> search -> cart -> fee)
  orchestrator.py      Scripted end-to-end run used by run.py
"""

from .cookie_codec import (
    encode_location_for_cookie,
    jar_to_header_string,
    jar_to_lines,
    lines_to_jar,
    merge_jars,
    rewrite_domain,
)
from .errors import (
    LocationNotFoundError,
    MalformedCookieError,
    PostmatesError,
    RemoteAPIError,
    WorkflowError,
    WorkflowStateError,
    classify_response,
)
from .models import CartItem, CatalogItem, LocationSelection, StepResult
from .postmates_client import PostmatesClient, STEPS
from .menu import find_catalog_item, iter_catalog_items
from .workflow import CartSession, CartWorkflow, Stage
from .orchestrator import WorkflowOrchestrator

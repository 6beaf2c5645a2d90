"""
HTTP surface for the visit counter: the FastAPI app factory and the
Cloudflare header geolocation provider.
"""

from visit_counter.web.app import create_app, get_connection
from visit_counter.web.geo import visit_facts_from_headers

__all__ = ["create_app", "get_connection", "visit_facts_from_headers"]

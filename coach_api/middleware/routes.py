from typing import Any, Mapping

# Label for requests that matched no route (404s, probes, typos)
UNMATCHED_ROUTE = "unmatched"


def route_label(scope: Mapping[str, Any]) -> str:
    """Route template for a handled request, e.g. "/api/sessions/{session_id}".

    Read after the router ran; raw URL paths are never used so per-session
    ids do not become separate metric series.
    """
    route = scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ROUTE

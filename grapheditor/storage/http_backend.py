"""
HTTP Storage Backend.

Implements the GraphStore protocol against the graph server's REST API.
State-changing requests carry the CSRF token the server hands out at
/api/csrf; the token is fetched once and reused.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from grapheditor.storage.protocol import StorageError

logger = logging.getLogger(__name__)

DEFAULT_CSRF_HEADER = "X-CSRF-TOKEN"


class HttpGraphStore:
    """REST client for /graphs, /graphs/{g}/nodes and node-to-node edges."""

    def __init__(self, base_url: str, timeout: float = 10.0,
                 session: Optional[requests.Session] = None):
        """
        Initialize HttpGraphStore.

        Args:
            base_url: Server root, e.g. "http://localhost:8080"
            timeout: Per-request timeout in seconds
            session: Optional requests.Session (shared cookies, tests)
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._session = session or requests.Session()
        self._csrf_token: Optional[str] = None
        self._csrf_header = DEFAULT_CSRF_HEADER

    @property
    def backend_type(self) -> str:
        return "http"

    # --- Transport ---

    def _fetch_csrf_token(self) -> Optional[str]:
        if self._csrf_token:
            return self._csrf_token
        try:
            res = self._session.get(f"{self.base_url}/api/csrf", timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"CSRF token request failed: {e}")
            return None
        if not res.ok:
            logger.warning(f"CSRF token request returned {res.status_code}")
            return None
        try:
            data = res.json()
        except ValueError as e:
            logger.warning(f"CSRF token response is not JSON: {e}")
            return None
        if not isinstance(data, dict):
            logger.warning("CSRF token response is not an object")
            return None
        self._csrf_token = data.get("token")
        self._csrf_header = data.get("headerName") or DEFAULT_CSRF_HEADER
        return self._csrf_token

    def _headers(self, include_json: bool) -> Dict[str, str]:
        headers = {}
        if include_json:
            headers["Content-Type"] = "application/json"
        token = self._fetch_csrf_token()
        if token:
            headers[self._csrf_header] = token
        return headers

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None,
                 expect_json: bool = True) -> Any:
        url = f"{self.base_url}{path}"
        kwargs: Dict[str, Any] = {"timeout": self.timeout}
        if method != "GET":
            kwargs["headers"] = self._headers(include_json=payload is not None)
        if payload is not None:
            kwargs["json"] = payload
        try:
            res = self._session.request(method, url, **kwargs)
        except requests.RequestException as e:
            raise StorageError(f"{method} {path} failed: {e}") from e
        if not res.ok:
            raise StorageError(f"{method} {path} returned {res.status_code}")
        if not expect_json:
            return None
        try:
            return res.json()
        except ValueError as e:
            raise StorageError(f"{method} {path} returned invalid JSON") from e

    # --- Graph Operations ---

    def list_graphs(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/graphs")

    def create_graph(self, name: str) -> Dict[str, Any]:
        return self._request("POST", "/graphs", {"name": name})

    def delete_graph(self, graph_id: str) -> None:
        self._request("DELETE", f"/graphs/{graph_id}", expect_json=False)

    # --- Node Operations ---

    def list_nodes(self, graph_id: str) -> List[Dict[str, Any]]:
        return self._request("GET", f"/graphs/{graph_id}/nodes")

    def get_node_with_neighbors(self, graph_id: str, node_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/graphs/{graph_id}/nodes/{node_id}")

    def create_node(self, graph_id: str, name: str) -> Dict[str, Any]:
        return self._request("POST", f"/graphs/{graph_id}/nodes", {"name": name})

    def rename_node(self, graph_id: str, node_id: str, name: str) -> Dict[str, Any]:
        return self._request("PATCH", f"/graphs/{graph_id}/nodes/{node_id}", {"name": name})

    def delete_node(self, graph_id: str, node_id: str) -> None:
        self._request("DELETE", f"/graphs/{graph_id}/nodes/{node_id}", expect_json=False)

    # --- Edge Operations ---

    def create_edge(self, graph_id: str, source_id: str, target_id: str) -> None:
        self._request("POST", f"/graphs/{graph_id}/nodes/{source_id}/{target_id}", expect_json=False)

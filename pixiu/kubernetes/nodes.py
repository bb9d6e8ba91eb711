"""Reading cluster nodes and summarising them for display."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional, Protocol

from pixiu import log
from pixiu.errors import ClientNotFound

LABEL_NODE_ROLE = "node-role.kubernetes.io"
_ZERO_TIME = "0001-01-01 00:00:00"


class _NodeClient(Protocol):
    def get_node(self, name: str) -> Mapping[str, Any]: ...

    def list_nodes(self) -> list[Mapping[str, Any]]: ...


@dataclass
class NodeSummary:
    """The facts about a node shown in node listings."""

    name: str = ""
    status: str = "NotReady"
    roles: str = ""
    create_at: str = ""
    version: str = ""
    internal_ip: str = ""
    os_image: str = ""
    kernel_version: str = ""
    container_runtime: str = ""


def _format_time(dt: datetime) -> str:
    return (
        f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d}"
    )


def _creation_time(value: Any) -> str:
    if not value:
        return _ZERO_TIME
    if isinstance(value, datetime):
        return _format_time(value)
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return _format_time(datetime.fromisoformat(text))


def node_to_summary(node: Mapping[str, Any]) -> NodeSummary:
    """Summarise a node given in the cluster API's JSON shape."""
    metadata = node.get("metadata") or {}
    status_block = node.get("status") or {}
    node_info = status_block.get("nodeInfo") or {}

    roles = []
    for label in metadata.get("labels") or {}:
        if label.startswith(LABEL_NODE_ROLE):
            parts = label.split("/")
            if len(parts) == 2:
                roles.append(parts[-1])

    status = "NotReady"
    for condition in status_block.get("conditions") or []:
        if condition.get("type") == "Ready" and condition.get("status") == "True":
            status = "Ready"

    internal_ip = ""
    for address in status_block.get("addresses") or []:
        if address.get("type") == "InternalIP":
            internal_ip = address.get("address", "")

    return NodeSummary(
        name=metadata.get("name", ""),
        status=status,
        roles=",".join(roles),
        create_at=_creation_time(metadata.get("creationTimestamp")),
        version=node_info.get("kubeletVersion", ""),
        internal_ip=internal_ip,
        os_image=node_info.get("osImage", ""),
        kernel_version=node_info.get("kernelVersion", ""),
        container_runtime=node_info.get("containerRuntimeVersion", ""),
    )


class NodeService:
    """Node operations against the cluster registered as ``cloud``."""

    def __init__(self, client: Optional[_NodeClient], cloud: str) -> None:
        self.client = client
        self.cloud = cloud

    def _require_client(self) -> _NodeClient:
        if self.client is None:
            raise ClientNotFound()
        return self.client

    def get(self, name: str) -> Mapping[str, Any]:
        """Return the full node object called ``name``."""
        client = self._require_client()
        try:
            return client.get_node(name)
        except Exception as exc:
            log.logger.error("failed to get node: %s", exc)
            raise

    def list(self) -> list[NodeSummary]:
        """Return a summary of every node in the cluster."""
        client = self._require_client()
        try:
            nodes = client.list_nodes()
        except Exception as exc:
            log.logger.error("failed to list node: %s", exc)
            raise
        return [node_to_summary(node) for node in nodes]
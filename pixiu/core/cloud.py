"""Registration of Kubernetes clusters and access to their clients."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional, Union

from pixiu import cipher, log
from pixiu.clients import ClientRegistry
from pixiu.db.models import Cloud
from pixiu.kubernetes.nodes import NodeService

DEFAULT_CLOUD_TYPE = "标准"
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
_ZERO_TIME = "0001-01-01 00:00:00"

ClientBuilder = Callable[[bytes], Any]


@dataclass
class CloudSpec:
    """What is needed to register a cluster."""

    name: str = ""
    kube_config: Union[bytes, str] = b""
    cloud_type: str = ""


@dataclass
class CloudView:
    """A registered cluster as shown to users; the kubeconfig is never included."""

    id: int = 0
    name: str = ""
    status: int = 0
    cloud_type: str = ""
    kube_version: str = ""
    node_number: int = 0
    resources: str = ""
    description: str = ""
    gmt_create: str = _ZERO_TIME
    gmt_modified: str = _ZERO_TIME


@dataclass
class PageOptions:
    """Paging request; a page of 0 asks for every cluster."""

    page: int = 0
    limit: int = 0


def _format_time(dt: Optional[datetime]) -> str:
    if dt is None:
        return _ZERO_TIME
    text = (
        f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d}"
    )
    if dt.microsecond:
        text += "." + f"{dt.microsecond:06d}".rstrip("0")
    return text


def _to_view(obj: Cloud) -> CloudView:
    return CloudView(
        id=obj.id,
        name=obj.name,
        status=obj.status,
        cloud_type=obj.cloud_type,
        kube_version=obj.kube_version,
        node_number=obj.node_number,
        resources=obj.resources,
        description=obj.description,
        gmt_create=_format_time(obj.gmt_create),
        gmt_modified=_format_time(obj.gmt_modified),
    )


class CloudService:
    """Registers clusters, stores their encrypted kubeconfig and keeps their clients."""

    def __init__(
        self,
        factory: Any,
        clients: Optional[ClientRegistry] = None,
        client_builder: Optional[ClientBuilder] = None,
    ) -> None:
        self._factory = factory
        self._clients = clients if clients is not None else ClientRegistry()
        self._client_builder = client_builder

    @property
    def clients(self) -> ClientRegistry:
        return self._clients

    def _build_client(self, kube_config: bytes) -> Any:
        if self._client_builder is None:
            raise RuntimeError("no cluster client builder configured")
        return self._client_builder(kube_config)

    @staticmethod
    def _pre_create(obj: CloudSpec) -> None:
        if not obj.name:
            raise ValueError("invalid empty cloud name")
        if not obj.kube_config:
            raise ValueError("invalid empty kubeconfig data")
        if not obj.cloud_type:
            obj.cloud_type = DEFAULT_CLOUD_TYPE

    def create(self, obj: CloudSpec) -> None:
        """Connect to the cluster, record it and register its client."""
        try:
            self._pre_create(obj)
        except ValueError as exc:
            log.logger.error("failed to pre-check for %s created: %s", obj.name, exc)
            raise

        kube_config = obj.kube_config
        if isinstance(kube_config, str):
            kube_config = kube_config.encode("utf-8")
        encrypted = cipher.encrypt(kube_config)

        try:
            client = self._build_client(kube_config)
        except Exception as exc:
            log.logger.error("failed to create %s client: %s", obj.name, exc)
            raise

        try:
            nodes = list(client.list_nodes())
        except Exception as exc:
            log.logger.error("failed to connect to kubernetes cluster: %s", exc)
            raise
        if not nodes:
            log.logger.error("failed to connect to kubernetes cluster: no nodes found")
            raise RuntimeError("failed to connect to kubernetes cluster: no nodes found")

        # The first node's kubelet version stands for the cluster version.
        node_info = (nodes[0].get("status") or {}).get("nodeInfo") or {}
        kube_version = node_info.get("kubeletVersion", "")

        try:
            self._factory.cloud().create(
                Cloud(
                    name=obj.name,
                    cloud_type=obj.cloud_type,
                    kube_version=kube_version,
                    kube_config=encrypted,
                    node_number=len(nodes),
                    resources="",
                )
            )
        except Exception as exc:
            log.logger.error("failed to create %s cloud: %s", obj.name, exc)
            raise

        self._clients.add(obj.name, client)

    def update(self, obj: CloudSpec) -> None:
        """Clusters cannot be edited; this accepts the request and changes nothing."""
        return None

    def delete(self, cid: int) -> None:
        """Remove cluster ``cid`` and forget its client."""
        repo = self._factory.cloud()
        try:
            obj = repo.get(cid)
            repo.delete(cid)
        except Exception as exc:
            log.logger.error("failed to delete %s cloud: %s", cid, exc)
            raise
        self._clients.delete(obj.name)

    def get(self, cid: int) -> CloudView:
        """Return cluster ``cid``."""
        try:
            obj = self._factory.cloud().get(cid)
        except Exception as exc:
            log.logger.error("failed to get %d cloud: %s", cid, exc)
            raise
        return _to_view(obj)

    def list(
        self, page_options: Optional[PageOptions] = None
    ) -> Union[list[CloudView], dict[str, Any]]:
        """Return every cluster, or one page as ``{"data": [...], "total": n}``."""
        if page_options is not None and page_options.page != 0:
            page = page_options.page if page_options.page > 0 else DEFAULT_PAGE
            limit = page_options.limit if page_options.limit > 0 else DEFAULT_PAGE_SIZE
            try:
                objs, total = self._factory.cloud().page_list(page, limit)
            except Exception as exc:
                log.logger.error(
                    "failed to page %d limit %d list clouds: %s", page, limit, exc
                )
                raise
            return {"data": [_to_view(obj) for obj in objs], "total": total}

        try:
            objs = self._factory.cloud().list()
        except Exception as exc:
            log.logger.error("failed to list clouds: %s", exc)
            raise
        return [_to_view(obj) for obj in objs]

    def load(self) -> None:
        """Rebuild the client registry from the clusters already stored."""
        for key in list(self._clients):
            self._clients.delete(key)

        try:
            objs = self._factory.cloud().list()
        except Exception as exc:
            log.logger.error("failed to list exist clouds: %s", exc)
            raise
        for obj in objs:
            kube_config = cipher.decrypt(obj.kube_config)
            try:
                client = self._build_client(kube_config)
            except Exception as exc:
                log.logger.error("failed to create %s client: %s", obj.name, exc)
                raise
            self._clients.add(obj.name, client)

    def nodes(self, cloud: str) -> NodeService:
        """Return node operations for the cluster registered as ``cloud``."""
        return NodeService(self._clients.get(cloud), cloud)
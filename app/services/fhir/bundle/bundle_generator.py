from datetime import datetime, timezone
from typing import Any, Dict, List
from uuid import uuid4

from app.models.fhir.bundle import Bundle, Link, Meta
from app.models.fhir.types import BundleType
from app.models.search.dto import SearchResult
from app.services.fhir.utils import get_tenant_base_url, make_url


class BundleGenerator:
    @staticmethod
    def generate_bundle(
        server_url: str,
        tenant_id: str,
        query_params: Dict[str, Any],
        result: SearchResult,
        bundle_type: BundleType,
        resource_type: str,
        id: str | None = None,
    ) -> Bundle:
        """
        Wraps a search or history result into a Bundle addressed at the resource type, and
        at the instance when an id is given.
        """
        links: List[Link] = [
            Link(
                relation="self",
                url=BundleGenerator.create_link_with_query(
                    server_url, tenant_id, bundle_type, resource_type, id, query_params
                ),
            )
        ]
        if result.previous_result_url is not None:
            links.append(Link(relation="previous", url=result.previous_result_url))
        if result.next_result_url is not None:
            links.append(Link(relation="next", url=result.next_result_url))

        return Bundle(
            id=str(uuid4()),
            meta=Meta(lastUpdated=datetime.now(timezone.utc).isoformat()),
            type=bundle_type,
            total=result.number_of_results,
            link=links,
            entry=result.entries,
        )

    @staticmethod
    def create_link_with_query(
        server_url: str,
        tenant_id: str,
        bundle_type: BundleType,
        resource_type: str,
        id: str | None,
        query_params: Dict[str, Any],
    ) -> str:
        segments = [resource_type]
        if id is not None:
            segments.append(id)
        if bundle_type == "history":
            segments.append("_history")

        return make_url(
            get_tenant_base_url(server_url, tenant_id),
            *segments,
            query_params=query_params,
        )

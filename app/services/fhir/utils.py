from typing import Any, Dict, Mapping

from yarl import URL


def get_tenant_base_url(server_url: str, tenant_id: str) -> URL:
    """
    Returns the base url of a tenant (e.g. "http://server/fhir" -> "http://server/fhir/tenant/t1")
    """
    return URL(server_url) / "tenant" / tenant_id


def make_url(
    base_url: URL,
    *segments: str,
    query_params: Mapping[str, Any] | None = None,
) -> str:
    """
    Appends path segments and query parameters to a base url
    """
    url = base_url
    for segment in segments:
        url = url / segment

    if query_params:
        url = url.with_query(normalize_query_params(query_params))

    return str(url)


def normalize_query_params(query_params: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Converts query parameter values to something yarl can encode, repeated parameters stay lists
    """
    normalized: Dict[str, Any] = {}
    for key, value in query_params.items():
        if isinstance(value, (list, tuple)):
            normalized[key] = [str(v) for v in value]
        else:
            normalized[key] = str(value)

    return normalized

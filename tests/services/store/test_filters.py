from typing import Any, Dict, List

import pytest

from app.exceptions import InvalidSearchParameterError
from app.models.fhir.types import SearchFilter
from app.services.store.filters import get_values, matches_search_filters
from app.services.store.paging import Page, get_int_param
from app.services.fhir.utils import get_tenant_base_url

resource: Dict[str, Any] = {
    "resourceType": "Patient",
    "id": "123",
    "active": True,
    "generalPractitioner": [{"reference": "Practitioner/1"}, {"reference": "Practitioner/2"}],
    "name": [
        {"family": "Jansen", "given": ["Anna", "Maria"]},
        {"family": "de Vries"},
    ],
}


def test_get_values_should_flatten_lists() -> None:
    assert get_values(resource, "id") == ["123"]
    assert get_values(resource, "name.family") == ["Jansen", "de Vries"]
    assert get_values(resource, "name.given") == ["Anna", "Maria"]
    assert get_values(resource, "gender") == []
    assert get_values(resource, "id.value") == []


@pytest.mark.parametrize(
    "search_filters, expected",
    [
        ([], True),
        ([SearchFilter(key="active", value=["true"])], True),
        ([SearchFilter(key="active", value=["false"])], False),
        ([SearchFilter(key="name.family", value=["Smith", "Jansen"])], True),
        ([SearchFilter(key="id", value=["123"], comparison_operator="!=")], False),
        ([SearchFilter(key="id", value=["456"], comparison_operator="!=")], True),
        (
            [
                SearchFilter(key="active", value=["true"]),
                SearchFilter(key="id", value=["456"]),
            ],
            False,
        ),
        (
            [
                SearchFilter(key="generalPractitioner.reference", value=["Practitioner/3"], logical_operator="OR"),
                SearchFilter(key="generalPractitioner.reference", value=["Practitioner/2"], logical_operator="OR"),
            ],
            True,
        ),
        (
            [
                SearchFilter(key="active", value=["true"]),
                SearchFilter(key="id", value=["456"], logical_operator="OR"),
            ],
            False,
        ),
    ],
)
def test_matches_search_filters(search_filters: List[SearchFilter], expected: bool) -> None:
    assert matches_search_filters(resource, search_filters) is expected


def test_get_int_param() -> None:
    assert get_int_param({}, "_count", 20) == 20
    assert get_int_param({"_count": "5"}, "_count", 20) == 5
    assert get_int_param({"_count": ["5"]}, "_count", 20) == 5

    with pytest.raises(InvalidSearchParameterError):
        get_int_param({"_count": "five"}, "_count", 20)


def test_page_with_zero_count_should_not_link() -> None:
    page = Page({"_count": "0"}, 20, 100)
    base_url = get_tenant_base_url("http://testserver/fhir", "tenantA")

    assert page.slice() == slice(0, 0)
    assert page.next_url(base_url, 10, "Patient") is None
    assert page.previous_url(base_url, "Patient") is None

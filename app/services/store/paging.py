from typing import Any, Dict, Mapping

from yarl import URL

from app.exceptions import InvalidSearchParameterError
from app.services.fhir.utils import make_url

COUNT_PARAM = "_count"
OFFSET_PARAM = "_getpagesoffset"


def get_single_value(query_params: Mapping[str, Any], key: str) -> str | None:
    value = query_params.get(key)
    if isinstance(value, (list, tuple)):
        if len(value) != 1:
            raise InvalidSearchParameterError(f"Parameter {key} may only be given once")
        value = value[0]

    return None if value is None else str(value)


def get_int_param(query_params: Mapping[str, Any], key: str, default: int) -> int:
    value = get_single_value(query_params, key)
    if value is None:
        return default

    try:
        number = int(value)
    except ValueError:
        raise InvalidSearchParameterError(f"Parameter {key} must be an integer, got '{value}'")

    if number < 0:
        raise InvalidSearchParameterError(f"Parameter {key} must not be negative")

    return number


class Page:
    """
    Offset based paging over an in-memory result list
    """

    def __init__(self, query_params: Mapping[str, Any], default_count: int, max_count: int) -> None:
        self.count = min(get_int_param(query_params, COUNT_PARAM, default_count), max_count)
        self.offset = get_int_param(query_params, OFFSET_PARAM, 0)
        self.__query_params = query_params

    def slice(self) -> slice:
        return slice(self.offset, self.offset + self.count)

    def previous_url(self, base_url: URL, *segments: str) -> str | None:
        if self.offset == 0 or self.count == 0:
            return None

        return self.__make_url(base_url, segments, max(self.offset - self.count, 0))

    def next_url(self, base_url: URL, total: int, *segments: str) -> str | None:
        if self.count == 0 or self.offset + self.count >= total:
            return None

        return self.__make_url(base_url, segments, self.offset + self.count)

    def __make_url(self, base_url: URL, segments: tuple[str, ...], offset: int) -> str:
        params: Dict[str, Any] = dict(self.__query_params)
        params[COUNT_PARAM] = self.count
        params[OFFSET_PARAM] = offset

        return make_url(base_url, *segments, query_params=params)

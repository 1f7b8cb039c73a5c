from typing import Any, Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field, AliasChoices


class Meta(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    versionId: str | None = Field(alias="versionId", default=None)
    lastUpdated: str | None = Field(alias="lastUpdated", default=None)


class Link(BaseModel):
    model_config = ConfigDict(extra="allow")

    relation: str = Field(alias="relation")
    url: str = Field(alias="url")


class EntrySearch(BaseModel):
    model_config = ConfigDict(extra="allow")

    mode: Literal["match", "include", "outcome"] = Field(alias="mode", default="match")


class EntryRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    method: str = Field(alias="method")
    url: str = Field(alias="url")


class EntryResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    status: str = Field(alias="status")
    etag: str | None = Field(alias="etag", default=None)
    lastModified: str | None = Field(alias="lastModified", default=None)


class Entry(BaseModel):
    model_config = ConfigDict(extra="allow")

    fullUrl: str | None = Field(alias="fullUrl", default=None)
    resource: Dict[str, Any] | None = Field(alias="resource", default=None)
    search: EntrySearch | None = Field(alias="search", default=None)
    request: EntryRequest | None = Field(alias="request", default=None)
    response: EntryResponse | None = Field(alias="response", default=None)


class Bundle(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    resource_type: Literal["Bundle"] = Field(
        alias="resourceType",
        validation_alias=AliasChoices("resourceType", "resource_type"),
        default="Bundle",
    )
    id: str = Field(alias="id")
    meta: Meta | None = Field(alias="meta", default=None)
    type: str = Field(alias="type")
    total: int | None = Field(alias="total", default=None)
    link: List[Link] = Field(alias="link", default=[])
    entry: List[Entry] = Field(alias="entry", default=[])

    def to_fhir(self) -> Dict[str, Any]:
        """
        Returns the bundle as FHIR JSON
        """
        return self.model_dump(by_alias=True, exclude_none=True)

from typing import List, Literal
from enum import Enum
from pydantic import BaseModel, Field

SearchOperation = Literal["search-type", "history-type", "history-instance"]

BundleType = Literal["searchset", "history"]

ComparisonOperator = Literal["==", "!="]

LogicalOperator = Literal["AND", "OR"]


class FhirVersion(str, Enum):
    STU3 = "3.0.1"
    R4 = "4.0.1"


class SearchFilter(BaseModel):
    """
    A constraint on the resources a caller may see, as produced by an Authorization service.
    """

    key: str
    value: List[str]
    comparison_operator: ComparisonOperator = Field(default="==")
    logical_operator: LogicalOperator = Field(default="AND")

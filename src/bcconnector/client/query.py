"""
OData query options

Builds the system query options Business Central understands.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence


def quote_literal(value: str) -> str:
    """Quote a string literal for use inside $filter (doubles embedded quotes)"""
    return "'" + value.replace("'", "''") + "'"


@dataclass(frozen=True)
class ODataQuery:
    """OData system query options for a collection GET"""

    filter: Optional[str] = None
    select: Sequence[str] = field(default_factory=tuple)
    orderby: Optional[str] = None
    top: Optional[int] = None
    skip: Optional[int] = None
    expand: Sequence[str] = field(default_factory=tuple)
    count: bool = False

    def __post_init__(self) -> None:
        if self.top is not None and self.top < 0:
            raise ValueError("top must be non-negative")
        if self.skip is not None and self.skip < 0:
            raise ValueError("skip must be non-negative")

    def to_params(self) -> Dict[str, str]:
        params: Dict[str, str] = {}
        if self.filter:
            params["$filter"] = self.filter
        if self.select:
            params["$select"] = ",".join(self.select)
        if self.orderby:
            params["$orderby"] = self.orderby
        if self.top is not None:
            params["$top"] = str(self.top)
        if self.skip is not None:
            params["$skip"] = str(self.skip)
        if self.expand:
            params["$expand"] = ",".join(self.expand)
        if self.count:
            params["$count"] = "true"
        return params

    @classmethod
    def search(cls, field_name: str, text: str, top: Optional[int] = None) -> "ODataQuery":
        """contains() filter on one field, as used by search-as-you-type lists"""
        return cls(filter=f"contains({field_name},{quote_literal(text)})", top=top)

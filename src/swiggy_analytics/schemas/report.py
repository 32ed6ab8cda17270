from typing import Any, Dict, List

from pydantic import BaseModel

from swiggy_analytics.analytics import Result


class ReportInfo(BaseModel):
    slug: str
    title: str


class ReportResult(BaseModel):
    name: str
    title: str
    columns: List[str]
    rows: List[Dict[str, Any]] = []
    row_count: int

    @classmethod
    def from_result(cls, name: str, title: str, result: Result):
        rows = result.to_dicts()
        return cls(
            name=name,
            title=title,
            columns=list(result.columns),
            rows=rows,
            row_count=len(rows),
        )

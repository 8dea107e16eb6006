from __future__ import annotations

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from datagrid.state import DEFAULT_PAGE_SIZE


class SortKeyModel(BaseModel):
    column_id: str
    direction: Literal["asc", "desc"] = "asc"


class ViewStateModel(BaseModel):
    filters: Dict[str, Union[str, List[Optional[float]]]] = Field(default_factory=dict)
    sort: List[SortKeyModel] = Field(default_factory=list)
    page_index: int = 0
    page_size: int = DEFAULT_PAGE_SIZE
    column_visibility: Dict[str, bool] = Field(default_factory=dict)
    global_filter: str = ""


class ColumnModel(BaseModel):
    id: str
    header: str
    kind: Literal["text", "numeric"]
    fuzzy: bool
    filterable: bool
    sortable: bool
    visible: bool
    facet_scope: Literal["pre_filter", "post_filter"]


class MetaColumnsResponse(BaseModel):
    columns: List[ColumnModel]
    default_state: ViewStateModel
    page_size_options: List[int]


class PageWindowResponse(BaseModel):
    window: List[int]
    ellipsis: int

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class SearchOptions(BaseModel):
    """Filters accepted by ``DocumentTable.search``.

    - patterns:  every term must appear in the content (AND)
    - keywords:  every term must appear in content, restpath or package (AND)
    - packages:  any of the packages (OR)
    - paths:     every term must appear in the absolute path (AND)
    - restpaths: every term must appear in the restpath (AND)
    - suffixes:  any of the suffixes (OR)
    - offset / limit: window applied after sorting (limit None = all)
    """

    model_config = ConfigDict(extra="forbid")

    patterns: List[str] = []
    keywords: List[str] = []
    packages: List[str] = []
    paths: List[str] = []
    restpaths: List[str] = []
    suffixes: List[str] = []
    offset: int = Field(default=0, ge=0)
    limit: Optional[int] = Field(default=None, ge=0)

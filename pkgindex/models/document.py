from dataclasses import dataclass, astuple
from enum import Enum
from typing import Optional


class AddResult(str, Enum):
    """Outcome of ingesting one file into the document table."""

    NEW_FILE = "newfile"
    UPDATED = "update"
    UNCHANGED = "unchanged"


@dataclass
class Document:
    path: str
    package: str
    restpath: str
    content: str
    timestamp: float
    suffix: str = ""
    id: Optional[int] = None

    @property
    def shortpath(self) -> str:
        if not self.restpath:
            return self.package
        return f"{self.package}/{self.restpath}"

    def fields(self) -> tuple:
        """Row values without the storage id, in column order."""
        return astuple(self)[:-1]

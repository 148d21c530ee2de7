"""Pydantic base model."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class FrozenBaseModel(BaseModel):
    """Pydantic frozen base model."""

    model_config = ConfigDict(frozen=True, strict=True)


class Occurrence(FrozenBaseModel):
    """One located match of the search pattern."""

    file: Path = Field(description="Absolute path of the file containing the match.")
    line: int = Field(ge=1, description="1-based line number within the file.")
    offset: int = Field(ge=0, description="0-based character offset of the match within the line.")

    def __str__(self) -> str:
        """Render as ``file: line:offset``."""
        return f"{self.file}: {self.line}:{self.offset}"


class SearchConfig(FrozenBaseModel):
    """Validated search input."""

    pattern: str
    root: Path
    search_hidden: bool = False

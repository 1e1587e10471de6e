from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Manifest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    main: str
    types: Optional[str] = None
    dependencies: Optional[Dict[str, str]] = None
    dev_dependencies: Dict[str, str] = Field(default_factory=dict, alias="devDependencies")

    @field_validator("dev_dependencies", mode="before")
    @classmethod
    def _null_dev_dependencies(cls, value: object) -> object:
        return {} if value is None else value

    def dependency_names(self) -> List[str]:
        return [*(self.dependencies or {}), *self.dev_dependencies]


class WorkspaceEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    location: str


class BuildReference(BaseModel):
    model_config = ConfigDict(extra="ignore")

    path: str


class BuildConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    references: List[BuildReference] = []

    def reference_paths(self) -> List[str]:
        return [reference.path for reference in self.references]

"""
Pydantic models for npm registry metadata and decoded package contents.

This module defines the values that flow through the pipeline:
- Registry presets and the parsed package specifier
- Package metadata as returned by the registry (``dist-tags`` + ``versions``)
- Decoded tarball entries and the transient tar header record
- The summary shown by package cards

All values are request-scoped; nothing here is cached between calls.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, NamedTuple, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Registry presets
# ---------------------------------------------------------------------------


class Registry(str, Enum):
    """Named registry presets."""

    NPM = "npm"
    BLUE = "blue"


REGISTRY_URLS: Dict[str, str] = {
    Registry.NPM.value: "https://registry.npmjs.org",
    Registry.BLUE.value: "http://npm.m2.blue.cdtapps.com",
}

DEFAULT_REGISTRY = Registry.BLUE


# ---------------------------------------------------------------------------
# Package specifier
# ---------------------------------------------------------------------------


class PackageSpecifier(BaseModel):
    """
    Structured form of ``name``, ``name@version``, ``@scope/name`` or
    ``@scope/name@version``.

    ``scope`` keeps its leading ``@`` but not the separating ``/``.
    """

    model_config = ConfigDict(frozen=True)

    scope: Optional[str] = None
    name: str = Field(min_length=1)
    version: str = "latest"

    @property
    def full_name(self) -> str:
        """Registry name, e.g. ``@scope/name`` or ``name``."""
        if self.scope:
            return f"{self.scope}/{self.name}"
        return self.name


# ---------------------------------------------------------------------------
# Registry metadata
# ---------------------------------------------------------------------------


class DistInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    tarball: Optional[str] = None

    @field_validator("tarball", mode="before")
    @classmethod
    def _url_or_none(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None


class VersionRecord(BaseModel):
    """A single entry of the registry ``versions`` mapping."""

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None
    readme: Optional[str] = None
    author: Optional[Union[str, Dict[str, Any]]] = None
    dist: Optional[DistInfo] = None

    # Malformed values in any version are dropped rather than rejected.
    @field_validator("name", "version", "description", "readme", mode="before")
    @classmethod
    def _text_or_none(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @field_validator("author", mode="before")
    @classmethod
    def _author_or_none(cls, value: Any) -> Optional[Union[str, Dict[str, Any]]]:
        return value if isinstance(value, (str, dict)) else None

    @field_validator("dist", mode="before")
    @classmethod
    def _dist_or_none(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None

    @property
    def tarball(self) -> Optional[str]:
        return self.dist.tarball if self.dist else None


class DistTags(BaseModel):
    model_config = ConfigDict(extra="ignore")

    latest: str


class PackageMetadata(BaseModel):
    """
    Package document served at ``GET {registry}/{encodedName}``.

    Only the fields the pipeline needs are modelled; everything else the
    registry returns is ignored.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: Optional[str] = None
    dist_tags: DistTags = Field(alias="dist-tags")
    versions: Dict[str, VersionRecord] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Tarball contents
# ---------------------------------------------------------------------------


class TarHeader(NamedTuple):
    """Fields read from one 512-byte ustar header block."""

    file_name: str
    file_size: int


class PackageFile(BaseModel):
    """A decoded archive member with the npm ``package/`` prefix removed."""

    model_config = ConfigDict(frozen=True)

    path: str
    content: str


class PackageSummary(BaseModel):
    """The fields a package card displays for one resolved version."""

    name: str = ""
    version: str = ""
    description: str = ""
    author: str = ""
    readme: str = ""

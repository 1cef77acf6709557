"""Configuration management for Doclink."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field

DEFAULT_SUMMARY_TAGS = ["resume", "summary"]


class ResolverConfig(BaseModel):
    """Names and policies used by the resolvers and the classifier."""

    # Reference resolution
    implicit_namespace: str = Field(default="java.lang")
    sort_ambiguous_candidates: bool = Field(default=True)

    # Documentation tags
    summary_tags: list[str] = Field(default_factory=lambda: DEFAULT_SUMMARY_TAGS.copy())
    exclude_tag: str = Field(default="undocumented")
    constructor_tag: str = Field(default="constructor")
    deprecated_tag: str = Field(default="deprecated")

    # Well-known declarations
    deprecated_annotation: str = Field(default="java.lang.Deprecated")
    enum_base: str = Field(default="java.lang.Enum")
    string_type: str = Field(default="java.lang.String")

    def implicit(self, name: str) -> str:
        """Qualify a name with the implicit namespace."""
        return f"{self.implicit_namespace}.{name}"

    @classmethod
    def from_env(cls) -> ResolverConfig:
        """Load configuration from ``DOCLINK_*`` environment variables."""

        def _parse_bool(value: str | None, fallback: bool) -> bool:
            if value is None:
                return fallback
            return value.strip().lower() in ("1", "true", "yes", "on")

        summary_tags = DEFAULT_SUMMARY_TAGS.copy()
        tags_env = os.getenv("DOCLINK_SUMMARY_TAGS")
        if tags_env:
            summary_tags = [t.strip() for t in tags_env.split(",") if t.strip()]

        return cls(
            implicit_namespace=os.getenv("DOCLINK_IMPLICIT_NAMESPACE", "java.lang"),
            sort_ambiguous_candidates=_parse_bool(
                os.getenv("DOCLINK_SORT_AMBIGUOUS"), True
            ),
            summary_tags=summary_tags,
            exclude_tag=os.getenv("DOCLINK_EXCLUDE_TAG", "undocumented"),
            constructor_tag=os.getenv("DOCLINK_CONSTRUCTOR_TAG", "constructor"),
            deprecated_tag=os.getenv("DOCLINK_DEPRECATED_TAG", "deprecated"),
            deprecated_annotation=os.getenv(
                "DOCLINK_DEPRECATED_ANNOTATION", "java.lang.Deprecated"
            ),
            enum_base=os.getenv("DOCLINK_ENUM_BASE", "java.lang.Enum"),
            string_type=os.getenv("DOCLINK_STRING_TYPE", "java.lang.String"),
        )

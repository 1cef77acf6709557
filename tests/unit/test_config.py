"""Unit tests for ResolverConfig."""

import pytest

from doclink.config import DEFAULT_SUMMARY_TAGS, ResolverConfig


class TestResolverConfig:
    """Tests for defaults and environment loading."""

    def test_defaults(self) -> None:
        config = ResolverConfig()
        assert config.implicit_namespace == "java.lang"
        assert config.sort_ambiguous_candidates
        assert config.summary_tags == DEFAULT_SUMMARY_TAGS
        assert config.implicit("String") == "java.lang.String"

    def test_summary_tags_not_shared(self) -> None:
        ResolverConfig().summary_tags.append("extra")
        assert ResolverConfig().summary_tags == DEFAULT_SUMMARY_TAGS

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DOCLINK_IMPLICIT_NAMESPACE", "kotlin")
        monkeypatch.setenv("DOCLINK_SORT_AMBIGUOUS", "no")
        monkeypatch.setenv("DOCLINK_SUMMARY_TAGS", "brief, ,short")
        monkeypatch.setenv("DOCLINK_EXCLUDE_TAG", "hidden")

        config = ResolverConfig.from_env()
        assert config.implicit_namespace == "kotlin"
        assert not config.sort_ambiguous_candidates
        assert config.summary_tags == ["brief", "short"]
        assert config.exclude_tag == "hidden"
        assert config.constructor_tag == "constructor"

    def test_from_env_declaration_names(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DOCLINK_DEPRECATED_TAG", "obsolete")
        monkeypatch.setenv("DOCLINK_DEPRECATED_ANNOTATION", "kotlin.Deprecated")
        monkeypatch.setenv("DOCLINK_ENUM_BASE", "kotlin.Enum")
        monkeypatch.setenv("DOCLINK_STRING_TYPE", "kotlin.String")

        config = ResolverConfig.from_env()
        assert config.deprecated_tag == "obsolete"
        assert config.deprecated_annotation == "kotlin.Deprecated"
        assert config.enum_base == "kotlin.Enum"
        assert config.string_type == "kotlin.String"

    def test_from_env_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in (
            "DOCLINK_IMPLICIT_NAMESPACE",
            "DOCLINK_SORT_AMBIGUOUS",
            "DOCLINK_SUMMARY_TAGS",
            "DOCLINK_EXCLUDE_TAG",
            "DOCLINK_CONSTRUCTOR_TAG",
            "DOCLINK_DEPRECATED_ANNOTATION",
            "DOCLINK_DEPRECATED_TAG",
            "DOCLINK_ENUM_BASE",
            "DOCLINK_STRING_TYPE",
        ):
            monkeypatch.delenv(name, raising=False)
        assert ResolverConfig.from_env() == ResolverConfig()

    @pytest.mark.parametrize("value", ["1", "true", "YES", " on "])
    def test_truthy_values(self, monkeypatch: pytest.MonkeyPatch, value: str) -> None:
        monkeypatch.setenv("DOCLINK_SORT_AMBIGUOUS", value)
        assert ResolverConfig.from_env().sort_ambiguous_candidates

"""Tests for codegrab.config."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from codegrab import settings
from codegrab.config import ScanConfig, load_config, load_profile, resolve_config
from codegrab.errors import InvalidConfigError

PROFILE = """\
default:
  max_blocks: 20
  min_code_length: 15
domains:
  example.com:
    exclude_selectors: ["nav"]
  docs.example.com:
    selectors: ["div.highlight pre"]
    max_blocks: 5
"""


class TestScanConfig:
    def test_defaults(self):
        cfg = ScanConfig()
        assert cfg.min_code_length == 10
        assert cfg.max_blocks == 50
        assert cfg.language_threshold == 0.4
        assert cfg.batch_threshold == 0.3
        assert cfg.batch_size == 50
        assert cfg.delay_ms == 10
        assert cfg.max_processing_time_ms == 10_000
        assert cfg.selectors == settings.SELECTORS
        assert cfg.custom_selectors == ()
        assert cfg.skip_domains == ()
        assert cfg.trust_class_hints is False

    def test_camel_case_aliases(self):
        cfg = resolve_config({"maxBlocks": 3, "minCodeLength": 4, "excludeSelectors": [".ads"]})
        assert cfg.max_blocks == 3
        assert cfg.min_code_length == 4
        assert cfg.exclude_selectors == (".ads",)

    def test_frozen(self):
        with pytest.raises(ValidationError):
            ScanConfig().max_blocks = 1

    def test_blank_selectors_dropped(self):
        cfg = resolve_config({"selectors": ["pre", "  ", "", " code "]})
        assert cfg.selectors == ("pre", "code")

    def test_with_overrides_ignores_none(self):
        cfg = ScanConfig().with_overrides(max_blocks=7, min_code_length=None)
        assert cfg.max_blocks == 7
        assert cfg.min_code_length == 10

    def test_custom_selectors_from_comma_string(self):
        cfg = resolve_config({"customSelectors": " div.snippet , ,.listing code"})
        assert cfg.custom_selectors == ("div.snippet", ".listing code")
        assert cfg.all_selectors == settings.SELECTORS + cfg.custom_selectors

    def test_skip_domains(self):
        cfg = resolve_config({"excludedDomains": [" Intranet.Example.com ", ""]})
        assert cfg.skip_domains == ("intranet.example.com",)
        assert cfg.skips_host("intranet.example.com")
        assert cfg.skips_host("wiki.intranet.example.com")
        assert not cfg.skips_host("example.com")
        assert not cfg.skips_host("")

    def test_with_overrides_validates(self):
        with pytest.raises(InvalidConfigError):
            ScanConfig().with_overrides(batch_size=0)


class TestInvalidConfig:
    @pytest.mark.parametrize(
        "bad",
        [
            {"max_blocks": -1},
            {"maxBlocks": -5},
            {"min_code_length": -1},
            {"batch_size": 0},
            {"language_threshold": 1.5},
            {"batch_threshold": -0.1},
            {"max_processing_time_ms": 0},
            {"selectors": "pre code"},
            {"skip_domains": "example.com"},
            {"unknown_key": True},
        ],
    )
    def test_rejected(self, bad):
        with pytest.raises(InvalidConfigError, match="Invalid scan config"):
            resolve_config(bad)

    def test_not_a_mapping(self):
        with pytest.raises(InvalidConfigError):
            resolve_config(["max_blocks", 3])

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            resolve_config({"max_blocks": -1})


class TestProfiles:
    def test_default_only_without_url(self, tmp_path):
        path = tmp_path / "profile.yaml"
        path.write_text(PROFILE, encoding="utf-8")
        assert load_profile(path) == {"max_blocks": 20, "min_code_length": 15}

    def test_longest_domain_match(self, tmp_path):
        path = tmp_path / "profile.yaml"
        path.write_text(PROFILE, encoding="utf-8")
        cfg = load_config(path, "https://docs.example.com/guide")
        assert cfg.selectors == ("div.highlight pre",)
        assert cfg.max_blocks == 5
        assert cfg.min_code_length == 15

    def test_parent_domain_applies_to_subdomain(self, tmp_path):
        path = tmp_path / "profile.yaml"
        path.write_text(PROFILE, encoding="utf-8")
        cfg = load_config(path, "https://blog.example.com/post")
        assert cfg.exclude_selectors == ("nav",)
        assert cfg.max_blocks == 20

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidConfigError):
            load_profile(tmp_path / "missing.yaml")

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(InvalidConfigError):
            load_profile(path)

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("default: [unclosed\n", encoding="utf-8")
        with pytest.raises(InvalidConfigError):
            load_profile(path)

    def test_aliases_normalized(self, tmp_path):
        path = tmp_path / "profile.yaml"
        path.write_text(
            "default:\n  maxBlocks: 9\ndomains:\n  example.com:\n    excludedDomains: [ads.example.com]\n",
            encoding="utf-8",
        )
        assert load_profile(path, "https://example.com:8080/a") == {
            "max_blocks": 9, "skip_domains": ["ads.example.com"],
        }

    def test_unknown_key_rejected_in_unmatched_domain(self, tmp_path):
        path = tmp_path / "profile.yaml"
        path.write_text(
            "default:\n  max_blocks: 9\ndomains:\n  other.org:\n    max_block: 1\n",
            encoding="utf-8",
        )
        with pytest.raises(InvalidConfigError, match=r"domains\.other\.org: max_block"):
            load_profile(path, "https://example.com/")

    def test_section_must_be_mapping(self, tmp_path):
        path = tmp_path / "profile.yaml"
        path.write_text("domains:\n  example.com: [nav]\n", encoding="utf-8")
        with pytest.raises(InvalidConfigError, match="must be a mapping"):
            load_profile(path)

    def test_unexpected_top_level_key(self, tmp_path):
        path = tmp_path / "profile.yaml"
        path.write_text("defaults:\n  max_blocks: 9\n", encoding="utf-8")
        with pytest.raises(InvalidConfigError, match="defaults"):
            load_profile(path)

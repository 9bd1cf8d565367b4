#!/usr/bin/env python3
"""
STYLECURO CONFIGURATION SUITE
-----------------------------
Defaults, YAML/JSON loading, unknown-key warnings, fatal value errors
and command line overrides.

Author: StyleCuro Team
Date: 2026-10-18
"""

import pytest

from stylecuro.core.config import (
    ConfigError,
    LintConfig,
    build_config,
    find_config,
    load_config,
    parse_override,
)
from stylecuro.core.models import ERROR, UNKNOWN_CONFIG_KEY, WARNING
from stylecuro.rules.registry import RULE_IDS


def test_defaults():
    config = LintConfig()

    assert config.indent_width == 4
    assert config.max_line_length == 80
    assert config.allow_important_in == ("utilities.css",)
    assert config.root_module_allow_hyphen is False
    assert config.is_enabled("HexColor")
    assert config.severity_for("ZeroUnit", WARNING) == WARNING


def test_build_config_overrides_fields():
    loaded = build_config({"indent-width": 2, "extensions": ".less", "fail-fast": True}, RULE_IDS)

    assert loaded.config.indent_width == 2
    assert loaded.config.extensions == (".less",)
    assert loaded.config.fail_fast is True
    assert loaded.warnings == []


def test_unknown_key_is_a_warning_with_its_line(tmp_path):
    path = tmp_path / ".stylecuro.yaml"
    path.write_text("indent-width: 2\nbogus-key: 1\n", encoding="utf-8")

    loaded = load_config(str(path), RULE_IDS)

    assert loaded.config.indent_width == 2
    [warning] = loaded.warnings
    assert warning.rule_id == UNKNOWN_CONFIG_KEY
    assert warning.severity == WARNING
    assert warning.path == str(path)
    assert (warning.span.line, warning.span.column) == (2, 1)
    assert "bogus-key" in warning.message


@pytest.mark.parametrize("data, fragment", [
    ({"indent-width": "four"}, "non-negative integer"),
    ({"indent-width": 0}, "greater than zero"),
    ({"max-line-length": True}, "non-negative integer"),
    ({"fail-fast": "yes"}, "true or false"),
    ({"jobs": 0}, "positive integer"),
    ({"allow-important-in": [1, 2]}, "list of strings"),
    ({"order-report": "sometimes"}, "order-report"),
    ({"class-pattern": "(["}, "regular expression"),
    ({"rules": ["HexColor"]}, "mapping"),
    ({"rules": {"HexColor": "loud"}}, "HexColor"),
])
def test_bad_values_are_fatal(data, fragment):
    with pytest.raises(ConfigError) as excinfo:
        build_config(data, RULE_IDS)
    assert fragment in str(excinfo.value)


def test_top_level_must_be_a_mapping():
    with pytest.raises(ConfigError):
        build_config(["indent-width"], RULE_IDS)


def test_rules_mapping():
    loaded = build_config({"rules": {"HexColor": "off", "ZeroUnit": "error", "IdSelector": False,
                                     "Imaginary": "on"}}, RULE_IDS)
    config = loaded.config

    assert not config.is_enabled("HexColor")
    assert not config.is_enabled("IdSelector")
    assert config.severity_for("ZeroUnit", WARNING) == ERROR
    assert config.is_enabled("Imaginary") and config.rule_setting("Imaginary") is None
    assert [w.rule_id for w in loaded.warnings] == [UNKNOWN_CONFIG_KEY]
    assert "Imaginary" in loaded.warnings[0].message


def test_json_config(tmp_path):
    path = tmp_path / "lint.json"
    path.write_text('{\n\t"max-line-length": 120,\n\t"rules": {"NestingDepth": "off"}\n}\n', encoding="utf-8")

    config = load_config(str(path), RULE_IDS).config

    assert config.max_line_length == 120
    assert not config.is_enabled("NestingDepth")


@pytest.mark.parametrize("name, content", [
    ("broken.yaml", "indent-width: [1, 2\n"),
    ("broken.json", "{\"indent-width\": }"),
])
def test_malformed_file_is_fatal(tmp_path, name, content):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError, match="Malformed"):
        load_config(str(path), RULE_IDS)


def test_missing_explicit_file_is_fatal(tmp_path):
    with pytest.raises(ConfigError, match="Unable to read"):
        load_config(str(tmp_path / "nope.yaml"), RULE_IDS)


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    assert load_config(str(path), RULE_IDS).config == LintConfig()


def test_find_config(tmp_path):
    assert find_config(str(tmp_path)) is None

    (tmp_path / ".stylecuro.yml").write_text("indent-width: 2\n", encoding="utf-8")
    assert find_config(str(tmp_path)).name == ".stylecuro.yml"

    loaded = load_config(known_rules=RULE_IDS, search_dir=str(tmp_path))
    assert loaded.config.indent_width == 2


@pytest.mark.parametrize("item, expected", [
    ("max-line-length=120", ("max-line-length", 120)),
    ("fail-fast=true", ("fail-fast", True)),
    ("allow-important-in=[a.css, b.css]", ("allow-important-in", ["a.css", "b.css"])),
    ("extensions=.less", ("extensions", ".less")),
])
def test_parse_override(item, expected):
    assert parse_override(item) == expected


def test_parse_override_requires_key_and_value():
    with pytest.raises(ConfigError):
        parse_override("max-line-length")


def test_overrides_merge_over_file(tmp_path):
    path = tmp_path / ".stylecuro.yaml"
    path.write_text("indent-width: 2\nrules:\n  HexColor: off\n", encoding="utf-8")

    loaded = load_config(str(path), RULE_IDS, overrides={"indent-width": 8, "rules": {"ZeroUnit": "off"}})

    assert loaded.config.indent_width == 8
    assert not loaded.config.is_enabled("HexColor")
    assert not loaded.config.is_enabled("ZeroUnit")
    assert loaded.source == str(path)

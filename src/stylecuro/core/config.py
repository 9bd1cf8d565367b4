#!/usr/bin/env python3
"""
STYLECURO CONFIGURATION
-----------------------
Loads the per-project lint configuration (YAML or JSON) with ruamel.yaml
and merges it over the built-in defaults.

The result is an immutable LintConfig that is passed explicitly to every
rule, so concurrent per-file workers can never race on configuration.
Unknown keys are reported as warnings; malformed values are fatal.

Author: StyleCuro Team
Date: 2026-10-18
"""

import json
import logging
import re
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from stylecuro.core.models import ERROR, UNKNOWN_CONFIG_KEY, WARNING, Finding, Span

logger = logging.getLogger("stylecuro.config")

CONFIG_FILENAMES = (".stylecuro.yaml", ".stylecuro.yml", ".stylecuro.json")

DEFAULT_CLASS_PATTERN = r"^[a-z][a-z0-9]*(?:--?[a-z0-9]+)*$"

OFF = "off"
ORDER_REPORT_MODES = ("pair", "ruleset")


class ConfigError(Exception):
    """Fatal configuration problem. Halts the run before any file is linted."""


@dataclass(frozen=True)
class LintConfig:
    """
    Immutable lint configuration. Field names map to the kebab-case keys of
    the config file (`indent_width` <-> `indent-width`).
    """
    indent_width: int = 4
    max_line_length: int = 80
    max_nesting_depth: int = 3
    allow_important_in: Tuple[str, ...] = ("utilities.css",)
    root_module_allow_hyphen: bool = False
    root_module_exceptions: Tuple[str, ...] = ()
    class_pattern: str = DEFAULT_CLASS_PATTERN
    qualified_selector_allow: Tuple[str, ...] = ()
    order_report: str = "pair"
    order_override_marker: str = "order: ignore"
    extensions: Tuple[str, ...] = (".css", ".less", ".scss")
    fail_fast: bool = False
    jobs: Optional[int] = None
    # (rule id, "off" | "warning" | "error") pairs; tuple keeps the dataclass hashable
    rules: Tuple[Tuple[str, str], ...] = ()

    def rule_setting(self, rule_id: str) -> Optional[str]:
        for key, value in self.rules:
            if key == rule_id:
                return value
        return None

    def is_enabled(self, rule_id: str) -> bool:
        return self.rule_setting(rule_id) != OFF

    def severity_for(self, rule_id: str, default: str) -> str:
        setting = self.rule_setting(rule_id)
        return setting if setting in (ERROR, WARNING) else default


@dataclass
class LoadedConfig:
    """A LintConfig plus the warnings produced while loading it."""
    config: LintConfig
    warnings: List[Finding] = field(default_factory=list)
    source: Optional[str] = None


def _key_to_field(key: str) -> str:
    return str(key).strip().replace("-", "_")


def _field_to_key(name: str) -> str:
    return name.replace("_", "-")


_FIELDS = {f.name: f for f in fields(LintConfig)}
_LIST_FIELDS = {"allow_important_in", "root_module_exceptions", "qualified_selector_allow", "extensions"}
_INT_FIELDS = {"indent_width", "max_line_length", "max_nesting_depth"}
_BOOL_FIELDS = {"root_module_allow_hyphen", "fail_fast"}
_STR_FIELDS = {"class_pattern", "order_report", "order_override_marker"}


def _coerce(name: str, value: Any, known_rules: Sequence[str], warnings: List[Finding],
            source: str, where: Span) -> Any:
    """Validates one value against the field's type. Raises ConfigError on mismatch."""
    key = _field_to_key(name)

    if name in _INT_FIELDS:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ConfigError(f"'{key}' must be a non-negative integer, got {value!r}")
        if name == "indent_width" and value == 0:
            raise ConfigError("'indent-width' must be greater than zero")
        return value

    if name == "jobs":
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ConfigError(f"'jobs' must be a positive integer, got {value!r}")
        return value

    if name in _BOOL_FIELDS:
        if not isinstance(value, bool):
            raise ConfigError(f"'{key}' must be true or false, got {value!r}")
        return value

    if name in _LIST_FIELDS:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
            raise ConfigError(f"'{key}' must be a list of strings, got {value!r}")
        return tuple(str(v) for v in value)

    if name in _STR_FIELDS:
        if not isinstance(value, str):
            raise ConfigError(f"'{key}' must be a string, got {value!r}")
        if name == "order_report" and value not in ORDER_REPORT_MODES:
            raise ConfigError(f"'order-report' must be one of {', '.join(ORDER_REPORT_MODES)}")
        if name == "class_pattern":
            try:
                re.compile(value)
            except re.error as e:
                raise ConfigError(f"'class-pattern' is not a valid regular expression: {e}")
        return str(value)

    if name == "rules":
        if not isinstance(value, dict):
            raise ConfigError(f"'rules' must be a mapping of rule id to setting, got {value!r}")
        pairs = []
        for rule_id, setting in value.items():
            rule_id = str(rule_id)
            if rule_id not in known_rules:
                warnings.append(_unknown(f"Unknown rule '{rule_id}' in 'rules'", source,
                                         _position(value, rule_id, where)))
                continue
            pairs.append((rule_id, _rule_setting(rule_id, setting)))
        return tuple(pairs)

    return value


def _rule_setting(rule_id: str, setting: Any) -> str:
    if setting is True:
        return "on"
    if setting is False or setting == OFF:
        return OFF
    if setting in (ERROR, WARNING, "on"):
        return str(setting)
    raise ConfigError(f"Rule '{rule_id}' setting must be off, on, warning or error, got {setting!r}")


def _unknown(message: str, source: str, span: Span) -> Finding:
    return Finding(rule_id=UNKNOWN_CONFIG_KEY, severity=WARNING, message=message, span=span, path=source)


def _position(mapping: Any, key: Any, default: Span) -> Span:
    """Line/column of `key` using ruamel's round-trip position info (0-based)."""
    lc = getattr(mapping, "lc", None)
    if lc is None:
        return default
    try:
        line, column = lc.key(key)
    except (KeyError, TypeError, AttributeError):
        return default
    return Span.at(line + 1, column + 1, len(str(key)))


def build_config(data: Dict[str, Any], known_rules: Sequence[str] = (), source: str = "<config>",
                 base: Optional[LintConfig] = None) -> LoadedConfig:
    """
    Merges a raw mapping over `base` (or the defaults).
    Unknown keys become UnknownConfigKey warnings; bad values raise ConfigError.
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {source} must be a mapping at the top level")

    warnings: List[Finding] = []
    updates: Dict[str, Any] = {}
    fallback = Span.at(1, 1)

    for key, value in data.items():
        name = _key_to_field(key)
        where = _position(data, key, fallback)
        if name not in _FIELDS:
            warnings.append(_unknown(f"Unknown configuration key '{key}'", source, where))
            continue
        updates[name] = _coerce(name, value, known_rules, warnings, source, where)

    base = base or LintConfig()
    if "rules" in updates:
        merged = dict(base.rules)
        merged.update(updates["rules"])
        updates["rules"] = tuple(merged.items())

    for warning in warnings:
        logger.warning(f"{warning.path}:{warning.span.line}: {warning.message}")

    return LoadedConfig(config=replace(base, **updates), warnings=warnings, source=source)


def load_config(path: Optional[str] = None, known_rules: Sequence[str] = (),
                overrides: Optional[Dict[str, Any]] = None, search_dir: Optional[str] = None) -> LoadedConfig:
    """
    Loads configuration from `path`, or from the first of CONFIG_FILENAMES
    found in `search_dir` (default: the working directory), then applies
    inline `overrides`.
    """
    config_path = Path(path) if path else find_config(search_dir)
    loaded = LoadedConfig(config=LintConfig())

    if config_path is not None:
        data = read_config_file(config_path)
        loaded = build_config(data, known_rules, source=str(config_path))
        logger.debug(f"Loaded configuration from {config_path}")

    if overrides:
        extra = build_config(overrides, known_rules, source="<command line>", base=loaded.config)
        loaded = LoadedConfig(config=extra.config, warnings=loaded.warnings + extra.warnings,
                              source=loaded.source)
    return loaded


def find_config(search_dir: Optional[str] = None) -> Optional[Path]:
    base = Path(search_dir or ".").resolve()
    for name in CONFIG_FILENAMES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def read_config_file(path: Path) -> Any:
    """
    Parses a YAML or JSON config file. YAML goes through ruamel's round-trip
    loader so unknown-key warnings can report the key's line.
    """
    try:
        raw = Path(path).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Unable to read configuration file {path}: {e}")

    if Path(path).suffix.lower() == ".json":
        try:
            return json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError as e:
            raise ConfigError(f"Malformed configuration file {path}: {e}")

    yaml = YAML(typ="rt")
    try:
        return yaml.load(raw)
    except YAMLError as e:
        raise ConfigError(f"Malformed configuration file {path}: {e}")


def parse_override(item: str) -> Tuple[str, Any]:
    """
    Parses a `key=value` command line override. The value is read as a YAML
    scalar/flow value so `4`, `true` and `[a.css, b.css]` get their natural types.
    """
    key, sep, raw = item.partition("=")
    if not sep or not key.strip():
        raise ConfigError(f"Override '{item}' must have the form key=value")
    try:
        value = YAML(typ="safe").load(raw) if raw.strip() else ""
    except YAMLError as e:
        raise ConfigError(f"Invalid value in override '{item}': {e}")
    return key.strip(), value

"""Host rules: which credentials to use for which host.

A host rule pairs a host (and optionally a host type such as "github")
with a token. The changelog assembler asks for the rule matching the API
it is about to call; a rule without a token means "we can't talk to this
host".

Rules come from two places:
- A YAML file (HOST_RULES_FILE), for self-hosted instances
- The GITHUB_TOKEN environment variable, for github.com

Example YAML:

    host_rules:
      - host_type: github
        match_host: api.github.com
        token: ghp_...
      - host_type: github
        match_host: https://git.example.com/
        token: abc123
"""

from __future__ import annotations

import os
from pathlib import Path
from urllib.parse import urlsplit

import yaml
from pydantic import BaseModel, ValidationError

GITHUB_HOST_TYPE = "github"


class HostRule(BaseModel):
    """A single credential rule.

    Attributes:
        host_type: Platform type the rule applies to; None matches any
        match_host: Hostname or URL prefix; None matches any URL
        token: Credential for the host, if any
    """

    host_type: str | None = None
    match_host: str | None = None
    token: str | None = None

    def matches(self, host_type: str, url: str) -> bool:
        """Return True if this rule applies to the given host type and URL."""
        if self.host_type and self.host_type != host_type:
            return False
        if not self.match_host:
            return True
        hostname = urlsplit(url).hostname or ""
        return self.match_host == hostname or url.startswith(self.match_host)


class HostRulesConfig(BaseModel):
    """Top-level configuration loaded from YAML."""

    host_rules: list[HostRule] = []


def load_host_rules(path: str | Path) -> HostRulesConfig:
    """Load and validate a YAML host rules file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        A validated HostRulesConfig. Returns defaults if the file doesn't exist.

    Raises:
        ValueError: If the YAML content is invalid or fails validation.
    """
    config_path = Path(path)
    if not config_path.exists():
        return HostRulesConfig()

    try:
        raw = yaml.safe_load(config_path.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc

    try:
        return HostRulesConfig.model_validate(raw)
    except ValidationError as exc:
        raise ValueError(f"Invalid host rules in {path}: {exc}") from exc


class HostRules:
    """Ordered collection of host rules.

    Usage:
        rules = HostRules.from_env()
        rule = rules.find(host_type="github", url="https://api.github.com/")
        if rule.token: ...
    """

    def __init__(self, rules: list[HostRule] | None = None) -> None:
        self._rules = list(rules or [])

    @classmethod
    def from_env(cls) -> HostRules:
        """Build rules from GITHUB_TOKEN and the optional HOST_RULES_FILE."""
        rules: list[HostRule] = []
        token = os.environ.get("GITHUB_TOKEN", "")
        if token:
            rules.append(
                HostRule(
                    host_type=GITHUB_HOST_TYPE,
                    match_host="api.github.com",
                    token=token,
                )
            )
        rules_file = os.environ.get("HOST_RULES_FILE")
        if rules_file:
            rules.extend(load_host_rules(rules_file).host_rules)
        return cls(rules)

    def add(self, rule: HostRule) -> None:
        self._rules.append(rule)

    def find(self, host_type: str, url: str) -> HostRule:
        """Merge every rule matching the host type and URL.

        Later rules override values from earlier ones. Returns an empty
        rule (no token) when nothing matches.
        """
        merged = HostRule(host_type=host_type)
        for rule in self._rules:
            if rule.matches(host_type, url):
                if rule.match_host:
                    merged.match_host = rule.match_host
                if rule.token:
                    merged.token = rule.token
        return merged

from __future__ import annotations

from dataclasses import dataclass

from .exit_codes import ERR_CONFIG, ERR_CONTEXT, ERR_INTERNAL, ERR_PREREQ, ERR_VALIDATION


@dataclass
class ScriptError(Exception):
    message: str
    code: int = ERR_INTERNAL
    kind: str = "generic_error"
    remedy: str = ""

    def __str__(self) -> str:
        return self.message


@dataclass
class ConfigError(ScriptError):
    code: int = ERR_CONFIG
    kind: str = "config_error"


@dataclass
class DiscoveryError(ScriptError):
    code: int = ERR_CONTEXT
    kind: str = "discovery_error"


@dataclass
class UnsortedAllowListError(ScriptError):
    code: int = ERR_VALIDATION
    kind: str = "unsorted_allowlist"
    expected: tuple[str, ...] = ()


@dataclass
class ToolUnavailableError(ScriptError):
    code: int = ERR_PREREQ
    kind: str = "tool_unavailable"


@dataclass
class SandboxCreationError(ScriptError):
    code: int = ERR_PREREQ
    kind: str = "sandbox_creation_failed"
    output: str = ""

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "allowlist",
    "classify",
    "cli",
    "config",
    "core",
    "discovery",
    "errors",
    "exit_codes",
    "lint",
    "provision",
    "report",
    "strategies",
    "verify",
]

"""Select how shellcheck runs for this invocation.

Precedence in ``auto`` mode:

1. a host (or previously downloaded) binary reporting exactly the pinned version;
2. a sandbox container from the digest-pinned image, when a container runtime
   answers ``info``; creation failure is fatal, there is no further fallback;
3. downloading the pinned release for a supported platform.

The sandbox teardown is registered on the caller's ``ExitStack`` before the
container is created.
"""

from __future__ import annotations

import io
import platform
import shutil
import sys
import tarfile
import urllib.error
import urllib.request
from contextlib import ExitStack
from pathlib import Path
from typing import Literal

from .config import Settings
from .core.context import RunContext
from .core.logging import log_event
from .core.process import run_command
from .errors import SandboxCreationError, ToolUnavailableError
from .strategies import DownloadedBinary, ExecutionStrategy, HostBinary, Sandbox

ToolMode = Literal["auto", "host", "sandbox", "download"]
TOOL_MODES: tuple[str, ...] = ("auto", "host", "sandbox", "download")

# effectively forever; the container is removed explicitly
SLEEP_SECONDS = "2147483647"
DOWNLOAD_TIMEOUT_SECONDS = 120

_SYSTEMS = {"Linux": "linux", "Darwin": "darwin"}
_MACHINES = {"x86_64": "x86_64", "amd64": "x86_64", "aarch64": "aarch64", "arm64": "aarch64"}
SUPPORTED_TARGETS = {("linux", "x86_64"), ("linux", "aarch64"), ("darwin", "x86_64")}

_INSTALL_HINT = "install shellcheck {version} (https://github.com/koalaman/shellcheck#installing) or start docker"


def detect_version(binary: str | Path, ctx: RunContext) -> str | None:
    res = run_command([str(binary), "--version"], ctx.repo_root, ctx=ctx)
    if res.code != 0:
        return None
    for line in res.stdout.splitlines():
        if line.startswith("version:"):
            return line.split(":", 1)[1].strip()
    return None


def find_host_binary(ctx: RunContext, settings: Settings) -> Path | None:
    found = shutil.which(settings.shellcheck_executable)
    if not found:
        log_event(ctx, "info", "provision", "host-binary-missing", executable=settings.shellcheck_executable)
        return None
    version = detect_version(found, ctx)
    if version != settings.shellcheck_version:
        log_event(
            ctx,
            "info",
            "provision",
            "host-binary-version-mismatch",
            path=found,
            found=version or "unknown",
            required=settings.shellcheck_version,
        )
        return None
    return Path(found)


def cached_binary_path(ctx: RunContext, settings: Settings) -> Path:
    return settings.tool_cache(ctx.repo_root) / f"shellcheck-v{settings.shellcheck_version}" / "shellcheck"


def find_cached_binary(ctx: RunContext, settings: Settings) -> Path | None:
    path = cached_binary_path(ctx, settings)
    if not path.is_file():
        return None
    if detect_version(path, ctx) != settings.shellcheck_version:
        log_event(ctx, "warn", "provision", "cached-binary-version-mismatch", path=str(path))
        return None
    return path


def container_runtime_available(ctx: RunContext, settings: Settings) -> bool:
    res = run_command([settings.container_runtime, "info"], ctx.repo_root, ctx=ctx)
    return res.code == 0


def remove_container(ctx: RunContext, settings: Settings) -> None:
    res = run_command([settings.container_runtime, "rm", "-f", settings.container_name], ctx.repo_root, ctx=ctx)
    log_event(ctx, "debug", "provision", "sandbox-removed", container=settings.container_name, code=res.code)


def create_sandbox(ctx: RunContext, settings: Settings, stack: ExitStack) -> Sandbox:
    remove_container(ctx, settings)
    stack.callback(remove_container, ctx, settings)
    root = str(ctx.repo_root)
    res = run_command(
        [
            settings.container_runtime,
            "run",
            "--name",
            settings.container_name,
            "-d",
            "--rm",
            "-v",
            f"{root}:{root}",
            "-w",
            root,
            "--entrypoint=sleep",
            settings.shellcheck_image,
            SLEEP_SECONDS,
        ],
        ctx.repo_root,
        ctx=ctx,
    )
    if res.code != 0:
        raise SandboxCreationError(
            f"Failed to create shellcheck container with output:\n\n{res.combined_output}",
            remedy=f"check that `{settings.container_runtime}` can pull {settings.shellcheck_image}",
            output=res.combined_output,
        )
    log_event(ctx, "info", "provision", "sandbox-created", container=settings.container_name)
    return Sandbox(ctx, settings, settings.container_name, tty=sys.stdout.isatty())


def platform_target(system: str | None = None, machine: str | None = None) -> tuple[str, str] | None:
    os_name = _SYSTEMS.get(system or platform.system())
    arch = _MACHINES.get((machine or platform.machine()).lower())
    if os_name is None or arch is None or (os_name, arch) not in SUPPORTED_TARGETS:
        return None
    return os_name, arch


def download_url(settings: Settings, target: tuple[str, str]) -> str:
    os_name, arch = target
    return settings.download_url.format(version=settings.shellcheck_version, os=os_name, arch=arch)


def extract_binary(archive: bytes, dest: Path) -> Path:
    with tarfile.open(fileobj=io.BytesIO(archive), mode="r:xz") as tar:
        member = next(
            (m for m in tar.getmembers() if m.isfile() and Path(m.name).name == "shellcheck"),
            None,
        )
        if member is None:
            raise ToolUnavailableError("shellcheck binary not found in downloaded archive")
        handle = tar.extractfile(member)
        if handle is None:
            raise ToolUnavailableError(f"unable to read {member.name} from downloaded archive")
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(handle.read())
    dest.chmod(0o755)
    return dest


def download_binary(ctx: RunContext, settings: Settings) -> Path:
    target = platform_target()
    hint = _INSTALL_HINT.format(version=settings.shellcheck_version)
    if target is None:
        raise ToolUnavailableError(
            f"Shellcheck is not available in your system ({platform.system()} {platform.machine()}), please install it",
            remedy=hint,
        )
    if ctx.no_network:
        raise ToolUnavailableError("shellcheck download refused: network mode is `forbid`", remedy=hint)
    url = download_url(settings, target)
    log_event(ctx, "info", "provision", "download", url=url)
    try:
        with urllib.request.urlopen(url, timeout=DOWNLOAD_TIMEOUT_SECONDS) as resp:
            archive = resp.read()
    except (urllib.error.URLError, OSError) as exc:
        raise ToolUnavailableError(f"failed to download {url}: {exc}", remedy=hint) from exc
    try:
        dest = extract_binary(archive, cached_binary_path(ctx, settings))
    except tarfile.TarError as exc:
        raise ToolUnavailableError(f"failed to unpack {url}: {exc}", remedy=hint) from exc
    version = detect_version(dest, ctx)
    if version != settings.shellcheck_version:
        raise ToolUnavailableError(
            f"downloaded shellcheck reports version {version or 'unknown'}, expected {settings.shellcheck_version}",
            remedy=hint,
        )
    return dest


def _local_strategy(ctx: RunContext, settings: Settings) -> ExecutionStrategy | None:
    host = find_host_binary(ctx, settings)
    if host is not None:
        return HostBinary(ctx, settings, host)
    cached = find_cached_binary(ctx, settings)
    if cached is not None:
        return DownloadedBinary(ctx, settings, cached)
    return None


def provision(ctx: RunContext, settings: Settings, stack: ExitStack, mode: ToolMode = "auto") -> ExecutionStrategy:
    if mode not in TOOL_MODES:
        raise ToolUnavailableError(f"unknown tool mode `{mode}`; expected one of {', '.join(TOOL_MODES)}")
    hint = _INSTALL_HINT.format(version=settings.shellcheck_version)
    if mode in {"auto", "host"}:
        local = _local_strategy(ctx, settings)
        if local is not None:
            return local
        if mode == "host":
            raise ToolUnavailableError(
                f"no {settings.shellcheck_executable} {settings.shellcheck_version} found on PATH or in "
                f"{settings.tool_cache(ctx.repo_root)}",
                remedy=hint,
            )
    if mode in {"auto", "sandbox"}:
        if container_runtime_available(ctx, settings):
            return create_sandbox(ctx, settings, stack)
        if mode == "sandbox":
            raise ToolUnavailableError(
                f"container runtime `{settings.container_runtime}` is not reachable",
                remedy=f"start {settings.container_runtime} or choose another --tool-mode",
            )
    if mode == "download":
        cached = find_cached_binary(ctx, settings)
        if cached is not None:
            return DownloadedBinary(ctx, settings, cached)
    return DownloadedBinary(ctx, settings, download_binary(ctx, settings))


def probe(ctx: RunContext, settings: Settings) -> dict[str, object]:
    """Report what each provisioning path would find, without creating anything."""
    found = shutil.which(settings.shellcheck_executable)
    cached = cached_binary_path(ctx, settings)
    target = platform_target()
    return {
        "required_version": settings.shellcheck_version,
        "host_binary": found or "",
        "host_version": (detect_version(found, ctx) or "") if found else "",
        "cached_binary": str(cached) if cached.is_file() else "",
        "container_runtime": settings.container_runtime,
        "container_runtime_available": container_runtime_available(ctx, settings),
        "image": settings.shellcheck_image,
        "platform": ".".join(target) if target else f"{platform.system()}.{platform.machine()} (unsupported)",
        "network": ctx.network_mode,
    }

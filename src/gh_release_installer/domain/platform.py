"""Host platform detection and allow-list checks.

Raw ``platform.system()`` / ``platform.machine()`` values are normalized into
the GOOS/GOARCH-style vocabulary release assets are usually named with
(``linux``, ``darwin``, ``windows``; ``amd64``, ``arm64``, ``386``, ``armv7``).
"""

from __future__ import annotations

import platform as _platform
from collections.abc import Iterable
from dataclasses import dataclass

from gh_release_installer.exceptions import ConfigurationError

_ARCH_ALIASES: dict[str, str] = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "x86": "386",
    "i386": "386",
    "i686": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
}

# armv6l, armv7l, ... keep their generation as a distinct arch tag
_ARM_GENERATIONS: tuple[str, ...] = ("armv5", "armv6", "armv7")

_WINDOWS_PREFIXES: tuple[str, ...] = ("msys_nt", "mingw", "cygwin")


@dataclass(frozen=True, slots=True)
class Platform:
    """Normalized ``(os, arch)`` pair."""

    os: str
    arch: str

    def __str__(self) -> str:
        return f"{self.os}/{self.arch}"

    @property
    def slug(self) -> str:
        """Directory-friendly form used in cache paths (``linux-amd64``)."""
        return f"{self.os}-{self.arch}"

    @classmethod
    def parse(cls, value: str) -> Platform:
        """Parse an ``os/arch`` string.

        Raises:
            ConfigurationError: If the value is not of the form ``os/arch``.

        """
        os_name, sep, arch = value.strip().partition("/")
        if not sep or not os_name or not arch or "/" in arch:
            msg = f"invalid platform entry (expected os/arch): {value!r}"
            raise ConfigurationError(msg)
        return cls(os_name.lower(), arch.lower())


def normalize_os(raw: str) -> str:
    """Normalize an OS identifier (``Linux`` -> ``linux``)."""
    name = raw.strip().lower()
    if name.startswith(_WINDOWS_PREFIXES):
        return "windows"
    return name


def normalize_arch(raw: str) -> str:
    """Normalize a machine identifier (``x86_64`` -> ``amd64``)."""
    machine = raw.strip().lower()
    if machine in _ARCH_ALIASES:
        return _ARCH_ALIASES[machine]
    for generation in _ARM_GENERATIONS:
        if machine.startswith(generation):
            return generation
    return machine


def detect(system: str | None = None, machine: str | None = None) -> Platform:
    """Detect the running host platform.

    Args:
        system: Raw OS name (defaults to ``platform.system()``)
        machine: Raw machine name (defaults to ``platform.machine()``)

    Returns:
        Normalized platform

    """
    raw_system = system if system is not None else _platform.system()
    raw_machine = machine if machine is not None else _platform.machine()
    return Platform(normalize_os(raw_system), normalize_arch(raw_machine))


def parse_platforms(value: str | Iterable[str]) -> tuple[Platform, ...]:
    """Parse a space-separated (or pre-split) list of ``os/arch`` pairs."""
    entries = value.split() if isinstance(value, str) else value
    return tuple(Platform.parse(entry) for entry in entries if entry.strip())


def is_supported(platform: Platform, allow_list: Iterable[Platform]) -> bool:
    """Return whether ``platform`` is a member of ``allow_list``."""
    return platform in set(allow_list)


def ensure_supported(
    platform: Platform, allow_list: Iterable[Platform]
) -> None:
    """Fail fast when the host platform is not in the allow-list.

    Raises:
        ConfigurationError: If the platform is unsupported.

    """
    allowed = tuple(allow_list)
    if not is_supported(platform, allowed):
        supported = " ".join(str(entry) for entry in allowed) or "(none)"
        msg = f"unsupported platform: {platform} (supported: {supported})"
        raise ConfigurationError(msg)

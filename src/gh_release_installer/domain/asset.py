"""Asset and checksum filename rendering.

Templates use ``{placeholder}`` markers. Rendering is a single pass over the
template: values are never re-scanned, so a tag containing ``{os}`` stays
literal, and unknown placeholders are left untouched.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from gh_release_installer.constants import (
    ALT_CHECKSUM_TEMPLATES,
    ARCHIVE_FORMATS,
    RAW_EXTENSION,
    RAW_FORMATS,
)
from gh_release_installer.exceptions import (
    ConfigurationError,
    UnsupportedFormatError,
)

if TYPE_CHECKING:
    from gh_release_installer.config.settings import ProjectConfig
    from gh_release_installer.domain.platform import Platform

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


class ChecksumMode(Enum):
    """How a checksum source is interpreted."""

    SINGLE = "single"  # per-asset file, may hold a bare digest
    MANIFEST = "manifest"  # multi-entry file, asset must be named


@dataclass(frozen=True, slots=True)
class ChecksumCandidate:
    """A checksum filename to try, with its interpretation mode."""

    name: str
    mode: ChecksumMode


@dataclass(frozen=True, slots=True)
class AssetDescriptor:
    """Names derived from the project config for one tag and platform."""

    base_name: str
    filename: str
    extension: str
    is_archive: bool
    checksum_candidates: tuple[ChecksumCandidate, ...]

    @property
    def candidate_names(self) -> tuple[str, ...]:
        """Checksum filenames in the order they are tried."""
        return tuple(candidate.name for candidate in self.checksum_candidates)


def render_template(template: str, values: Mapping[str, str]) -> str:
    """Substitute known placeholders in a single pass.

    Args:
        template: Template such as ``{project}-{tag}-{os}-{arch}``
        values: Placeholder name to replacement text

    Returns:
        Rendered string; unknown placeholders pass through literally

    """
    return _PLACEHOLDER.sub(
        lambda match: values.get(match.group(1), match.group(0)), template
    )


def render_asset_name(
    template: str, project: str, tag: str, os: str, arch: str
) -> str:
    """Render the asset base name template."""
    return render_template(
        template, {"project": project, "tag": tag, "os": os, "arch": arch}
    )


def render_checksum_name(
    template: str,
    asset: str,
    ext: str,
    project: str,
    tag: str,
    os: str,
    arch: str,
) -> str:
    """Render a checksum filename template."""
    return render_template(
        template,
        {
            "asset": asset,
            "ext": ext,
            "project": project,
            "tag": tag,
            "os": os,
            "arch": arch,
        },
    )


def is_archive_format(fmt: str) -> bool:
    """Return whether ``fmt`` names a supported archive container."""
    return fmt in ARCHIVE_FORMATS


def ensure_supported_format(fmt: str) -> None:
    """Reject formats that are neither archives nor raw executables.

    Raises:
        UnsupportedFormatError: If the format is unknown.

    """
    if fmt not in ARCHIVE_FORMATS and fmt not in RAW_FORMATS:
        supported = " | ".join((*ARCHIVE_FORMATS, *RAW_FORMATS))
        msg = f"expected one of: {supported}"
        raise UnsupportedFormatError(msg, fmt)


def checksum_candidates(
    checksum_template: str,
    fallbacks: Iterable[str],
    *,
    asset: str,
    ext: str,
    project: str,
    tag: str,
    os: str,
    arch: str,
) -> tuple[ChecksumCandidate, ...]:
    """Build the ordered, de-duplicated checksum candidate list.

    Order: configured template, ``{asset}.sha256``, ``{asset}.{ext}.sha256``,
    then each fallback manifest. The first three are per-asset files; the
    fallbacks are manifests that must name the asset explicitly.
    """
    seen: set[str] = set()
    candidates: list[ChecksumCandidate] = []

    def add(name: str, mode: ChecksumMode) -> None:
        if name and name not in seen:
            seen.add(name)
            candidates.append(ChecksumCandidate(name, mode))

    for template in (checksum_template, *ALT_CHECKSUM_TEMPLATES):
        add(
            render_checksum_name(
                template, asset, ext, project, tag, os, arch
            ),
            ChecksumMode.SINGLE,
        )
    for manifest in fallbacks:
        add(manifest, ChecksumMode.MANIFEST)

    return tuple(candidates)


def describe_asset(
    config: ProjectConfig, tag: str, platform: Platform
) -> AssetDescriptor:
    """Derive the asset filename and checksum candidates for a release.

    Args:
        config: Project configuration
        tag: Canonical release tag
        platform: Host platform

    Returns:
        Asset descriptor

    Raises:
        UnsupportedFormatError: If the configured format is unknown.
        ConfigurationError: If the name template renders to nothing.

    """
    fmt = config.archive_format
    ensure_supported_format(fmt)

    base_name = render_asset_name(
        config.name_template,
        config.project_name,
        tag,
        platform.os,
        platform.arch,
    )
    if not base_name:
        msg = "NAME_TEMPLATE renders to an empty asset name"
        raise ConfigurationError(msg)

    archive = is_archive_format(fmt)
    if archive:
        filename = f"{base_name}.{fmt}"
        extension = fmt
    else:
        filename = base_name
        extension = RAW_EXTENSION

    candidates = checksum_candidates(
        config.checksum_template,
        config.checksum_fallbacks,
        asset=filename,
        ext=extension,
        project=config.project_name,
        tag=tag,
        os=platform.os,
        arch=platform.arch,
    )
    return AssetDescriptor(
        base_name=base_name,
        filename=filename,
        extension=extension,
        is_archive=archive,
        checksum_candidates=candidates,
    )

"""Terraform tool definition.

HashiCorp ships terraform as a zip holding a single ``terraform`` binary,
and publishes one SHA256SUMS manifest per release covering every platform.

Releases: https://releases.hashicorp.com/terraform/
"""

from __future__ import annotations

from opstool.tools.base import ChecksumStrategy, ToolDescriptor
from opstool.tools.definitions.go_names import GO_ARCH_NAMES, GO_OS_NAMES

__all__ = ["TERRAFORM"]


TERRAFORM = ToolDescriptor(
    name="terraform",
    url_template=(
        "https://releases.hashicorp.com/terraform/{version}/terraform_{version}_{os}_{arch}.zip"
    ),
    executable_name="terraform",
    checksum_strategy=ChecksumStrategy.EMBEDDED_MANIFEST,
    checksum_url_template=(
        "https://releases.hashicorp.com/terraform/{version}/terraform_{version}_SHA256SUMS"
    ),
    os_names=GO_OS_NAMES,
    arch_names={**GO_ARCH_NAMES, "x86": "386"},
    release_repo="hashicorp/terraform",
)

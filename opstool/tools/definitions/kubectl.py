"""Kubernetes CLI tool definition.

kubectl is published as a raw binary per os/arch on dl.k8s.io, next to a
``.sha256`` companion file holding only the hex digest. Release tags carry
a "v" prefix, and so do the canonical versions we store.

Downloads: https://dl.k8s.io/release/v1.29.0/bin/linux/amd64/kubectl
"""

from __future__ import annotations

from opstool.tools.base import ChecksumStrategy, ToolDescriptor
from opstool.tools.definitions.go_names import GO_ARCH_NAMES, GO_OS_NAMES

__all__ = ["KUBECTL"]


KUBECTL = ToolDescriptor(
    name="kubectl",
    url_template="https://dl.k8s.io/release/v{version}/bin/{os}/{arch}/kubectl",
    executable_name="kubectl",
    checksum_strategy=ChecksumStrategy.COMPANION_FILE,
    checksum_url_template="{url}.sha256",
    os_names=GO_OS_NAMES,
    arch_names={**GO_ARCH_NAMES, "x86": "386"},
    version_prefix="v",
    release_repo="kubernetes/kubernetes",
)

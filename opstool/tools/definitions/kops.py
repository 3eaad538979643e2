"""kOps tool definition.

kops binaries are GitHub release assets named ``kops-{os}-{arch}`` with a
``.sha256`` companion asset. Tags are "v"-prefixed, canonical versions are not.

GitHub: https://github.com/kubernetes/kops
"""

from __future__ import annotations

from opstool.tools.base import ChecksumStrategy, ToolDescriptor
from opstool.tools.definitions.go_names import GO_ARCH_NAMES, GO_OS_NAMES

__all__ = ["KOPS"]


KOPS = ToolDescriptor(
    name="kops",
    url_template="https://github.com/kubernetes/kops/releases/download/v{version}/kops-{os}-{arch}",
    executable_name="kops",
    checksum_strategy=ChecksumStrategy.COMPANION_FILE,
    checksum_url_template="{url}.sha256",
    os_names=GO_OS_NAMES,
    arch_names=GO_ARCH_NAMES,
    release_repo="kubernetes/kops",
)

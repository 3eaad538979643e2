"""Helm tool definition.

Helm is distributed as ``helm-v{version}-{os}-{arch}.tar.gz`` holding
``{os}-{arch}/helm``; the companion ``.sha256sum`` file uses the
``<digest>  <file>`` layout.

GitHub: https://github.com/helm/helm
"""

from __future__ import annotations

from opstool.tools.base import ChecksumStrategy, ToolDescriptor
from opstool.tools.definitions.go_names import GO_ARCH_NAMES, GO_OS_NAMES

__all__ = ["HELM"]


HELM = ToolDescriptor(
    name="helm",
    url_template="https://get.helm.sh/helm-v{version}-{os}-{arch}.tar.gz",
    executable_name="helm",
    checksum_strategy=ChecksumStrategy.COMPANION_FILE,
    checksum_url_template="{url}.sha256sum",
    os_names=GO_OS_NAMES,
    arch_names={**GO_ARCH_NAMES, "x86": "386"},
    version_prefix="v",
    release_repo="helm/helm",
)

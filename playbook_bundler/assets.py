"""Build-time constant files copied into, or prepended to, every bundle."""

from __future__ import annotations

import dataclasses
from pathlib import Path

from .errors import BundleError

__all__ = ["DATA_DIR", "RuntimeAssets"]

DATA_DIR = Path(__file__).resolve().parent / "data"


@dataclasses.dataclass(frozen=True, slots=True)
class RuntimeAssets:
    """Locations of the fixed files a bundle is built from.

    Parameters
    ----------
    header_template : Path
        Shell header written at the start of the bundle. Must contain the
        ``@UNCOMPRESS_SKIP@`` and may contain the ``@VERSION@`` tokens.
    entrypoint : Path
        Script executed on the target machine once the bundle is unpacked.
    ansible_config : Path
        ``ansible.cfg`` shipped alongside the playbook.
    """

    header_template: Path
    entrypoint: Path
    ansible_config: Path

    @classmethod
    def bundled(cls, data_dir: Path = DATA_DIR) -> RuntimeAssets:
        """Return the assets shipped with the package."""
        return cls(
            header_template=data_dir / "header.sh",
            entrypoint=data_dir / "run-playbook.sh",
            ansible_config=data_dir / "ansible.cfg",
        )

    def verify(self) -> RuntimeAssets:
        """Return ``self`` after checking that every asset file exists.

        Raises
        ------
        BundleError
            Raised when the installation is missing one of the asset files.
        """
        for field in dataclasses.fields(self):
            path: Path = getattr(self, field.name)
            if not path.is_file():
                message = f"Runtime asset '{field.name}' not found at {path}"
                raise BundleError(message)
        return self

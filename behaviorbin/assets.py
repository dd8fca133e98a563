from pathlib import Path
from typing import Optional, Protocol, Union

DEFAULT_STATIC_DIR = Path(__file__).parent / "static"
INDEX_DOCUMENT = "index.html"


class AssetStore(Protocol):
    def read(self, relative_path: str) -> Optional[bytes]:
        """Return the asset's bytes, or None when there is no such asset."""


class DirectoryAssetStore:
    """Read-only assets served from a directory on disk."""

    def __init__(self, root: Union[str, Path] = DEFAULT_STATIC_DIR):
        self.root = Path(root).resolve()

    def read(self, relative_path: str) -> Optional[bytes]:
        candidate = (self.root / relative_path.lstrip("/")).resolve()
        # stay inside the root, whatever the path says
        if self.root not in candidate.parents or not candidate.is_file():
            return None
        return candidate.read_bytes()

    def __repr__(self):
        return f"DirectoryAssetStore({str(self.root)!r})"

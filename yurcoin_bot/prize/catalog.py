from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import List

from ..shared.logging_setup import get_logger


IMAGE_LIST_FILE = "images.env"
IMAGE_EXTENSIONS = ("png", "jpg", "jpeg", "gif")

# Closed table: file name -> YC. Anything not listed is worth nothing.
IMAGE_VALUES = {
    "YurCoin0.png": 0,
    "YurCoin1.png": 1,
    "YurCoin10.png": 10,
    "YurCoin1000.png": 1000,
}

log = get_logger("catalog")


def image_value(path: Path) -> int:
    return IMAGE_VALUES.get(Path(path).name, 0)


def _is_image(path: Path) -> bool:
    return path.is_file() and path.suffix[1:].lower() in IMAGE_EXTENSIONS


@dataclass(frozen=True)
class CatalogEntry:
    asset_path: Path
    value: int


class ImageCatalog:
    """
    Prize assets listed in <base_dir>/images.env:
      - one path per line, UTF-8
      - blank lines and '#' comments ignored
      - relative paths are resolved against base_dir
    """

    def __init__(self, base_dir: Path, manifest_name: str = IMAGE_LIST_FILE):
        self.base_dir = Path(base_dir)
        self.manifest_path = self.base_dir / manifest_name

    def _manifest_lines(self) -> List[str]:
        try:
            contents = self.manifest_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return []
        lines = [line.strip() for line in contents.splitlines()]
        return [line for line in lines if line and not line.startswith("#")]

    def _resolve(self, line: str) -> Path:
        path = Path(line)
        if path.is_absolute():
            return path
        return self.base_dir / path

    def load(self) -> List[CatalogEntry]:
        entries = []
        for line in self._manifest_lines():
            path = self._resolve(line)
            entries.append(CatalogEntry(asset_path=path, value=image_value(path)))
        return entries

    def ensure_manifest(self) -> bool:
        """Write a fresh manifest from the images in base_dir if the current one is unusable.

        Returns True when a manifest was written.
        """
        if self._manifest_lines():
            return False

        try:
            names = sorted(p.name for p in self.base_dir.iterdir() if _is_image(p))
        except OSError:
            names = []

        if not names:
            log.info("No images found in %s; manifest left empty", str(self.base_dir))
            return False

        try:
            self.manifest_path.parent.mkdir(parents=True, exist_ok=True)
            self.manifest_path.write_text("\n".join(names), encoding="utf-8")
        except OSError as e:
            log.warning("Failed to write %s: %s", str(self.manifest_path), e)
            return False
        log.info("Bootstrapped %s with %d images", str(self.manifest_path), len(names))
        return True

"""Guard against Qt imports in core modules.

Run this script in CI or locally to ensure core modules remain Qt-free.
Only the host widget and the demo may import Qt.
"""

from __future__ import annotations

from pathlib import Path
import sys


PACKAGE_DIR = Path(__file__).resolve().parent.parent / "src" / "roi_thumbnail"

QT_MODULES = {"thumbnail_widget.py", "demo.py"}

FORBIDDEN = ("PyQt", "PySide", "QtCore", "QtWidgets")


def core_modules(package_dir: Path = PACKAGE_DIR) -> list:
    return sorted(p for p in package_dir.glob("*.py") if p.name not in QT_MODULES)


def main() -> int:
    bad = []
    for path in core_modules():
        text = path.read_text(encoding="utf-8", errors="ignore")
        for token in FORBIDDEN:
            if token in text:
                bad.append(f"{path.name} contains '{token}'")
                break
    if bad:
        sys.stderr.write("Qt import guard failed:\n")
        sys.stderr.write("\n".join(bad))
        sys.stderr.write("\n")
        return 2
    print("Qt import guard passed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

import sys
from pathlib import Path

import pytest

# Ensure the sizesort package is importable when running tests from a checkout
_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))


def make_file(path: Path, size: int) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        f.write(b"x" * size)
    return path


@pytest.fixture
def small_tree(tmp_path: Path) -> Path:
    """root/{a.txt (100 B), sub/{b.txt (2048 B)}}"""
    root = tmp_path / "root"
    make_file(root / "a.txt", 100)
    make_file(root / "sub" / "b.txt", 2048)
    return root.resolve()


@pytest.fixture
def nested_tree(tmp_path: Path) -> Path:
    root = tmp_path / "nested"
    make_file(root / "top.bin", 7)
    make_file(root / "alpha" / "one.bin", 1500)
    make_file(root / "alpha" / "two.bin", 1500)
    make_file(root / "alpha" / "deep" / "three.bin", 4096)
    make_file(root / "alpha" / "deep" / "deeper" / "four.bin", 1)
    make_file(root / "beta" / "five.bin", 0)
    (root / "beta" / "empty").mkdir(parents=True)
    (root / "gamma").mkdir()
    return root.resolve()

"""
Shared fixtures for checkdupes tests.
Creates isolated temporary directories with controlled test files.
"""
import os
import pytest
import tempfile
from pathlib import Path
from typing import Dict
import sys

# Add src to sys.path so 'checkdupes' is importable without installing
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))


@pytest.fixture
def temp_dir():
    """Creates isolated temporary directory, auto-cleanup after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_files(temp_dir) -> Dict[str, Path]:
    """
    Creates controlled test files for matching scenarios:
    - 'A' and 'B': same size, same first/last bytes, different middle
    - 'C': identical content to 'A', in a subdirectory, same mtime as 'A'
    - 'unique': a size nobody else has
    - 'empty': 0 bytes (never indexed)
    """
    files = {}

    content_a = b"H" * 16 + b"a" * 1000 + b"T" * 16
    content_b = b"H" * 16 + b"b" * 1000 + b"T" * 16

    files["A"] = temp_dir / "a.txt"
    files["A"].write_bytes(content_a)
    files["B"] = temp_dir / "b.txt"
    files["B"].write_bytes(content_b)

    subdir = temp_dir / "sub"
    subdir.mkdir()
    files["C"] = subdir / "c.txt"
    files["C"].write_bytes(content_a)

    files["unique"] = temp_dir / "unique.dat"
    files["unique"].write_bytes(b"U" * 3000)

    files["empty"] = temp_dir / "empty.txt"
    files["empty"].write_bytes(b"")

    # A and C share a modification time, B does not
    os.utime(files["A"], ns=(1_700_000_000_000_000_000, 1_700_000_000_000_000_000))
    os.utime(files["C"], ns=(1_700_000_000_000_000_000, 1_700_000_000_000_000_000))
    os.utime(files["B"], ns=(1_600_000_000_000_000_000, 1_600_000_000_000_000_000))

    return files

from pathlib import Path

import pytest

from neur.config import Config


@pytest.fixture
def site(tmp_path):
    """Return (config, write) for a fresh source tree under tmp_path.

    ``write(rel, text)`` creates a file below the source directory.
    """
    source = tmp_path / "src"
    source.mkdir()
    config = Config(source=source, output=tmp_path / "dist", minify=False)

    def write(rel: str, text: str) -> Path:
        path = source / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return config, write

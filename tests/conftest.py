from __future__ import annotations

from pathlib import Path

import pytest
from src.config import ExtractionConfig


@pytest.fixture
def config(tmp_path: Path) -> ExtractionConfig:
    return ExtractionConfig(
        max_response_tokens=512,
        source_dir=str(tmp_path / "source"),
        output_dir=str(tmp_path / "output"),
        records_dir=str(tmp_path / "records"),
        prompt_parameter_path=str(tmp_path / "prompt.txt"),
    )

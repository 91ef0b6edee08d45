from __future__ import annotations

import pytest
from src.config import ExtractionConfig
from src.extraction.errors import ConfigurationMissing


def test_from_env_reads_prefixed_variables() -> None:
    config = ExtractionConfig.from_env(
        {
            "IDP0_MAX_RESPONSE_TOKENS": "2048",
            "IDP0_EXTRACTION_PROMPT": "Find the totals",
            "IDP0_MAX_IMAGES_PER_REQUEST": "5",
            "IDP0_TEMPORAL_TASK_QUEUE": "docs",
        }
    )

    assert config.max_response_tokens == 2048
    assert config.extraction_prompt == "Find the totals"
    assert config.max_images_per_request == 5
    assert config.task_queue == "docs"


def test_overrides_win_over_environment() -> None:
    config = ExtractionConfig.from_env(
        {"IDP0_MAX_RESPONSE_TOKENS": "2048"},
        max_response_tokens=100,
        source_dir=None,
    )

    assert config.max_response_tokens == 100
    assert config.source_dir == "data/source"


def test_missing_token_budget_fails_fast() -> None:
    with pytest.raises(ConfigurationMissing):
        ExtractionConfig.from_env({})


def test_token_budget_can_be_optional_for_routing_only() -> None:
    config = ExtractionConfig.from_env({}, require_token_budget=False)

    assert config.max_response_tokens is None
    with pytest.raises(ConfigurationMissing):
        ExtractionConfig.from_env({"IDP0_MAX_RESPONSE_TOKENS": "0"}, require_token_budget=False)


@pytest.mark.parametrize(
    "environ",
    [
        {"IDP0_MAX_RESPONSE_TOKENS": "lots"},
        {"IDP0_MAX_RESPONSE_TOKENS": "0"},
        {"IDP0_MAX_RESPONSE_TOKENS": "10", "IDP0_READ_TIMEOUT_SECONDS": "400"},
        {"IDP0_MAX_RESPONSE_TOKENS": "10", "IDP0_MAX_IMAGES_PER_REQUEST": "0"},
    ],
)
def test_invalid_configuration(environ) -> None:
    with pytest.raises(ConfigurationMissing):
        ExtractionConfig.from_env(environ)


def test_activity_payload_round_trip() -> None:
    config = ExtractionConfig(max_response_tokens=64, small_pixels=50_000)

    restored = ExtractionConfig(**config.to_activity_payload())

    assert restored == config
    assert restored.thresholds.small_pixels == 50_000


def test_copy_applies_updates() -> None:
    config = ExtractionConfig(max_response_tokens=64)

    assert config.copy(task_queue="other").task_queue == "other"
    assert config.task_queue == "idp0"

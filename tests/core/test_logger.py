import json

import pytest
from loguru import logger

from coach_context.config.settings import Settings
from coach_context.core.logger import component_filter, setup_logger


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger.remove()
    logger.configure(patcher=None, extra={})


def test_component_tag_becomes_a_column(tmp_path):
    log_file = tmp_path / "logs" / "context.log"
    setup_logger(Settings(log_file=str(log_file)), level="DEBUG")

    logger.info("[CONTEXT] Coaching context built for user_id=u1")
    logger.info("plain message")
    logger.remove()

    lines = log_file.read_text().splitlines()
    built = next(line for line in lines if "Coaching context built" in line)
    plain = next(line for line in lines if "plain message" in line)
    assert "| CONTEXT |" in built
    assert "[CONTEXT]" not in built
    assert "| -       |" in plain


def test_components_setting_filters_tagged_messages(tmp_path):
    log_file = tmp_path / "context.log"
    setup_logger(Settings(log_file=str(log_file), log_components=["cache"]))

    logger.info("[CACHE] Cache hit: context:u1")
    logger.info("[REPO] Loaded 3 rides")
    logger.info("Snapshot printed")
    logger.remove()

    text = log_file.read_text()
    assert "Cache hit" in text
    assert "Loaded 3 rides" not in text
    assert "Snapshot printed" in text


def test_level_override_and_json_file(tmp_path):
    log_file = tmp_path / "context.jsonl"
    setup_logger(Settings(log_file=str(log_file), log_level="WARNING", log_json=True), level="DEBUG")

    logger.debug("[REPO] Loaded 0 rides")
    logger.remove()

    records = [json.loads(line)["record"] for line in log_file.read_text().splitlines()]
    repo = next(r for r in records if r["message"] == "Loaded 0 rides")
    assert repo["extra"]["component"] == "REPO"
    assert repo["level"]["name"] == "DEBUG"


def test_no_components_means_no_filter():
    assert component_filter([]) is None
    assert component_filter([" "]) is None

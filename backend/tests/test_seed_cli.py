"""Tests for the seed command line entry point."""
import importlib.util
import logging
from pathlib import Path
from types import ModuleType

import pytest

from services.seed_service import SeedOutcome

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "seed.py"


@pytest.fixture
def seed_script() -> ModuleType:
    spec = importlib.util.spec_from_file_location("seed_script", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.mark.parametrize("outcome", [SeedOutcome.SEEDED, SeedOutcome.ALREADY_SEEDED])
def test_exit_code_zero_on_success(
    seed_script: ModuleType, monkeypatch: pytest.MonkeyPatch, outcome: SeedOutcome,
) -> None:
    async def fake_populate(data_path: Path | None = None) -> SeedOutcome:
        return outcome

    monkeypatch.setattr(seed_script, "populate", fake_populate)
    assert seed_script.main([]) == 0
    assert seed_script.main(["populate"]) == 0


def test_exit_code_one_on_failure(
    seed_script: ModuleType,
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    async def failing_populate(data_path: Path | None = None) -> SeedOutcome:
        raise FileNotFoundError("favicon.png")

    monkeypatch.setattr(seed_script, "populate", failing_populate)

    with caplog.at_level(logging.ERROR, logger="seed"):
        assert seed_script.main(["populate"]) == 1

    assert "Could not import seed data" in caplog.text
    assert caplog.records[0].exc_info is not None


def test_data_option_is_passed_through(
    seed_script: ModuleType, monkeypatch: pytest.MonkeyPatch, tmp_path: Path,
) -> None:
    received = []

    async def fake_populate(data_path: Path | None = None) -> SeedOutcome:
        received.append(data_path)
        return SeedOutcome.SEEDED

    monkeypatch.setattr(seed_script, "populate", fake_populate)
    seed_script.main(["populate", "--data", str(tmp_path / "data.json")])

    assert received == [tmp_path / "data.json"]


def test_populate_hands_data_path_to_seeding(
    seed_script: ModuleType, monkeypatch: pytest.MonkeyPatch, tmp_path: Path,
) -> None:
    calls = []

    async def fake_seed_example_app(session_factory, settings, dataset=None, *, data_path=None):
        calls.append((dataset, data_path))
        return SeedOutcome.ALREADY_SEEDED

    monkeypatch.setattr(seed_script, "seed_example_app", fake_seed_example_app)

    assert seed_script.main(["populate", "--data", str(tmp_path / "missing.json")]) == 0
    assert calls == [(None, tmp_path / "missing.json")]

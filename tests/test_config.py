"""Tests for engine and tournament configuration, and game sessions."""

import sys
import threading
from pathlib import Path

import pytest
import yaml

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from engine.config import EngineConfig
from engine.session import GameSessions
from tournament.config import TournamentConfig

CONFIG_PATH = Path(__file__).parent.parent / "configs" / "engine.yaml"


class TestEngineConfig:
    """Test EngineConfig validation and YAML handling."""

    def test_defaults(self):
        config = EngineConfig()
        assert config.search_depth == 4
        assert config.personalities == ["aggressive", "defensive", "strategic", "adaptive"]
        assert config.max_reproposals == 6

    def test_rejects_bad_values(self):
        with pytest.raises(ValueError):
            EngineConfig(search_depth=0)
        with pytest.raises(ValueError):
            EngineConfig(max_reproposals=-1)
        with pytest.raises(ValueError):
            EngineConfig(personalities=[])
        with pytest.raises(ValueError):
            EngineConfig(personalities=["reckless"])
        with pytest.raises(ValueError):
            EngineConfig(weight_overrides={"strategic": {"luck": 1.0}})

    def test_weights_for(self):
        config = EngineConfig(weight_overrides={"strategic": {"block_weight": 100}})
        assert config.weights_for("strategic").block_weight == 100
        assert config.weights_for("defensive").block_weight == 1200

    def test_yaml_roundtrip(self, tmp_path):
        path = tmp_path / "engine.yaml"
        config = EngineConfig(search_depth=2, personalities=["defensive"], weight_overrides={"defensive": {"center_weight": 3.0}})
        config.to_yaml(path)
        assert EngineConfig.from_yaml(path) == config

    def test_top_level_keys(self, tmp_path):
        """A file without an engine section is read as the section itself."""
        path = tmp_path / "flat.yaml"
        path.write_text(yaml.dump({"search_depth": 3}))
        assert EngineConfig.from_yaml(path).search_depth == 3

    def test_shipped_config(self):
        config = EngineConfig.from_yaml(CONFIG_PATH)
        assert config.search_depth == 4
        assert len(config.personalities) == 4
        assert config.weights_for("adaptive").escalated_block_weight == 1000


class TestTournamentConfig:
    def test_shipped_config(self):
        config = TournamentConfig.from_yaml(CONFIG_PATH)
        assert config.games_per_match == 10
        assert config.search_depth == 2
        assert config.max_moves == 64

    def test_workers(self):
        assert TournamentConfig(parallel_workers=3).get_workers() == 3
        assert TournamentConfig().get_workers() >= 1


class TestGameSessions:
    """Test per-game locking."""

    def test_acquire_and_release(self):
        sessions = GameSessions()
        with sessions.acquire("g1"):
            assert sessions.is_busy("g1")
        assert not sessions.is_busy("g1")
        assert len(sessions) == 1

    def test_busy_game_times_out(self):
        sessions = GameSessions()
        holding = threading.Event()
        release = threading.Event()

        def hold():
            with sessions.acquire("g1"):
                holding.set()
                release.wait(5)

        worker = threading.Thread(target=hold)
        worker.start()
        holding.wait(5)
        try:
            with pytest.raises(TimeoutError):
                with sessions.acquire("g1", timeout=0.05):
                    pass
            # Other games are unaffected
            with sessions.acquire("g2", timeout=0.05):
                pass
        finally:
            release.set()
            worker.join()

    def test_discard(self):
        sessions = GameSessions()
        with sessions.acquire("g1"):
            sessions.discard("g1")
            assert len(sessions) == 1
        sessions.discard("g1")
        assert len(sessions) == 0

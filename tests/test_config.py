"""Tests for configuration and startup arguments."""

import pytest

from codefight.config import (
    GameConfig,
    InitMode,
    check_seed,
    load_env,
    parse_init_mode,
)
from codefight.errors import ConfigurationError

VALID_ARGS = ["20", "_", "*", "!", "?", "A", "a", "B", "b"]


class TestGameConfig:
    """Tests for the GameConfig dataclass."""

    def test_defaults(self):
        config = GameConfig()
        assert config.arena_size == 20
        assert config.max_programs == 4
        assert config.init_mode is InitMode.INIT_MODE_STOP

    def test_symbol_roles(self):
        config = GameConfig(general_symbols=[".", "|", "@", "+"])
        assert config.unchanged_symbol == "."
        assert config.window_symbol == "|"
        assert config.current_symbol == "@"
        assert config.next_symbol == "+"

    def test_rejects_bad_size(self):
        with pytest.raises(ConfigurationError):
            GameConfig(arena_size=0)

    def test_rejects_wrong_symbol_count(self):
        with pytest.raises(ConfigurationError):
            GameConfig(general_symbols=["_", "*"])

    def test_rejects_unpaired_symbols(self):
        with pytest.raises(ConfigurationError):
            GameConfig(program_symbols=[("A",)])


class TestStartupArguments:
    """Tests for GameConfig.from_args."""

    def test_valid(self):
        config = GameConfig.from_args(VALID_ARGS)
        assert config.arena_size == 20
        assert config.general_symbols == ["_", "*", "!", "?"]
        assert config.program_symbols == [("A", "a"), ("B", "b")]
        assert config.max_programs == 2

    def test_more_pairs(self):
        config = GameConfig.from_args(VALID_ARGS + ["C", "c"])
        assert config.max_programs == 3

    @pytest.mark.parametrize("args", [
        VALID_ARGS[:-2],                 # too few
        VALID_ARGS + ["C"],              # even count
        ["x"] + VALID_ARGS[1:],          # size not a number
        ["6"] + VALID_ARGS[1:],          # size too small
        ["1338"] + VALID_ARGS[1:],       # size too large
        VALID_ARGS[:-1] + ["A"],         # duplicate token
    ])
    def test_invalid(self, args):
        with pytest.raises(ConfigurationError, match="start up arguments are invalid"):
            GameConfig.from_args(args)


class TestInitMode:

    def test_describe(self):
        assert InitMode.INIT_MODE_STOP.describe(5) == "INIT_MODE_STOP"
        assert InitMode.INIT_MODE_RANDOM.describe(-3) == "INIT_MODE_RANDOM -3"

    def test_parse(self):
        assert parse_init_mode("INIT_MODE_RANDOM") is InitMode.INIT_MODE_RANDOM
        with pytest.raises(ConfigurationError):
            parse_init_mode("INIT_MODE_ZERO")

    def test_seed_bounds(self):
        assert check_seed(-1337) == -1337
        assert check_seed(1337) == 1337
        with pytest.raises(ConfigurationError):
            check_seed(1338)


class TestEnvironment:
    """Tests for config.env loading."""

    def test_missing_file(self, tmp_path):
        assert load_env(str(tmp_path / "missing.env")) is False

    def test_from_env_variables(self, monkeypatch):
        monkeypatch.setenv("CODEFIGHT_ARENA_SIZE", "33")
        monkeypatch.setenv("CODEFIGHT_INIT_MODE", "init_mode_random")
        monkeypatch.setenv("CODEFIGHT_SEED", "-12")

        config = GameConfig.from_env(env_file="does-not-exist.env")

        assert config.arena_size == 33
        assert config.init_mode is InitMode.INIT_MODE_RANDOM
        assert config.seed == -12

    def test_from_env_file(self, tmp_path, monkeypatch):
        # registered so the values loaded from the file are removed afterwards
        for key in ("CODEFIGHT_ARENA_SIZE", "CODEFIGHT_INIT_MODE", "CODEFIGHT_SEED"):
            monkeypatch.setenv(key, "")
            monkeypatch.delenv(key)

        env_file = tmp_path / "config.env"
        env_file.write_text("CODEFIGHT_ARENA_SIZE=15\nCODEFIGHT_SEED=7\n")

        config = GameConfig.from_env(str(env_file))

        assert config.arena_size == 15
        assert config.seed == 7
        assert config.init_mode is InitMode.INIT_MODE_STOP

    def test_bad_integer(self, monkeypatch):
        monkeypatch.setenv("CODEFIGHT_ARENA_SIZE", "big")
        with pytest.raises(ConfigurationError):
            GameConfig.from_env(env_file="does-not-exist.env")

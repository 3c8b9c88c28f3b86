import pytest
from minefield.config import DIFFICULTIES, Settings, mine_probability
from minefield.engine import ConfigurationError


def test_difficulty_table():
    assert mine_probability("Beginner") == pytest.approx(1 / 12)
    assert mine_probability("Intermediate") == pytest.approx(1 / 10)
    assert mine_probability("Advanced") == pytest.approx(1 / 8)
    assert mine_probability("Hardcore") == pytest.approx(1 / 5)
    assert set(DIFFICULTIES) == {"Beginner", "Intermediate", "Advanced", "Hardcore"}


@pytest.mark.parametrize("name", ["", None, "beginner", "Expert"])
def test_unknown_difficulty_is_beginner(name):
    assert mine_probability(name) == pytest.approx(1 / 12)


def test_settings_defaults(monkeypatch):
    for var in ("MINEFIELD_WIDTH", "MINEFIELD_HEIGHT", "MINEFIELD_DIFFICULTY", "MINEFIELD_SEED"):
        monkeypatch.delenv(var, raising=False)
    s = Settings.from_env()
    assert (s.width, s.height, s.difficulty, s.rng_seed) == (20, 20, "Beginner", None)


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("MINEFIELD_WIDTH", "12")
    monkeypatch.setenv("MINEFIELD_HEIGHT", "7")
    monkeypatch.setenv("MINEFIELD_DIFFICULTY", "Advanced")
    monkeypatch.setenv("MINEFIELD_SEED", "42")
    s = Settings.from_env()
    assert (s.width, s.height, s.difficulty, s.rng_seed) == (12, 7, "Advanced", 42)


def test_settings_rejects_bad_values(monkeypatch):
    monkeypatch.setenv("MINEFIELD_WIDTH", "wide")
    with pytest.raises(ConfigurationError) as exc:
        Settings.from_env()
    assert str(exc.value) == "invalid_minefield_width"
    monkeypatch.setenv("MINEFIELD_WIDTH", "0")
    with pytest.raises(ConfigurationError):
        Settings.from_env()

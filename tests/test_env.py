import pytest

from goblin.env import getenv_bool

KEY = "GOBLIN_TEST_FLAG"


@pytest.mark.parametrize("value", ["1", "t", "T", "TRUE", "true", "True"])
def test_true_values(monkeypatch, value):
    monkeypatch.setenv(KEY, value)
    assert getenv_bool(KEY) is True


@pytest.mark.parametrize("value", ["0", "f", "F", "FALSE", "false", "False"])
def test_false_values(monkeypatch, value):
    monkeypatch.setenv(KEY, value)
    assert getenv_bool(KEY) is False


def test_unset_is_false(monkeypatch):
    monkeypatch.delenv(KEY, raising=False)
    assert getenv_bool(KEY) is False


def test_empty_is_false(monkeypatch):
    monkeypatch.setenv(KEY, "")
    assert getenv_bool(KEY) is False


@pytest.mark.parametrize("value", ["yes", "tRuE", "on", "2", " true"])
def test_unrecognised_is_false(monkeypatch, value):
    monkeypatch.setenv(KEY, value)
    assert getenv_bool(KEY) is False
import importlib

import pytest

from config import env_consts
from config.env_consts import assert_present, parse_feature_flags


def test_assert_present_accepts_value():
    assert_present("value", "VITE_APP_NAME")


@pytest.mark.parametrize("value", [None, ""])
def test_assert_present_rejects_missing(value):
    with pytest.raises(ValueError, match="Missing required environment variable: VITE_APP_NAME"):
        assert_present(value, "VITE_APP_NAME")


def test_parse_feature_flags():
    assert parse_feature_flags("search, banners,,cart ") == ["search", "banners", "cart"]
    assert parse_feature_flags("") == []
    assert parse_feature_flags(None) == []


def test_defaults_when_unset(monkeypatch):
    for name in ("VITE_APP_NAME", "VITE_API_BASE_URL", "VITE_FEATURE_FLAGS"):
        monkeypatch.delenv(name, raising=False)
    module = importlib.reload(env_consts)
    assert module.APP_NAME == "ai-in-action-workshop-level2-ui"
    assert module.API_BASE_URL == "http://localhost:3000/api"
    assert module.FEATURE_FLAGS == ""
    assert module.FEATURE_FLAGS_LIST == []


def test_values_from_environment(monkeypatch):
    monkeypatch.setenv("VITE_APP_NAME", "storefront")
    monkeypatch.setenv("VITE_API_BASE_URL", "https://api.example.com")
    monkeypatch.setenv("VITE_FEATURE_FLAGS", "a,b")
    module = importlib.reload(env_consts)
    assert module.APP_NAME == "storefront"
    assert module.API_BASE_URL == "https://api.example.com"
    assert module.FEATURE_FLAGS_LIST == ["a", "b"]

"""
Where: multibody/binder/tests/test_config_defaults.py
What: Validate default BinderConfig values and environment overrides.
Why: Keep buffering policy defaults stable.
"""

from multibody.binder.config import BinderConfig
from multibody.binder.settings import DEFAULT_SETTINGS, ResolverSettings
from multibody.binder.models.params import Valid, Validated


def test_binder_config_defaults(monkeypatch):
    for name in (
        "BUFFERED_METHODS",
        "JSON_CONTENT_MARKER",
        "DEFAULT_CHARSET",
        "ERROR_DETAIL_INCLUDE_VALUE",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

    config = BinderConfig(_env_file=None)

    assert config.BUFFERED_METHODS == ["POST", "PUT", "PATCH"]
    assert config.JSON_CONTENT_MARKER == "json"
    assert config.DEFAULT_CHARSET == "utf-8"
    assert config.ERROR_DETAIL_INCLUDE_VALUE is True
    assert config.LOG_LEVEL == "INFO"


def test_binder_config_reads_environment(monkeypatch):
    monkeypatch.setenv("BUFFERED_METHODS", '["POST"]')
    monkeypatch.setenv("DEFAULT_CHARSET", "latin-1")
    monkeypatch.setenv("ERROR_DETAIL_INCLUDE_VALUE", "false")

    config = BinderConfig(_env_file=None)

    assert config.BUFFERED_METHODS == ["POST"]
    assert config.DEFAULT_CHARSET == "latin-1"
    assert config.ERROR_DETAIL_INCLUDE_VALUE is False


def test_resolver_settings_from_config(monkeypatch):
    monkeypatch.setenv("DEFAULT_CHARSET", "utf-16")

    settings = ResolverSettings.from_config(BinderConfig(_env_file=None))

    assert settings.default_charset == "utf-16"
    assert settings.validation_markers == (Valid, Validated)


def test_resolver_settings_overrides_win():
    settings = ResolverSettings.from_config(
        BinderConfig(_env_file=None), default_charset="ascii", validation_markers=(Valid,)
    )

    assert settings.default_charset == "ascii"
    assert settings.validation_markers == (Valid,)
    assert DEFAULT_SETTINGS.validation_markers == (Valid, Validated)

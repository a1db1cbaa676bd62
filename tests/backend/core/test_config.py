import pytest

from backend.core import config


@pytest.mark.parametrize(
    ('start_hour', 'end_hour', 'app_env', 'error_message'),
    [
        (10, 10, 'development', 'CALENDAR_START_HOUR must be earlier than CALENDAR_END_HOUR.'),
        (18, 8, 'development', 'CALENDAR_START_HOUR must be earlier than CALENDAR_END_HOUR.'),
        (7, 25, 'development', 'CALENDAR_START_HOUR must be earlier than CALENDAR_END_HOUR.'),
        (7, 24, 'Production', 'DATABASE_URL must be set in production.'),
        (7, 24, 'production', 'DATABASE_URL must be set in production.'),
    ],
)
def test_validate_runtime_config_rejects_unsafe_settings(
    start_hour: int,
    end_hour: int,
    app_env: str,
    error_message: str,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(config, 'CALENDAR_START_HOUR', start_hour)
    monkeypatch.setattr(config, 'CALENDAR_END_HOUR', end_hour)
    monkeypatch.setattr(config, 'APP_ENV', app_env)
    monkeypatch.delenv('DATABASE_URL', raising=False)

    with pytest.raises(RuntimeError) as exception_info:
        config.validate_runtime_config()

    assert str(exception_info.value) == error_message


@pytest.mark.parametrize('app_env', ['development', 'production'])
def test_validate_runtime_config_accepts_default_window(app_env: str, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'CALENDAR_START_HOUR', 7)
    monkeypatch.setattr(config, 'CALENDAR_END_HOUR', 24)
    monkeypatch.setattr(config, 'APP_ENV', app_env)
    monkeypatch.setenv('DATABASE_URL', 'sqlite:///./agenda.db')

    config.validate_runtime_config()

import pytest

from order_desk.config import Settings


def test_defaults():
    settings = Settings.from_env({})
    assert settings == Settings()


def test_reads_prefixed_variables():
    settings = Settings.from_env(
        {
            "ORDER_DESK_STORAGE": "SQL",
            "ORDER_DESK_DATABASE_URL": "sqlite:///tmp/desk.db",
            "ORDER_DESK_CURRENCY": "eur",
            "ORDER_DESK_ORDER_NUMBER_ATTEMPTS": "3",
            "ORDER_DESK_COMMIT_TIMEOUT_SECONDS": "1.5",
            "ORDER_DESK_LOG_LEVEL": "debug",
            "ORDER_DESK_PORT": "9000",
        }
    )
    assert settings.storage == "sql"
    assert settings.database_url == "sqlite:///tmp/desk.db"
    assert settings.currency == "EUR"
    assert settings.order_number_attempts == 3
    assert settings.commit_timeout_seconds == 1.5
    assert settings.log_level == "DEBUG"
    assert settings.port == 9000


def test_blank_values_fall_back_to_defaults():
    assert Settings.from_env({"ORDER_DESK_CURRENCY": "  "}).currency == "USD"


@pytest.mark.parametrize(
    "env",
    [
        {"ORDER_DESK_STORAGE": "redis"},
        {"ORDER_DESK_ORDER_NUMBER_ATTEMPTS": "0"},
        {"ORDER_DESK_PORT": "http"},
    ],
)
def test_rejects_bad_values(env):
    with pytest.raises(ValueError):
        Settings.from_env(env)

import os
import urllib.parse


def get_settings_module() -> str:
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"


def database_uri(db_config: dict) -> str:
    """SQLAlchemy URI for a mysql-connector DB_CONFIG dict. DATABASE_URL wins when set."""
    override = os.getenv("DATABASE_URL")
    if override:
        return override
    password = urllib.parse.quote_plus(db_config["password"])
    return (
        f"mysql+mysqlconnector://{db_config['user']}:{password}"
        f"@{db_config['host']}:{db_config['port']}/{db_config['database']}"
    )

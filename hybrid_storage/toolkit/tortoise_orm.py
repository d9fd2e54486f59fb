"""Tortoise ORM configuration."""

from ..settings import Settings

MODELS_MODULES = ["hybrid_storage.models"]


def get_tortoise_config(settings: Settings, db_url: str | None = None) -> dict:
    """Get the Tortoise ORM config for the `files` app.

    :param settings: the settings to take the database URL from
    :param db_url: overrides `settings.DATABASE_URL` (e.g. `sqlite://:memory:` in tests)

    """
    return {
        "connections": {"default": db_url or settings.DATABASE_URL},
        "apps": {
            "files": {
                "models": MODELS_MODULES,
                "default_connection": "default",
            },
        },
        "use_tz": True,
        "timezone": "UTC",
    }

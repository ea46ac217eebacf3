import os


def get_settings_module() -> str:
    # Settings module chosen by APP_ENV, development by default
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"

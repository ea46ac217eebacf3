import pytest

from timesheet_portal.database.connection import DatabaseConnection, DBConfig


def test_config_from_settings_applies_defaults():
    config = DBConfig.from_settings({"host": "db", "user": "app", "password": "pw", "database": "timesheet_db"})
    assert config.port == 3306
    assert config.connect_timeout == 10


@pytest.mark.parametrize("settings", [None, {}, {"host": "db", "user": "app", "password": "pw"}])
def test_config_from_settings_requires_connection_fields(settings):
    with pytest.raises(ValueError):
        DBConfig.from_settings(settings)


def test_one_factory_per_config():
    config = DBConfig(host="db", port=3306, user="app", password="pw", database="timesheet_db")
    same = DBConfig(host="db", port=3306, user="app", password="pw", database="timesheet_db")
    other = DBConfig(host="db2", port=3306, user="app", password="pw", database="timesheet_db")

    assert DatabaseConnection.for_config(config) is DatabaseConnection.for_config(same)
    assert DatabaseConnection.for_config(config) is not DatabaseConnection.for_config(other)

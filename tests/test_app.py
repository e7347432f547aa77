from datetime import datetime, timedelta, timezone

from kala import db
from kala.models import Category, Product
from kala.seed import seed_database, seed_command
from kala.services import local_now


class TestAppFactory:
    def test_test_config_overrides(self, app):
        assert app.config["TESTING"] is True
        assert app.config["SQLALCHEMY_DATABASE_URI"] == "sqlite:///:memory:"
        assert app.config["TIMEZONE"] == "Asia/Kolkata"

    def test_blueprints_registered(self, app):
        assert "api" in app.blueprints
        assert "main" in app.blueprints


class TestSeed:
    def test_seed_is_idempotent(self, app):
        with app.app_context():
            assert seed_database() is False
            assert Product.query.count() == 4
            assert Category.query.count() == 4

    def test_seed_command(self, app):
        runner = app.test_cli_runner()

        result = runner.invoke(seed_command)

        assert "already seeded" in result.output

    def test_seed_fresh_database(self, app):
        with app.app_context():
            db.drop_all()
            assert seed_database() is True
            assert Product.query.filter_by(barcode="87654321").one().quantity == 20


class TestClock:
    def test_local_now_uses_store_timezone(self, app):
        with app.app_context():
            now = local_now()

        ist = datetime.now(timezone(timedelta(hours=5, minutes=30))).replace(tzinfo=None)
        assert now.tzinfo is None
        assert abs((ist - now).total_seconds()) < 5
        assert now.microsecond == 0

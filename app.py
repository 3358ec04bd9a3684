from __future__ import annotations

import logging
import os
from pathlib import Path

import click
from flask import Flask, jsonify

from config import auto_rotation_enabled
from domain.errors import RotationError
from services import advance
from services import db as db_service


BLUEPRINTS = [
    ("blueprints.interns.routes", "bp"),
    ("blueprints.rotations.routes", "bp"),
    ("blueprints.units.routes", "bp"),
    ("blueprints.settings.routes", "bp"),
    ("blueprints.reports.routes", "bp"),
]


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_mapping(
        DATABASE=os.path.join(app.instance_path, "rotations.sqlite"),
        JSON_SORT_KEYS=False,
        AUTO_INIT_DB=True,
        SEED_DATABASE=True,
        AUTO_ROTATION=auto_rotation_enabled(),
        EXTENSION_GRACE_DAYS=7,
        TODAY=None,
        LOG_LEVEL="INFO",
    )

    if test_config:
        app.config.update(test_config)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    Path(app.instance_path).mkdir(parents=True, exist_ok=True)

    for import_path, attr in BLUEPRINTS:
        module = __import__(import_path, fromlist=[attr])
        blueprint = getattr(module, attr)
        app.register_blueprint(blueprint)

    @app.errorhandler(RotationError)
    def handle_rotation_error(exc: RotationError):
        return jsonify({"error": str(exc)}), exc.status_code

    @app.route("/healthz")
    def healthcheck() -> tuple[str, int]:
        return "OK", 200

    app.teardown_appcontext(db_service.close_db)

    @app.cli.command("init-db")
    @click.option("--force", is_flag=True, help="Delete the database file before creating the schema.")
    def init_db_command(force: bool) -> None:
        """Initialize the SQLite schema and seed default units."""
        database_path = Path(app.config["DATABASE"])
        if force and database_path.exists():
            db_service.close_db(None)
            database_path.unlink()
        db_service.initialize_schema()
        db_service.seed_database()
        click.echo("Database initialized and seeded.")

    @app.cli.command("advance-all")
    def advance_all_command() -> None:
        """Create the next upcoming rotation for every active intern."""
        result = advance.advance_all()
        click.echo(f"advanced {len(result.succeeded)} interns, created {result.created} rotations")
        for intern_id, message in result.failed:
            click.echo(f"  intern {intern_id} failed: {message}", err=True)

    @app.cli.command("generate-all")
    @click.option("--start-date", required=True, help="First day (YYYY-MM-DD) of the regenerated schedule.")
    def generate_all_command(start_date: str) -> None:
        """Regenerate automatic rotations for all active interns from START_DATE."""
        result = advance.generate_all(start_date)
        click.echo(f"generated {result.created} rotations for {len(result.succeeded)} interns")
        for intern_id, message in result.failed:
            click.echo(f"  intern {intern_id} failed: {message}", err=True)

    if app.config.get("AUTO_INIT_DB", True):
        with app.app_context():
            db_service.initialize_schema()
            if app.config.get("SEED_DATABASE", True):
                db_service.seed_database()

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True)

"""Application factory for the rotaplan web backend."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import click
from flask import Flask, jsonify
from flask.typing import ResponseReturnValue

from .blueprints.directory.routes import bp as directory_bp
from .blueprints.favorites.routes import bp as favorites_bp
from .blueprints.plans.routes import bp as plans_bp
from .blueprints.preferences.routes import bp as preferences_bp
from .blueprints.rotation.routes import bp as rotation_bp
from .config import DEFAULT_CONFIG, load_config, settings_path
from .dao import db as db_module
from .services import rotation_service
from .services.errors import ServiceError

logger = logging.getLogger(__name__)

BLUEPRINTS = [directory_bp, plans_bp, rotation_bp, preferences_bp, favorites_bp]


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(test_config: dict[str, Any] | None = None) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_mapping(DEFAULT_CONFIG)

    path = settings_path(dict(app.config, **(test_config or {})))
    if path:
        app.config.update(load_config(path))

    if test_config:
        app.config.update(test_config)

    database_path = app.config.get("DATABASE", Path(app.instance_path) / "rotaplan.sqlite")
    app.config["DATABASE"] = str(database_path)
    Path(app.instance_path).mkdir(parents=True, exist_ok=True)

    configure_logging(app.config["LOG_LEVEL"])

    db_module.init_app(app)
    if app.config.get("AUTO_INIT_DB", True):
        db_module.ensure_schema(app)

    for blueprint in BLUEPRINTS:
        app.register_blueprint(blueprint)

    @app.errorhandler(ServiceError)
    def handle_service_error(exc: ServiceError) -> ResponseReturnValue:
        if exc.status >= 500:
            logger.error("%s: %s", exc.code, exc.message)
        return jsonify(exc.to_dict()), exc.status

    @app.errorhandler(db_module.DatabaseError)
    def handle_database_error(exc: db_module.DatabaseError) -> ResponseReturnValue:
        logger.exception("Database failure")
        return jsonify({"error": {"code": "DATABASE_ERROR", "message": str(exc)}}), 500

    @app.get("/healthz")
    def healthcheck() -> tuple[str, int]:
        return "OK", 200

    @app.cli.command("rotation-generate")
    @click.argument("pattern_id", type=int)
    @click.argument("start", type=click.DateTime(formats=["%Y-%m-%d"]))
    @click.argument("end", type=click.DateTime(formats=["%Y-%m-%d"]))
    @click.option("--preview", is_flag=True, help="Show the shifts without storing them.")
    def rotation_generate_command(pattern_id: int, start, end, preview: bool) -> None:
        """Generate rotation history for PATTERN_ID between START and END."""
        try:
            result = rotation_service.generate(
                {
                    "patternId": pattern_id,
                    "startDate": start.date().isoformat(),
                    "endDate": end.date().isoformat(),
                    "preview": preview,
                }
            )
        except ServiceError as exc:
            raise click.ClickException(exc.message) from exc
        for entry in result["entries"]:
            click.echo(f"{entry['shiftDate']} {entry['shiftType']} {entry['userId']}")
        verb = "Previewed" if preview else "Generated"
        click.echo(f"{verb} {len(result['entries'])} shift(s), skipped {result['skipped']}.")

    return app

import logging
import os

from dotenv import load_dotenv
from flask import Flask, render_template, session

from dao import DaoError
from entities import User
from models import db
from routes.commands import LOCALE_ATTR, LOGGED_USER_ATTR, build_dispatcher
from routes.controller import create_controller
from services import build_services

load_dotenv()

log = logging.getLogger(__name__)


def create_app(test_config=None):
    app = Flask(__name__)
    # Configure the database and the hall layout from the environment
    app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL", "sqlite:///cinema.db")
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config['SECRET_KEY'] = os.getenv("SECRET_KEY")
    app.config["PEPPER"] = os.getenv("PEPPER")
    app.config["HALL_ROWS"] = int(os.getenv("HALL_ROWS", "5"))
    app.config["HALL_SEATS"] = int(os.getenv("HALL_SEATS", "8"))
    app.config["TICKET_PRICE"] = int(os.getenv("TICKET_PRICE", "10"))
    app.config["LOG_LEVEL"] = os.getenv("LOG_LEVEL", "INFO")
    app.config["DEFAULT_LOCALE"] = os.getenv("DEFAULT_LOCALE", "en")
    if test_config:
        app.config.update(test_config)

    if app.config["PEPPER"] is None:
        raise RuntimeError("PEPPER environment variable is not set.")

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    db.init_app(app)
    with app.app_context():
        db.create_all()
        services = build_services(db.engine, app.config)

    app.extensions["services"] = services
    app.register_blueprint(create_controller(build_dispatcher(services)))

    @app.context_processor
    def inject_user_context():
        return {
            "logged_user": User.from_session(session.get(LOGGED_USER_ATTR)),
            "locale": session.get(LOCALE_ATTR, app.config["DEFAULT_LOCALE"]),
        }

    @app.errorhandler(DaoError)
    def handle_dao_error(exc):
        log.error("Request failed: %s", exc)
        return render_template("error.html", message=str(exc)), 500

    return app


if __name__ == '__main__':
    create_app().run(debug=True)

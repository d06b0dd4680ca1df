import logging
import os

from flask import Flask

from .controllers.bookings import bp as bookings_bp
from .controllers.notifications import bp as notifications_bp
from .controllers.vehicles import bp as vehicles_bp
from .controllers.views import bp as views_bp
from .exceptions import BookingError
from .models.store import Store
from .utils.decorators import booking_error_response


def create_app(config=None):
    app = Flask(__name__)
    app.config.from_mapping(
        SECRET_KEY=os.getenv("SECRET_KEY", "dev-secret-change-me"),
        DATA_PATH=os.getenv("DATA_PATH"),
        RENTAL_TIMEZONE=os.getenv("RENTAL_TIMEZONE", "UTC"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
    )
    if config:
        app.config.update(config)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    Store.instance(app.config["DATA_PATH"])  # load data.pkl or start empty
    app.register_blueprint(views_bp)
    app.register_blueprint(bookings_bp)
    app.register_blueprint(vehicles_bp)
    app.register_blueprint(notifications_bp)
    app.register_error_handler(BookingError, booking_error_response)

    return app

"""
Sudoku Duel Server Application Package

Turn-based multiplayer sudoku: rooms of two or three players fill a shared
board one numeral per turn, losing a life on every wrong placement.
"""

import random
from dataclasses import dataclass
from typing import Optional

from flask import Flask
from flask_cors import CORS

from .config import Config
from .services import GameService, LobbyService, ProfileService
from .storage import MemoryStorage, MongoStorage, Storage


@dataclass
class Services:
    """Explicitly constructed services sharing one storage actor."""
    storage: Storage
    profiles: ProfileService
    lobby: LobbyService
    games: GameService


def build_services(config_class=Config,
                   storage: Optional[Storage] = None,
                   generator=None,
                   rng: Optional[random.Random] = None,
                   clock=None) -> Services:
    """
    Wire the services around a storage actor.

    Args:
        config_class: Configuration class; ``MONGO_URI`` selects MongoDB
        storage: Storage actor to use instead of one built from config
        generator: Puzzle generator override
        rng: Random source shared by the services
        clock: Time source shared by the services

    Returns:
        Services container
    """
    if storage is None:
        if config_class.MONGO_URI:
            storage = MongoStorage.from_uri(config_class.MONGO_URI, config_class.MONGO_DB_NAME)
        else:
            storage = MemoryStorage()

    timing = {'clock': clock} if clock else {}
    games = GameService(storage, generator=generator, rng=rng, **timing)
    lobby = LobbyService(storage, games, rng=rng, **timing)
    profiles = ProfileService(storage, rng=rng, **timing)
    return Services(storage=storage, profiles=profiles, lobby=lobby, games=games)


def create_app(config_class=Config, services: Optional[Services] = None) -> Flask:
    """
    Application factory pattern for creating Flask app instances.

    Args:
        config_class: Configuration class to use
        services: Prebuilt services; built from ``config_class`` when omitted

    Returns:
        Flask application instance with all extensions initialized
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    CORS(app)
    app.extensions['sudoku_duel'] = services or build_services(config_class)

    # Register blueprints
    from .controllers.game_controller import game_bp
    from .controllers.profile_controller import profile_bp
    from .controllers.room_controller import room_bp

    app.register_blueprint(profile_bp, url_prefix='/api')
    app.register_blueprint(room_bp, url_prefix='/api')
    app.register_blueprint(game_bp, url_prefix='/api')

    return app

"""
Sudoku Duel Server - Main Entry Point

Builds the services, starts the expired-room cleanup worker and runs the
Flask application.
"""

import os
import threading
import time

from sudoku_duel import build_services, create_app
from sudoku_duel.config import config, validate_settings
from sudoku_duel.utils.game_logger import game_logger


def room_cleanup_worker(lobby_service, interval_seconds: int):
    """
    Background worker that periodically deletes rooms past their expiry.
    MongoDB's TTL index does the same on its own schedule; this keeps the
    in-memory store bounded too.
    """
    game_logger.logger.info("Room cleanup worker started")
    while True:
        try:
            removed = lobby_service.cleanup_expired_rooms()
            if removed:
                print(f"Room cleanup removed {removed} expired room(s)")
        except Exception as e:
            game_logger.logger.error(f"Error in room cleanup worker: {e}")

        time.sleep(interval_seconds)


def main():
    """Main function to initialize services and start the server."""
    config_class = config.get(os.getenv('APP_ENV', 'default'), config['default'])
    services = None
    try:
        validate_settings()

        print("Initializing services...")
        services = build_services(config_class)
        storage_name = type(services.storage).__name__
        print(f"✓ Services initialized ({storage_name})")

        print("Creating Flask application...")
        app = create_app(config_class, services)
        print("✓ Flask application created successfully")

        cleanup_thread = threading.Thread(
            target=room_cleanup_worker,
            args=(services.lobby, config_class.CLEANUP_INTERVAL_SECONDS),
            daemon=True
        )
        cleanup_thread.start()
        print(f"✓ Room cleanup worker started - checking every {config_class.CLEANUP_INTERVAL_SECONDS} seconds")

        game_logger.logger.info(f"Sudoku Duel Server starting with {storage_name}")

        print(f"\nStarting Sudoku Duel Server on {config_class.HOST}:{config_class.PORT}")
        print(f"Debug mode: {config_class.DEBUG}")
        print("=" * 50)

        app.run(host=config_class.HOST, port=config_class.PORT, debug=config_class.DEBUG, use_reloader=False)

    except KeyboardInterrupt:
        print("\nServer shutting down...")
        game_logger.logger.info("Sudoku Duel Server shutting down (KeyboardInterrupt)")
    except Exception as e:
        print(f"Error starting server: {e}")
        game_logger.logger.error(f"Error starting server: {e}")
        raise
    finally:
        if services is not None:
            services.storage.close()


if __name__ == '__main__':
    main()

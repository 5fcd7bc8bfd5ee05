#!/usr/bin/env python3
"""Main entry point for the Lesson Player service."""
import argparse
import logging
import signal
import sys
from typing import Optional

import uvicorn

from config import API_HOST, API_PORT, AUTOPLAY_ON_OPEN, LESSON_CONTENT_DIR

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


class LessonPlayer:
    """Main application controller."""

    def __init__(
        self,
        content_dir: Optional[str] = LESSON_CONTENT_DIR,
        autoplay: bool = AUTOPLAY_ON_OPEN,
    ):
        self.content_dir = content_dir
        self.autoplay = autoplay

        # Components
        self.content_manager = None
        self.session_manager = None

    def initialize(self) -> bool:
        """Initialize all components."""
        logger.info("Initializing Lesson Player...")

        from education import ContentManager, SessionManager

        self.content_manager = ContentManager(self.content_dir)
        if not self.content_manager.load_content():
            logger.error("Lesson content could not be loaded")
            return False

        if self.content_manager.lesson_count == 0:
            logger.warning(f"No lessons found in {self.content_manager.content_dir}")

        self.session_manager = SessionManager(
            self.content_manager,
            autoplay=self.autoplay,
        )

        logger.info("Initialization complete")
        return True

    def setup_api(self):
        """Set up API with component references."""
        from api.routes import set_app_state
        from api.websocket import ws_manager

        set_app_state(
            content_manager=self.content_manager,
            session_manager=self.session_manager,
        )
        self.session_manager.add_listener(ws_manager.publish)

    def stop(self):
        """Close every open session."""
        logger.info("Stopping Lesson Player...")
        if self.session_manager:
            self.session_manager.close_all()
        logger.info("Lesson Player stopped")


# Global player instance
player: Optional[LessonPlayer] = None


def signal_handler(signum, frame):
    """Handle shutdown signals."""
    logger.info(f"Received signal {signum}")
    if player:
        player.stop()
    sys.exit(0)


def main():
    """Main entry point."""
    global player

    parser = argparse.ArgumentParser(description="Lesson Player")
    parser.add_argument(
        "--host", default=API_HOST, help=f"API host (default: {API_HOST})"
    )
    parser.add_argument(
        "--port", type=int, default=API_PORT, help=f"API port (default: {API_PORT})"
    )
    parser.add_argument(
        "--content-dir", type=str, default=LESSON_CONTENT_DIR,
        help="Directory holding lessons/*.json (default: bundled assets)"
    )
    parser.add_argument(
        "--no-autoplay", action="store_true",
        help="Do not start scene playback when a lesson is opened"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )

    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    player = LessonPlayer(
        content_dir=args.content_dir,
        autoplay=AUTOPLAY_ON_OPEN and not args.no_autoplay,
    )

    if not player.initialize():
        logger.error("Failed to initialize, exiting")
        sys.exit(1)

    player.setup_api()

    from api.routes import create_app

    app = create_app()

    logger.info(f"Starting API server on {args.host}:{args.port}")
    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        log_level="info" if not args.debug else "debug",
    )


if __name__ == "__main__":
    main()

"""Application entry point for the Tunesmith backend server."""

from tunesmith.app import App
from tunesmith.config import Config
from tunesmith.logging import setup_logging
from tunesmith.web.runner import run_server


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()

import argparse
import logging

import uvicorn

from muweb.app import create_app
from muweb.config import CONFIG_FILE, DEFAULT_CONFIG, load_config, save_config

log = logging.getLogger("muweb")


def build_parser():
    parser = argparse.ArgumentParser(prog="muweb", description="MU Online website API")
    parser.add_argument("--config", default=CONFIG_FILE, help="Path to the JSON config file")
    commands = parser.add_subparsers(dest="command")

    serve = commands.add_parser("serve", help="Run the API server")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    commands.add_parser("init-config", help="Write the default config file")
    return parser


def serve(config, host=None, port=None):
    level = str(config.get("log_level", "INFO")).upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    host = host or config["server_host"]
    port = port or int(config["server_port"])
    log.info("Starting server on %s:%s", host, port)
    uvicorn.run(create_app(config), host=host, port=port, log_level=level.lower())


def main(argv=None):
    args = build_parser().parse_args(argv)

    if args.command == "init-config":
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
        if not save_config(DEFAULT_CONFIG, args.config):
            return 1
        return 0

    config = load_config(args.config)
    serve(config, getattr(args, "host", None), getattr(args, "port", None))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

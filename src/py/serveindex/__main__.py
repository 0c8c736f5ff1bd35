import argparse
import os

import uvicorn

from . import config
from .bridge.asgi import asgi
from .utils.logging import info, warning

UVICORN_LOG_LEVELS: tuple[str, ...] = ("critical", "error", "warning", "info", "debug")


def main(args: list[str] | None = None) -> None:
	"""Serves listings of a directory over HTTP."""
	parser = argparse.ArgumentParser(
		prog="serveindex", description="Serves browsable directory listings"
	)
	parser.add_argument("root", nargs="?", default=".", help="Directory to list")
	parser.add_argument("--host", default=config.HOST)
	parser.add_argument("--port", type=int, default=config.PORT)
	parser.add_argument("--view", choices=("tiles", "details"), default=config.VIEW)
	parser.add_argument("--icons", action="store_true", help="Display file icons")
	parser.add_argument(
		"--no-hidden", action="store_true", help="Leave out dotfiles from listings"
	)
	parser.add_argument("--stylesheet", help="Path to a CSS file")
	parser.add_argument("--template", help="Path to an HTML template")
	options = parser.parse_args(args)
	if not os.path.isdir(options.root):
		warning(
			"Root is not a directory, every request will be a 404", Root=options.root
		)
	app = asgi(
		options.root,
		view=options.view,
		icons=options.icons,
		hidden=not options.no_hidden,
		stylesheet=options.stylesheet,
		template=options.template,
	)
	info(
		"Serving directory listings",
		Root=app.index.root,
		Host=options.host,
		Port=options.port,
	)
	uvicorn.run(
		app,
		host=options.host,
		port=options.port,
		log_level=config.LOG_LEVEL
		if config.LOG_LEVEL in UVICORN_LOG_LEVELS
		else "info",
	)


if __name__ == "__main__":
	main()

# EOF

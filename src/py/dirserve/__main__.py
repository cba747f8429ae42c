import argparse
import sys
from pathlib import Path

from . import config
from .config import ServerConfig
from .files.model import StartupInvalidRoot
from .model import Service
from .server import run
from .services.files import FileService
from .services.static import StaticService
from .utils.logging import info, error


def directory(path: str) -> Path:
	"""Argument type for the served directory, which must exist."""
	p = Path(path).expanduser()
	if p.is_dir():
		return p
	else:
		raise argparse.ArgumentTypeError(f"Directory does not exist: {path}")


def parser() -> argparse.ArgumentParser:
	res = argparse.ArgumentParser(
		prog="dirserve",
		description="Serves a directory tree over HTTP, with listings for directories",
		formatter_class=argparse.ArgumentDefaultsHelpFormatter,
	)
	res.add_argument(
		"-d",
		"--dir",
		action="store",
		dest="dir",
		type=directory,
		help="The directory to serve",
		default=config.ROOT,
	)
	res.add_argument(
		"-p",
		"--port",
		action="store",
		dest="port",
		type=int,
		help="The port to listen on",
		default=config.PORT,
	)
	res.add_argument(
		"-H",
		"--host",
		action="store",
		dest="host",
		help="The address to listen on",
		default=config.HOST,
	)
	res.add_argument(
		"-s",
		"--static",
		action="store",
		dest="static",
		help="Also serves files without listings under the given prefix, like /static",
		default=None,
	)
	res.add_argument(
		"-q",
		"--quiet",
		action="store_true",
		dest="quiet",
		help="Does not log requests",
	)
	return res


def main(args: list[str] | None = None) -> None:
	options = parser().parse_args(sys.argv[1:] if args is None else args)
	try:
		server_config = ServerConfig.Make(options.dir, options.port, options.host)
	except StartupInvalidRoot as e:
		error(str(e), "STARTUPROOT")
		sys.exit(1)
	info("Serving", icon="📂", Root=str(server_config.root), Port=server_config.port)
	services: list[Service] = [FileService(server_config)]
	if options.static:
		services.append(StaticService(server_config, options.static))
	run(
		*services,
		host=server_config.host,
		port=server_config.port,
		logRequests=config.LOG_REQUESTS and not options.quiet,
	)


if __name__ == "__main__":
	main()

# EOF

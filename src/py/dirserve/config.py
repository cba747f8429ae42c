from dataclasses import dataclass
from os import getenv
from pathlib import Path

from .files.model import StartupInvalidRoot

PORT: int = int(getenv("PORT", 8080))

# All interfaces by default
HOST: str = getenv("HOST", "0.0.0.0")  # nosec: B104

ROOT: str = getenv("DIRSERVE_ROOT", ".")

LOG_REQUESTS: bool = getenv("DIRSERVE_LOG_REQUESTS", "1") == "1"


@dataclass(slots=True, frozen=True)
class ServerConfig:
	"""The configuration shared by every request handler, which never
	changes once the server is started."""

	root: Path
	port: int = PORT
	host: str = HOST

	@staticmethod
	def Make(
		root: str | Path = ROOT, port: int = PORT, host: str = HOST
	) -> "ServerConfig":
		"""Creates the configuration, making the root canonical. Raises
		`StartupInvalidRoot` when the root is not an existing directory."""
		path: Path = Path(root).expanduser()
		if not path.is_dir():
			raise StartupInvalidRoot(
				str(root), "does not exist" if not path.exists() else "not a directory"
			)
		return ServerConfig(root=path.resolve(strict=True), port=port, host=host)


# EOF

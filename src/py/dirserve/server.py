import asyncio
import errno
import socket
import threading
from dataclasses import dataclass
from signal import SIGINT, SIGTERM
from typing import Any, Callable, NamedTuple

from .config import HOST, PORT, LOG_REQUESTS
from .http.model import HTTPProcessingStatus, HTTPRequest, HTTPResponse
from .http.parser import HTTPParser
from .model import Application, Service, mount
from .routing import awaited
from .utils.logging import debug, event, exception, info, logged, warning, error


@dataclass(slots=True)
class ServerState:
	isRunning: bool = True

	def stop(self) -> None:
		info("Server stopping…")
		self.isRunning = False

	def onException(
		self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]
	) -> None:
		e = context.get("exception")
		if e:
			exception(e)


class ServerOptions(NamedTuple):
	host: str = "0.0.0.0"  # nosec: B104
	port: int = 8080
	backlog: int = 1_024
	# How often, in seconds, the accept loop checks the stop condition
	polling: float = 1.0
	readsize: int = 4_096
	# Seconds after which an idle connection is closed
	keepalive: float = 30.0
	logRequests: bool = True
	condition: Callable[[], bool] | None = None
	stopSignals: bool = True


OPTIONS: ServerOptions = ServerOptions()

# Sent when the application could not produce any response
SERVER_ERROR: bytes = (
	b"HTTP/1.1 500 Internal Server Error\r\n"
	b"Content-Type: text/plain\r\n"
	b"Content-Length: 21\r\n"
	b"Connection: close\r\n"
	b"\r\n"
	b"Internal server error"
)


class AIOSocketServer:
	"""Serves an application over non-blocking sockets, running one task
	per client connection on the event loop."""

	@staticmethod
	async def Process(app: Application, request: HTTPRequest) -> HTTPResponse | None:
		"""Returns the application's response to the request, or `None` if
		the handler failed unexpectedly."""
		try:
			return await awaited(app.process(request))
		except Exception as e:
			exception(e, f"Handler failed for {request.method} {request.path}")
			return None

	@classmethod
	async def OnConnection(
		cls,
		app: Application,
		client: socket.socket,
		*,
		loop: asyncio.AbstractEventLoop,
		options: ServerOptions,
	) -> None:
		"""Reads requests from the client and answers them in order, until
		the client closes the connection, stays idle for too long, or asks
		for the connection to be closed."""
		parser: HTTPParser = HTTPParser()
		buffer: bytearray = bytearray(options.readsize)
		status: HTTPProcessingStatus = HTTPProcessingStatus.Processing
		served: int = 0
		try:
			while status is HTTPProcessingStatus.Processing:
				try:
					n: int = await asyncio.wait_for(
						loop.sock_recv_into(client, buffer), timeout=options.keepalive
					)
				except asyncio.TimeoutError:
					status = HTTPProcessingStatus.Timeout
					break
				if not n:
					status = HTTPProcessingStatus.NoData
					break
				# A single read may hold more than one pipelined request
				for atom in parser.feed(bytes(buffer[:n])):
					if not isinstance(atom, HTTPRequest):
						continue
					if options.logRequests:
						event(atom.method, atom.path)
					res = await cls.Process(app, atom)
					if res is None:
						warning(
							"Application did not return a response",
							Method=atom.method,
							Path=atom.path,
						)
						await loop.sock_sendall(client, SERVER_ERROR)
						status = HTTPProcessingStatus.Complete
						break
					await loop.sock_sendall(client, res.head())
					if res.payload:
						await loop.sock_sendall(client, res.payload)
					served += 1
					if not atom.keepAlive:
						status = HTTPProcessingStatus.Complete
						break
		except (BrokenPipeError, ConnectionResetError):
			# The client went away, which only affects this connection
			status = HTTPProcessingStatus.NoData
		except Exception as e:
			exception(e)
		finally:
			logged(debug) and debug(
				"Connection closed",
				Client=f"{id(client):x}",
				Status=status.name,
				Served=served,
			)
			client.close()

	@classmethod
	async def Serve(
		cls,
		app: Application,
		options: ServerOptions = OPTIONS,
	) -> None:
		"""Accepts connections until the server is stopped, either by a
		signal or when `options.condition` returns false."""
		server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
		server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
		server.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
		try:
			server.bind((options.host, options.port))
		except OSError as e:
			error(
				f"Unable to bind to {options.host}:{options.port}, aborting.",
				"HOSTPORTERR",
			)
			server.close()
			raise e
		server.listen(options.backlog)
		server.setblocking(False)

		loop = asyncio.get_running_loop()
		state = ServerState()
		connections: set[asyncio.Task[None]] = set()
		# Signal handlers can only be installed from the main thread
		if options.stopSignals and threading.current_thread() is threading.main_thread():
			for sig in (SIGINT, SIGTERM):
				loop.add_signal_handler(sig, state.stop)
		loop.set_exception_handler(state.onException)

		info("Server listening", icon="🚀", Host=options.host, Port=options.port)
		try:
			while state.isRunning and (not options.condition or options.condition()):
				try:
					client, _ = await asyncio.wait_for(
						loop.sock_accept(server), timeout=options.polling or 1.0
					)
				except asyncio.TimeoutError:
					continue
				except OSError as e:
					if e.errno == errno.EMFILE:
						# Too many open files, we wait for connections to close
						await asyncio.sleep(0.1)
					else:
						exception(e)
					continue
				client.setblocking(False)
				task = loop.create_task(
					cls.OnConnection(app, client, loop=loop, options=options)
				)
				connections.add(task)
				task.add_done_callback(connections.discard)
		finally:
			server.close()
			for task in connections:
				task.cancel()
			await asyncio.gather(*connections, return_exceptions=True)


def run(
	*components: Application | Service,
	host: str = HOST,
	port: int = PORT,
	backlog: int = OPTIONS.backlog,
	condition: Callable[[], bool] | None = None,
	polling: float = OPTIONS.polling,
	logRequests: bool = LOG_REQUESTS,
	keepalive: float = OPTIONS.keepalive,
	stopSignals: bool = OPTIONS.stopSignals,
) -> None:
	"""Mounts the given services and serves them until stopped."""
	app = mount(*components)
	options = ServerOptions(
		host=host,
		port=port,
		backlog=backlog,
		polling=polling,
		keepalive=keepalive,
		logRequests=logRequests,
		condition=condition,
		stopSignals=stopSignals,
	)
	try:
		asyncio.run(AIOSocketServer.Serve(app, options))
	except KeyboardInterrupt:
		event("ManualShutdown")
	event("EOK")


# EOF

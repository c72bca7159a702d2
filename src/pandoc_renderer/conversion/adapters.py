import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from ..config import PANDOC_TIMEOUT_SEC
from .errors import ConversionFailed, SpawnError
from .interfaces import ConversionRequest, ConverterGateway

logger = logging.getLogger(__name__)

READ_CHUNK = 64 * 1024


def build_pandoc_args(request: ConversionRequest) -> list[str]:
    """Return pandoc arguments reading Markdown on stdin and writing to stdout.

    --standalone and --embed-resources are html-only and are never passed for
    other targets.
    """
    args = ["--from", "markdown", "--to", request.to, "--output", "-"]
    if request.to == "html":
        if request.standalone:
            args.append("--standalone")
        if request.embed_resources:
            args.append("--embed-resources")
    return args


async def _feed(stream: asyncio.StreamWriter, data: bytes) -> None:
    try:
        stream.write(data)
        await stream.drain()
    except (BrokenPipeError, ConnectionResetError):
        # Engine closed stdin early; its exit status reports the failure
        logger.debug("engine stopped reading stdin before end of input")
    finally:
        stream.close()


async def _drain(stream: asyncio.StreamReader, sink: bytearray) -> None:
    while chunk := await stream.read(READ_CHUNK):
        sink.extend(chunk)


def _kill(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass


class PandocConverter(ConverterGateway):
    """Runs the conversion engine as a child process per request.

    Input is written while stdout and stderr are drained, all concurrently, so
    a full pipe buffer on either side can never stall the child. The whole
    exchange is bounded by a single wall-clock timeout, after which the child
    is sent SIGKILL.
    """

    def __init__(
        self,
        command: Sequence[str] = ("pandoc",),
        *,
        timeout_sec: float = PANDOC_TIMEOUT_SEC,
    ) -> None:
        if not command:
            raise ValueError("engine command must not be empty")
        self._command = list(command)
        self._timeout = timeout_sec
        self._name = Path(self._command[0]).name

    @property
    def timeout_sec(self) -> float:
        return self._timeout

    async def convert(self, request: ConversionRequest) -> bytes:
        argv = [*self._command, *build_pandoc_args(request)]
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error("could not start %s: %s", self._name, e)
            raise SpawnError(str(e)) from e

        stdout = bytearray()
        stderr = bytearray()
        # Readers are never cancelled by the timeout: after a kill they run to
        # EOF, which is what lets proc.wait() resolve.
        exchange = asyncio.gather(
            _feed(proc.stdin, request.text.encode("utf-8")),
            _drain(proc.stdout, stdout),
            _drain(proc.stderr, stderr),
        )
        try:
            await asyncio.wait_for(proc.wait(), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning("%s pid=%s exceeded %.1fs; killing", self._name, proc.pid, self._timeout)
        finally:
            _kill(proc)
            await asyncio.gather(exchange, proc.wait())

        code = proc.returncode
        if code != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            if not message:
                message = f"{self._name} exited with code {code}"
            logger.warning("%s exited with code %s", self._name, code)
            raise ConversionFailed(message, returncode=code)
        return bytes(stdout)

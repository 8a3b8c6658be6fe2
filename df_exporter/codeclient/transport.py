"""
CodeClient API Transport

Keeps one WebSocket connection to the local CodeClient API, sends batches
of commands over it and reads CodeClient's answers during a short response
window to decide whether a batch was rejected.

See https://github.com/DFOnline/CodeClient/wiki/API
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence

import aiohttp
from aiohttp import WSMsgType

from df_exporter.codeclient.responses import extract_message_texts, first_rejection
from df_exporter.config import DEFAULT_CODECLIENT_URL
from df_exporter.errors import (
    RemoteRejection,
    TransportConnectError,
    TransportSendError,
)

DEFAULT_RESPONSE_WINDOW_MS = 1500

CONNECT_FAILED_MESSAGE = (
    'Failed to connect to CodeClient API. Enable the API in CodeClient settings '
    'and make sure CodeClient is running.'
)
CONNECT_CLOSED_MESSAGE = 'CodeClient API connection closed before it could be established.'
SEND_FAILED_MESSAGE = (
    'Failed to send command to CodeClient API. Ensure the CodeClient API connection is open.'
)


class TransportState(Enum):
    """Connection lifecycle states."""
    IDLE = "IDLE"
    CONNECTING = "CONNECTING"
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class CodeClientTransport:
    """
    Shared connection to the CodeClient API.

    At most one connection attempt is in flight: concurrent callers await the
    same attempt. Batches are serialized, so a response window only ever sees
    answers to its own commands.
    """

    def __init__(
        self,
        url: str = DEFAULT_CODECLIENT_URL,
        response_window_ms: int = DEFAULT_RESPONSE_WINDOW_MS,
        connect_timeout: float = 5.0,
        logger: Optional[logging.Logger] = None,
    ):
        self.url = url
        self.response_window_ms = response_window_ms
        self.connect_timeout = connect_timeout
        self.logger = logger or logging.getLogger(__name__)

        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self._session: Optional[aiohttp.ClientSession] = None
        self._reader_task: Optional[asyncio.Task] = None
        self._connecting: Optional[asyncio.Task] = None
        self._listeners: List[Callable[[Any], None]] = []
        self._batch_lock = asyncio.Lock()
        self._has_connected = False

        # Number of connections established over the transport's lifetime
        self.connect_count = 0

    @classmethod
    def from_config(cls, config, logger: Optional[logging.Logger] = None) -> 'CodeClientTransport':
        """Create a transport from an ExporterConfig."""
        return cls(
            url=config.codeclient.url,
            response_window_ms=config.codeclient.response_window_ms,
            connect_timeout=config.codeclient.connect_timeout,
            logger=logger,
        )

    def log(self, level: str, message: str):
        """Log a message."""
        getattr(self.logger, level)(message)

    # =========================================================================
    # State
    # =========================================================================

    @property
    def is_open(self) -> bool:
        return self._ws is not None and not self._ws.closed

    @property
    def state(self) -> TransportState:
        if self.is_open:
            return TransportState.OPEN
        if self._connecting is not None and not self._connecting.done():
            return TransportState.CONNECTING
        if self._has_connected:
            return TransportState.CLOSED
        return TransportState.IDLE

    # =========================================================================
    # Connection
    # =========================================================================

    async def _get_socket(self) -> aiohttp.ClientWebSocketResponse:
        """Return the open socket, joining or starting a connection attempt."""
        if self.is_open:
            return self._ws

        if self._connecting is None:
            self._connecting = asyncio.ensure_future(self._connect())
            self._connecting.add_done_callback(self._forget_attempt)
        task = self._connecting

        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if task.cancelled():
                # Attempt aborted by close()
                raise TransportConnectError(CONNECT_CLOSED_MESSAGE, reason='closed')
            raise

    def _forget_attempt(self, task: asyncio.Task):
        """Drop a finished attempt so the next batch starts a new one."""
        if self._connecting is task:
            self._connecting = None
        if not task.cancelled() and task.exception() is not None:
            self.log('debug', f'CodeClient connection attempt failed: {task.exception()}')

    async def _connect(self) -> aiohttp.ClientWebSocketResponse:
        """Open a new socket and start reading from it."""
        self.log('info', f'Connecting to CodeClient API at {self.url}')
        session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=None, connect=self.connect_timeout)
        )
        try:
            ws = await session.ws_connect(self.url)
        except aiohttp.WSServerHandshakeError as e:
            await session.close()
            raise TransportConnectError(CONNECT_CLOSED_MESSAGE, e, reason='closed') from e
        except (aiohttp.ClientError, OSError, asyncio.TimeoutError) as e:
            await session.close()
            raise TransportConnectError(CONNECT_FAILED_MESSAGE, e) from e
        except asyncio.CancelledError:
            await session.close()
            raise

        self._ws = ws
        self._session = session
        self._has_connected = True
        self.connect_count += 1
        self._reader_task = asyncio.ensure_future(self._read_loop(ws, session))
        self.log('info', 'Connected to CodeClient API')
        return ws

    async def _read_loop(self, ws: aiohttp.ClientWebSocketResponse,
                         session: aiohttp.ClientSession):
        """Hand every inbound message to the listeners until the socket closes."""
        try:
            async for msg in ws:
                if msg.type in (WSMsgType.TEXT, WSMsgType.BINARY):
                    self._dispatch(msg.data)
                elif msg.type == WSMsgType.ERROR:
                    self.log('warning', f'CodeClient socket error: {ws.exception()}')
                    break
        finally:
            # Evict the socket so the next batch reconnects
            if self._ws is ws:
                self._ws = None
                self.log('info', 'CodeClient API connection closed')
            if self._session is session:
                self._session = None
            await session.close()

    def _dispatch(self, data: Any):
        for listener in list(self._listeners):
            try:
                listener(data)
            except Exception as e:
                self.log('error', f'CodeClient message listener error: {e}')

    # =========================================================================
    # Sending
    # =========================================================================

    async def send(self, command: str):
        """Send a single command as its own batch."""
        await self.send_batch([command])

    async def send_batch(self, commands: Sequence[str]):
        """
        Send commands in order and check CodeClient's answers.

        Args:
            commands: Commands to send, e.g. `give ...` strings

        Raises:
            TransportConnectError: No connection could be established
            TransportSendError: A command could not be written
            RemoteRejection: CodeClient rejected a command during the window
        """
        commands = list(commands)

        async with self._batch_lock:
            ws = await self._get_socket()

            texts: List[str] = []

            def on_message(data: Any):
                texts.extend(extract_message_texts(data))

            self._listeners.append(on_message)
            try:
                for command in commands:
                    if ws.closed:
                        raise TransportSendError(SEND_FAILED_MESSAGE)
                    try:
                        await ws.send_str(command)
                    except (ConnectionError, aiohttp.ClientError, RuntimeError) as e:
                        raise TransportSendError(SEND_FAILED_MESSAGE, e) from e

                self.log('info', f'Sent {len(commands)} command(s) to CodeClient API')
                await asyncio.sleep(self.response_window_ms / 1000.0)
            finally:
                self._listeners.remove(on_message)

        rejection = first_rejection(texts)
        if rejection:
            marker, reason = rejection
            self.log('warning', reason)
            raise RemoteRejection(reason, marker)

    # =========================================================================
    # Shutdown
    # =========================================================================

    async def close(self):
        """Tear down the socket and any connection attempt in flight."""
        connecting, self._connecting = self._connecting, None
        if connecting is not None and not connecting.done():
            connecting.cancel()

        ws, self._ws = self._ws, None
        if ws is not None:
            try:
                await ws.close()
            except Exception as e:
                self.log('debug', f'Ignoring error while closing CodeClient socket: {e}')

        reader, self._reader_task = self._reader_task, None
        if reader is not None:
            await asyncio.gather(reader, return_exceptions=True)

        session, self._session = self._session, None
        if session is not None and not session.closed:
            await session.close()

    async def __aenter__(self) -> 'CodeClientTransport':
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()


__all__ = [
    'DEFAULT_RESPONSE_WINDOW_MS',
    'TransportState',
    'CodeClientTransport',
]

"""
UDP transport for server queries

One DatagramSession owns one connected UDP endpoint for the lifetime of a
single query. Sessions are never shared or pooled.
"""

import asyncio
import logging

from steamquery.errors import ReceiveTimeout, SendTimeout, TransportFailure


logger = logging.getLogger(__name__)


class DatagramSession:
    """
    Request/reply exchange with one game server over UDP.

    Use as an async context manager; the endpoint is closed on every exit
    path, including timeouts, decode errors and cancellation.

    The source address of replies is not checked beyond what the connected
    socket already filters.
    """

    class ReplyProtocol(asyncio.DatagramProtocol):
        """Queues incoming datagrams and socket errors for the session."""

        def __init__(self):
            super().__init__()
            self.transport = None
            self.replies = asyncio.Queue()
            self._can_write = asyncio.Event()
            self._can_write.set()

        def connection_made(self, transport):
            self.transport = transport

        def datagram_received(self, data, addr):
            logger.debug(f"[UDP] <- {addr}: {data.hex()}")
            self.replies.put_nowait(data)

        def error_received(self, exc):
            # ICMP errors (e.g. port unreachable) surface here
            self.replies.put_nowait(exc)

        def connection_lost(self, exc):
            if exc is not None:
                self.replies.put_nowait(exc)
            self._can_write.set()

        def pause_writing(self):
            self._can_write.clear()

        def resume_writing(self):
            self._can_write.set()

        async def drained(self):
            await self._can_write.wait()

    def __init__(self, host: str, port: int, timeout_ms: int):
        """
        Args:
            host: Server hostname or IP address
            port: Server query port
            timeout_ms: Limit applied separately to each send and receive
        """
        self.host = host
        self.port = port
        self.timeout_ms = timeout_ms
        self._transport = None
        self._protocol = None

    @property
    def timeout(self) -> float:
        return self.timeout_ms / 1000

    async def open(self):
        """Resolve the server address and create the UDP endpoint."""
        if self._transport is not None:
            raise RuntimeError("Session is already open")

        loop = asyncio.get_running_loop()
        try:
            self._transport, self._protocol = await asyncio.wait_for(
                loop.create_datagram_endpoint(
                    self.ReplyProtocol,
                    remote_addr=(self.host, self.port)
                ),
                self.timeout
            )
        except asyncio.TimeoutError:
            raise TransportFailure(
                f"Timed out resolving {self.host}:{self.port}"
            ) from None
        except OSError as e:
            raise TransportFailure(
                f"Cannot open UDP endpoint to {self.host}:{self.port}: {e}"
            ) from e

        logger.debug(f"[UDP] Opened endpoint to {self.host}:{self.port}")

    def close(self):
        if self._transport is not None:
            self._transport.close()
            self._transport = None
            logger.debug(f"[UDP] Closed endpoint to {self.host}:{self.port}")

    async def __aenter__(self) -> "DatagramSession":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.close()

    async def send_and_receive(self, request: bytes) -> bytes:
        """
        Send one datagram and wait for one reply.

        Args:
            request: Request datagram

        Returns:
            Reply datagram, verbatim

        Raises:
            SendTimeout: Send did not complete within the timeout
            ReceiveTimeout: No reply within the timeout
            TransportFailure: Socket error
        """
        await self._send(request)
        return await self._receive()

    async def _send(self, request: bytes):
        if self._transport is None:
            raise RuntimeError("Session is not open")

        logger.debug(f"[UDP] -> {self.host}:{self.port}: {request.hex()}")
        try:
            self._transport.sendto(request)
        except OSError as e:
            raise TransportFailure(f"Send to {self.host}:{self.port} failed: {e}") from e

        try:
            await asyncio.wait_for(self._protocol.drained(), self.timeout)
        except asyncio.TimeoutError:
            raise SendTimeout(
                f"Timed out sending to {self.host}:{self.port} after {self.timeout_ms} ms",
                self.timeout_ms
            ) from None

    async def _receive(self) -> bytes:
        if self._protocol is None:
            raise RuntimeError("Session is not open")

        try:
            reply = await asyncio.wait_for(self._protocol.replies.get(), self.timeout)
        except asyncio.TimeoutError:
            raise ReceiveTimeout(
                f"No reply from {self.host}:{self.port} within {self.timeout_ms} ms",
                self.timeout_ms
            ) from None

        if isinstance(reply, Exception):
            raise TransportFailure(
                f"Receive from {self.host}:{self.port} failed: {reply}"
            ) from reply

        return reply

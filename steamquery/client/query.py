"""
A2S_INFO and A2S_PLAYER queries

Communication Flow:
1. Client sends the request
2. Server answers with the data, or with a challenge (0x41)
3. On a challenge, client resends the request carrying the challenge
4. Server answers with the data

At most two round trips are made. A second challenge is not answered; it is
handed to the decoder like any other final reply.
"""

import asyncio
import logging
from enum import Enum
from typing import Optional

from steamquery.client.transport import DatagramSession
from steamquery.config import config
from steamquery.protocol import a2s_proto


logger = logging.getLogger(__name__)


class QueryState(Enum):
    INIT = 'init'
    AWAITING_FIRST_REPLY = 'awaiting_first_reply'
    CHALLENGE_RECEIVED = 'challenge_received'
    AWAITING_SECOND_REPLY = 'awaiting_second_reply'
    DONE = 'done'


class ChallengeQuery:
    """
    Two-round challenge/response exchange.

    Subclasses provide the request layout and the decoder for the final
    reply.
    """

    kind = 'query'

    def __init__(self, host: str, port: int, timeout_ms: Optional[int] = None):
        """
        Args:
            host: Server hostname or IP address
            port: Server query port
            timeout_ms: Per-phase timeout, defaults to config.QUERY_TIMEOUT_MS
        """
        self.host = host
        self.port = port
        self.timeout_ms = config.QUERY_TIMEOUT_MS if timeout_ms is None else timeout_ms
        self.state = QueryState.INIT

    def first_request(self) -> bytes:
        raise NotImplementedError

    def retry_request(self, challenge_reply: bytes) -> bytes:
        raise NotImplementedError

    def decode(self, data: bytes):
        raise NotImplementedError

    async def exchange(self, session) -> bytes:
        """
        Drive the handshake over an open session.

        Args:
            session: Object with an async send_and_receive(bytes) -> bytes

        Returns:
            Final reply datagram
        """
        self.state = QueryState.AWAITING_FIRST_REPLY
        reply = await session.send_and_receive(self.first_request())

        if a2s_proto.is_challenge(reply):
            self.state = QueryState.CHALLENGE_RECEIVED
            logger.debug(
                f"[A2S] {self.kind} challenge from {self.host}:{self.port}: "
                f"{a2s_proto.challenge_payload(reply).hex()}"
            )
            request = self.retry_request(reply)

            self.state = QueryState.AWAITING_SECOND_REPLY
            reply = await session.send_and_receive(request)

        self.state = QueryState.DONE
        return reply

    async def run(self):
        """Open a session, run the handshake and decode the final reply."""
        async with DatagramSession(self.host, self.port, self.timeout_ms) as session:
            reply = await self.exchange(session)

        result = self.decode(reply)
        logger.info(f"[A2S] {self.kind} query to {self.host}:{self.port} complete")
        return result


class InfoQuery(ChallengeQuery):
    kind = 'info'

    def first_request(self) -> bytes:
        return a2s_proto.build_info_request()

    def retry_request(self, challenge_reply: bytes) -> bytes:
        return a2s_proto.build_info_request(a2s_proto.challenge_payload(challenge_reply))

    def decode(self, data: bytes):
        return a2s_proto.decode_server_info(data)


class PlayerQuery(ChallengeQuery):
    kind = 'player'

    def first_request(self) -> bytes:
        return a2s_proto.build_player_request()

    def retry_request(self, challenge_reply: bytes) -> bytes:
        return a2s_proto.build_player_retry(challenge_reply)

    def decode(self, data: bytes):
        return a2s_proto.decode_players(data)


# =============================================================================
# Public API
# =============================================================================

async def query_server_info(host: str, port: int, timeout_ms: Optional[int] = None):
    """
    Query a server's A2S_INFO.

    Args:
        host: Server hostname or IP address
        port: Server query port
        timeout_ms: Per-phase timeout in milliseconds (default 5000)

    Returns:
        ServerInfo record
    """
    return await InfoQuery(host, port, timeout_ms).run()


async def query_players(host: str, port: int, timeout_ms: Optional[int] = None):
    """
    Query a server's player list (A2S_PLAYER).

    Returns:
        List of PlayerInfo in the order the server sent them
    """
    return await PlayerQuery(host, port, timeout_ms).run()


def query_server_info_sync(host: str, port: int, timeout_ms: Optional[int] = None):
    """Blocking variant of query_server_info. Must not be called from a running loop."""
    return asyncio.run(query_server_info(host, port, timeout_ms))


def query_players_sync(host: str, port: int, timeout_ms: Optional[int] = None):
    """Blocking variant of query_players. Must not be called from a running loop."""
    return asyncio.run(query_players(host, port, timeout_ms))

"""
Source engine query (A2S) protocol utilities

Builds request datagrams and decodes A2S_INFO / A2S_PLAYER replies.

Every datagram starts with the 4-byte simple-packet prefix FF FF FF FF,
followed by a one byte packet type:

Requests (client -> server):
- 0x54 'T': A2S_INFO, followed by "Source Engine Query\\0" [+ challenge]
- 0x55 'U': A2S_PLAYER, followed by a 4-byte challenge (FF FF FF FF = none)

Replies (server -> client):
- 0x41 'A': S2C_CHALLENGE, 4-byte challenge token follows
- 0x49 'I': A2S_INFO reply
- 0x44 'D': A2S_PLAYER reply
"""

import logging
import math
from datetime import timedelta

from steamquery.errors import InvalidHeader, TruncatedData
from steamquery.models import (
    AntiCheat, Environment, PlayerInfo, ServerInfo, ServerType, Visibility,
)
from steamquery.protocol.reader import ByteReader


# =============================================================================
# Constants
# =============================================================================

PACKET_PREFIX = b'\xFF\xFF\xFF\xFF'
HEADER_SIZE = 5  # prefix + packet type

# Request types
REQUEST_INFO = 0x54
REQUEST_PLAYER = 0x55

# Reply types
RESPONSE_CHALLENGE = 0x41
RESPONSE_INFO = 0x49
RESPONSE_PLAYER = 0x44

INFO_PAYLOAD = b'Source Engine Query\x00'
NO_CHALLENGE = b'\xFF\xFF\xFF\xFF'

INFO_REQUEST = PACKET_PREFIX + bytes([REQUEST_INFO]) + INFO_PAYLOAD
PLAYER_REQUEST = PACKET_PREFIX + bytes([REQUEST_PLAYER]) + NO_CHALLENGE

# Extra Data Flags
EDF_PORT = 0x80
EDF_SOURCE_TV = 0x40
EDF_KEYWORDS = 0x20
EDF_STEAM_ID = 0x10
EDF_GAME_ID = 0x01

# Wire order of the optional fields, independent of bit order
EDF_LAYOUT = (
    (EDF_PORT, (('port', ByteReader.read_int16),)),
    (EDF_STEAM_ID, (('steam_id', ByteReader.read_int64),)),
    (EDF_SOURCE_TV, (('source_tv_port', ByteReader.read_int16),
                     ('source_tv_name', ByteReader.read_string))),
    (EDF_KEYWORDS, (('keywords', ByteReader.read_string),)),
    (EDF_GAME_ID, (('game_id', ByteReader.read_int64),)),
)

logger = logging.getLogger(__name__)


# =============================================================================
# Requests
# =============================================================================

def build_info_request(challenge: bytes = b'') -> bytes:
    """
    Build an A2S_INFO request.

    Args:
        challenge: Opaque challenge payload copied from an S2C_CHALLENGE reply

    Returns:
        Request datagram
    """
    return INFO_REQUEST + bytes(challenge)


def build_player_request() -> bytes:
    """Build the initial A2S_PLAYER request (no challenge yet)."""
    return PLAYER_REQUEST


def build_player_retry(challenge_reply: bytes) -> bytes:
    """
    Turn an S2C_CHALLENGE reply into the follow-up A2S_PLAYER request.

    The reply already has the layout of a player request with the token in
    place, so only the packet type byte is rewritten.
    """
    retry = bytearray(challenge_reply)
    retry[4] = REQUEST_PLAYER
    return bytes(retry)


def is_challenge(reply: bytes) -> bool:
    """True when the reply is an S2C_CHALLENGE."""
    return len(reply) >= HEADER_SIZE and reply[4] == RESPONSE_CHALLENGE


def challenge_payload(reply: bytes) -> bytes:
    """Everything after the reply header, treated as an opaque token."""
    return bytes(reply[HEADER_SIZE:])


# =============================================================================
# Replies
# =============================================================================

def _open_reply(data: bytes, expected: int) -> ByteReader:
    if len(data) < HEADER_SIZE:
        raise InvalidHeader(expected)
    if data[4] != expected:
        raise InvalidHeader(expected, data[4])
    return ByteReader(data, HEADER_SIZE)


def _to_enum(enum_cls, value: int):
    # Unknown values are kept as the raw byte
    try:
        return enum_cls(value)
    except ValueError:
        return value


def _to_duration(seconds: float) -> timedelta:
    # NaN, inf and values beyond timedelta range read as zero
    if not math.isfinite(seconds):
        return timedelta(0)
    try:
        return timedelta(seconds=seconds)
    except OverflowError:
        return timedelta(0)


def _read_extra_data(reader: ByteReader):
    """
    Read the EDF byte and the optional fields it announces.

    Servers are known to omit or cut short this section, so reading stops
    quietly at the first truncated field.

    Returns:
        (edf byte, dict of decoded optional fields)
    """
    values = {}
    try:
        edf = reader.read_uint8()
    except TruncatedData:
        logger.debug("[A2S] Info reply has no EDF byte")
        return 0, values

    for flag, fields in EDF_LAYOUT:
        if not edf & flag:
            continue
        for name, read in fields:
            try:
                values[name] = read(reader)
            except TruncatedData as e:
                logger.debug(f"[A2S] EDF 0x{edf:02x} tail truncated at '{name}': {e}")
                return edf, values

    return edf, values


def decode_server_info(data: bytes) -> ServerInfo:
    """
    Decode an A2S_INFO reply.

    Format:
    [FF FF FF FF] 0x49 protocol(u8) name\\0 map\\0 folder\\0 game\\0 appid(i16)
    players(u8) max_players(u8) bots(u8) server_type(u8) environment(u8)
    visibility(u8) vac(u8) version\\0 [edf(u8) [optional fields...]]

    Args:
        data: Raw reply datagram including the prefix

    Returns:
        ServerInfo record

    Raises:
        InvalidHeader: Reply is not an A2S_INFO reply
        TruncatedData: Reply ends inside the fixed section
    """
    reader = _open_reply(data, RESPONSE_INFO)

    protocol = reader.read_uint8()
    name = reader.read_string()
    map_name = reader.read_string()
    folder = reader.read_string()
    game = reader.read_string()
    app_id = reader.read_int16()
    players = reader.read_uint8()
    max_players = reader.read_uint8()
    bots = reader.read_uint8()
    server_type = _to_enum(ServerType, reader.read_uint8())
    environment = _to_enum(Environment, reader.read_uint8())
    visibility = Visibility.PRIVATE if reader.read_uint8() else Visibility.PUBLIC
    anti_cheat = AntiCheat.SECURED if reader.read_uint8() else AntiCheat.UNSECURED
    version = reader.read_string()

    edf, extra = _read_extra_data(reader)

    return ServerInfo(
        protocol=protocol,
        name=name,
        map=map_name,
        folder=folder,
        game=game,
        app_id=app_id,
        players=players,
        max_players=max_players,
        bots=bots,
        server_type=server_type,
        environment=environment,
        visibility=visibility,
        anti_cheat=anti_cheat,
        version=version,
        edf=edf,
        present=frozenset(extra),
        **extra,
    )


def decode_players(data: bytes) -> list:
    """
    Decode an A2S_PLAYER reply.

    Format:
    [FF FF FF FF] 0x44 count(u8) then count x [index(u8) name\\0 score(i32)
    duration(f32 seconds)]

    The count is binding: a reply holding fewer entries raises TruncatedData.

    Args:
        data: Raw reply datagram including the prefix

    Returns:
        List of PlayerInfo in wire order
    """
    reader = _open_reply(data, RESPONSE_PLAYER)

    count = reader.read_uint8()
    players = []
    for _ in range(count):
        reader.read_uint8()  # index, always 0 on modern servers
        name = reader.read_string()
        score = reader.read_int32()
        players.append(PlayerInfo(name, score, _to_duration(reader.read_float32())))

    return players

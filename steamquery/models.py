"""
Records returned by server queries
"""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import IntEnum
from typing import FrozenSet, List, Union


class ServerType(IntEnum):
    DEDICATED = 0x64       # 'd'
    NON_DEDICATED = 0x6C   # 'l'
    SOURCE_TV = 0x70       # 'p'


class Environment(IntEnum):
    LINUX = 0x6C           # 'l'
    WINDOWS = 0x77         # 'w'
    MAC_LEGACY = 0x6D      # 'm'
    MAC = 0x6F             # 'o'


class Visibility(IntEnum):
    PUBLIC = 0
    PRIVATE = 1


class AntiCheat(IntEnum):
    UNSECURED = 0
    SECURED = 1


# Absent values for EDF fields
NO_NUMBER = -1
NO_TEXT = ''

OPTIONAL_FIELDS = ('port', 'steam_id', 'source_tv_port', 'source_tv_name', 'keywords', 'game_id')


@dataclass(frozen=True)
class ServerInfo:
    """Decoded A2S_INFO reply"""

    protocol: int
    name: str
    map: str
    folder: str
    game: str
    app_id: int
    players: int
    max_players: int
    bots: int
    server_type: Union[ServerType, int]
    environment: Union[Environment, int]
    visibility: Visibility
    anti_cheat: AntiCheat
    version: str

    edf: int = 0
    port: int = NO_NUMBER
    steam_id: int = NO_NUMBER
    source_tv_port: int = NO_NUMBER
    source_tv_name: str = NO_TEXT
    keywords: str = NO_TEXT
    game_id: int = NO_NUMBER

    # Names of the optional fields that were actually decoded
    present: FrozenSet[str] = field(default_factory=frozenset)

    def has(self, name: str) -> bool:
        """Whether the optional field `name` was sent by the server."""
        if name not in OPTIONAL_FIELDS:
            raise KeyError(name)
        return name in self.present

    @property
    def keyword_list(self) -> List[str]:
        if not self.keywords:
            return []
        return self.keywords.split(',')


@dataclass(frozen=True)
class PlayerInfo:
    """One entry of an A2S_PLAYER reply"""

    name: str
    score: int
    duration: timedelta

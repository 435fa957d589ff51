"""
steamquery - Source engine server query (A2S) client

Retrieves server information and player lists from Source engine game
servers over UDP.
"""

__version__ = "1.0.0"

from steamquery.client.query import (
    query_players,
    query_players_sync,
    query_server_info,
    query_server_info_sync,
)
from steamquery.errors import (
    InvalidHeader,
    QueryTimeout,
    ReceiveTimeout,
    SendTimeout,
    SteamQueryError,
    TransportFailure,
    TruncatedData,
)
from steamquery.models import (
    AntiCheat,
    Environment,
    PlayerInfo,
    ServerInfo,
    ServerType,
    Visibility,
)

import asyncio
import os
from typing import Any, Optional

import aiohttp

from app.gametools.http_session import STATS_TIMEOUT, get_session
from app.gametools.structures import PlayerIds, StatsQuery, StatsResult
from app.logger import logger

STATS_URL = os.getenv("STATS_URL", "https://api.gametools.network/bf6/multiple/")
LOOKUP_URL = os.getenv("LOOKUP_URL", "https://api.gametools.network/bf6/stats/")


async def fetch_squad_stats(
        queries: list[StatsQuery],
        url: str = STATS_URL,
        session: Optional[aiohttp.ClientSession] = None
) -> Optional[Any]:
    """
    Fetches the stats of every queried player with a single batched request.
    :param queries: the players to fetch, in request order
    :param url: the multiple-players endpoint
    :param session: an explicit client session, the shared one is used otherwise
    :return: the decoded response body, or None if the request failed
    """
    session = session or get_session()
    headers = {"Content-Type": "application/json"}
    timeout = aiohttp.ClientTimeout(total=STATS_TIMEOUT)

    try:
        async with session.post(url, json=queries, headers=headers, timeout=timeout) as response:
            if 200 <= response.status < 300:
                data = await response.json(content_type=None)
                logger.debug(f"Stats fetched for {len(queries)} players")
                return data
            text = await response.text()
            logger.error(f"Stats: request for {len(queries)} players failed -> {response.status}: {text[:200]}")
            return None
    except aiohttp.ClientError as e:
        logger.error(f"HTTP error in fetch_squad_stats: {e}", exc_info=True)
        return None
    except asyncio.TimeoutError:
        logger.warning(f"Timeout error in fetch_squad_stats after {STATS_TIMEOUT}s")
        return None
    except Exception as e:
        logger.error(f"Unexpected error in fetch_squad_stats: {e}", exc_info=True)
        return None


async def lookup_player_ids(
        name: str,
        platform: str,
        url: str = LOOKUP_URL,
        session: Optional[aiohttp.ClientSession] = None
) -> Optional[PlayerIds]:
    """
    Looks up the ids needed for a roster entry from a player's in-game name.
    """
    session = session or get_session()
    params = {"name": name, "platform": platform}
    timeout = aiohttp.ClientTimeout(total=STATS_TIMEOUT)

    try:
        async with session.get(url, params=params, timeout=timeout) as response:
            if response.status != 200:
                logger.warning(f"Lookup: {platform}/{name} -> {response.status}")
                return None
            data: StatsResult = await response.json(content_type=None)
            if not isinstance(data, dict) or data.get("id") is None or data.get("userId") is None:
                logger.warning(f"Lookup: no ids returned for {platform}/{name}")
                return None
            return PlayerIds(
                user_name=data.get("userName") or name,
                player_id=int(data["id"]),
                user_id=int(data["userId"])
            )
    except aiohttp.ClientError as e:
        logger.error(f"HTTP error in lookup_player_ids: {e}", exc_info=True)
        return None
    except asyncio.TimeoutError:
        logger.warning(f"Timeout error in lookup_player_ids for {platform}/{name}")
        return None
    except Exception as e:
        logger.error(f"Unexpected error in lookup_player_ids: {e}", exc_info=True)
        return None

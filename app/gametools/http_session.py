import os

import aiohttp

STATS_TIMEOUT = float(os.getenv("STATS_TIMEOUT", "10"))

_session: aiohttp.ClientSession | None = None


def get_session() -> aiohttp.ClientSession:
    global _session
    if _session and not _session.closed:
        return _session
    timeout = aiohttp.ClientTimeout(total=STATS_TIMEOUT, connect=5, sock_connect=5, sock_read=STATS_TIMEOUT)
    connector = aiohttp.TCPConnector(limit=20, ttl_dns_cache=300)
    _session = aiohttp.ClientSession(timeout=timeout, connector=connector)
    return _session


async def close_session():
    global _session
    if _session and not _session.closed:
        await _session.close()
    _session = None

import unittest

import aiohttp
from aiohttp import web
from aiohttp.test_utils import TestServer

from app.gametools import fetch_squad_stats, lookup_player_ids

QUERIES = [
    {"name": "BlueDragon12336", "player_id": 891692513, "user_id": 1000091551547,
     "platform": "xboxone", "skip_battlelog": True},
]


class TestGametoolsClient(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.received = []
        app = web.Application()
        app.router.add_post("/bf6/multiple/", self._multiple)
        app.router.add_post("/broken/", self._broken)
        app.router.add_get("/bf6/stats/", self._stats)
        self.server = TestServer(app)
        await self.server.start_server()
        self.session = aiohttp.ClientSession()

    async def asyncTearDown(self):
        await self.session.close()
        await self.server.close()

    async def _multiple(self, request: web.Request):
        self.received.append(await request.json())
        return web.json_response({"data": [{"userName": "BlueDragon12336", "killDeath": 1.2}]})

    async def _broken(self, request: web.Request):
        return web.json_response({"error": "upstream down"}, status=502)

    async def _stats(self, request: web.Request):
        if request.query.get("name") != "BlueDragon12336":
            return web.json_response({"errors": ["player not found"]}, status=404)
        return web.json_response({"userName": "BlueDragon12336", "id": 891692513, "userId": 1000091551547})

    async def test_fetch_posts_all_queries_in_one_request(self):
        data = await fetch_squad_stats(QUERIES, url=str(self.server.make_url("/bf6/multiple/")),
                                       session=self.session)
        self.assertEqual(self.received, [QUERIES])
        self.assertEqual(data["data"][0]["killDeath"], 1.2)

    async def test_fetch_non_success_returns_none(self):
        with self.assertLogs("SquadStats", level="ERROR"):
            data = await fetch_squad_stats(QUERIES, url=str(self.server.make_url("/broken/")),
                                           session=self.session)
        self.assertIsNone(data)

    async def test_fetch_connection_error_returns_none(self):
        port = self.server.port
        await self.server.close()
        data = await fetch_squad_stats(QUERIES, url=f"http://127.0.0.1:{port}/bf6/multiple/",
                                       session=self.session)
        self.assertIsNone(data)

    async def test_lookup_player_ids(self):
        ids = await lookup_player_ids("BlueDragon12336", "xboxone",
                                      url=str(self.server.make_url("/bf6/stats/")), session=self.session)
        self.assertEqual(ids, {"user_name": "BlueDragon12336", "player_id": 891692513, "user_id": 1000091551547})

    async def test_lookup_unknown_player(self):
        ids = await lookup_player_ids("Nobody", "xboxone",
                                      url=str(self.server.make_url("/bf6/stats/")), session=self.session)
        self.assertIsNone(ids)


if __name__ == '__main__':
    unittest.main()

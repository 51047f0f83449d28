import unittest
from types import SimpleNamespace
from unittest import mock

from discord import TextChannel

from app.bot import SquadStatsBot
from app.cogs.leaderboard import LeaderboardCog
from app.leaderboard import LeaderboardRow


def make_row(rank: int) -> LeaderboardRow:
    return LeaderboardRow(
        rank=rank, display_name=f"p{rank}", level=1, kd=1.0, kills=1, deaths=1, assists=0,
        revives=0, accuracy=0.0, top_class="N/A", top_vehicle="N/A", top_weapon="N/A"
    )


# noinspection PyTypeChecker
class TestPostLeaderboard(unittest.IsolatedAsyncioTestCase):

    def _fake_cog(self, rows, channel_id=42, sent=object()):
        bot = SimpleNamespace(
            settings=SimpleNamespace(leaderboard_channel_id=channel_id),
            aggregator=SimpleNamespace(fetch_roster_leaderboard=mock.AsyncMock(return_value=rows)),
            send_to_channel=mock.AsyncMock(return_value=sent),
        )
        return SimpleNamespace(bot=bot)

    async def test_posts_embed_to_configured_channel(self):
        cog = self._fake_cog([make_row(1), make_row(2)])
        posted = await LeaderboardCog.post_leaderboard(cog)
        self.assertTrue(posted)
        cog.bot.send_to_channel.assert_awaited_once()
        args, kwargs = cog.bot.send_to_channel.call_args
        self.assertEqual(args, (42,))
        self.assertEqual(len(kwargs["embed"].fields), 2)

    async def test_empty_leaderboard_sends_nothing(self):
        cog = self._fake_cog([])
        self.assertFalse(await LeaderboardCog.post_leaderboard(cog))
        cog.bot.send_to_channel.assert_not_awaited()

    async def test_missing_channel_skips_fetch(self):
        cog = self._fake_cog([make_row(1)], channel_id=None)
        self.assertFalse(await LeaderboardCog.post_leaderboard(cog))
        cog.bot.aggregator.fetch_roster_leaderboard.assert_not_awaited()

    async def test_send_failure_is_reported(self):
        cog = self._fake_cog([make_row(1)], sent=None)
        self.assertFalse(await LeaderboardCog.post_leaderboard(cog))


# noinspection PyTypeChecker
class TestSendToChannel(unittest.IsolatedAsyncioTestCase):

    async def test_uses_cached_channel(self):
        channel = mock.MagicMock(spec=TextChannel)
        channel.send.return_value = "message"
        bot = SimpleNamespace(get_channel=mock.Mock(return_value=channel), fetch_channel=mock.AsyncMock())
        message = await SquadStatsBot.send_to_channel(bot, 42, content="hi")
        self.assertEqual(message, "message")
        channel.send.assert_awaited_once_with(content="hi")
        bot.fetch_channel.assert_not_awaited()

    async def test_fetches_uncached_channel(self):
        channel = mock.MagicMock(spec=TextChannel)
        bot = SimpleNamespace(get_channel=mock.Mock(return_value=None),
                              fetch_channel=mock.AsyncMock(return_value=channel))
        await SquadStatsBot.send_to_channel(bot, 42, content="hi")
        bot.fetch_channel.assert_awaited_once_with(42)
        channel.send.assert_awaited_once()

    async def test_channel_lookup_failure_returns_none(self):
        bot = SimpleNamespace(get_channel=mock.Mock(return_value=None),
                              fetch_channel=mock.AsyncMock(side_effect=RuntimeError("forbidden")))
        with self.assertLogs("SquadStats", level="ERROR"):
            message = await SquadStatsBot.send_to_channel(bot, 42, content="hi")
        self.assertIsNone(message)


if __name__ == '__main__':
    unittest.main()

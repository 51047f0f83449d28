import os
import unittest
from unittest import mock

from app.leaderboard import LeaderboardRow
from app.leaderboard.embeds import MAX_FIELDS, build_leaderboard_embed, format_row
from app.lib.settings import Settings


def make_row(rank: int, name: str = "Soldier") -> LeaderboardRow:
    return LeaderboardRow(
        rank=rank, display_name=name, level=42, kd=1.5, kills=300, deaths=200, assists=50,
        revives=12, accuracy=23.456, top_class="Recon", top_vehicle="N/A", top_weapon="SVK"
    )


class TestLeaderboardEmbed(unittest.TestCase):

    def test_one_field_per_row(self):
        embed = build_leaderboard_embed([make_row(1, "Waterish"), make_row(2, "BlueDragon12336")])
        self.assertEqual(len(embed.fields), 2)
        self.assertEqual(embed.fields[0].name, "🥇 Waterish")
        self.assertEqual(embed.fields[1].name, "🥈 BlueDragon12336")
        self.assertIsNotNone(embed.timestamp)
        self.assertIn("gametools", embed.footer.text)

    def test_rows_past_the_third_get_numbers(self):
        embed = build_leaderboard_embed([make_row(i) for i in range(1, 5)])
        self.assertEqual(embed.fields[3].name, "#4 Soldier")

    def test_field_cap(self):
        embed = build_leaderboard_embed([make_row(i) for i in range(1, 40)])
        self.assertEqual(len(embed.fields), MAX_FIELDS)

    def test_row_text(self):
        text = format_row(make_row(1))
        self.assertIn("Level: **42**", text)
        self.assertIn("K/D: **1.50**", text)
        self.assertIn("Accuracy: 23.5%", text)
        self.assertIn("Weapon: SVK", text)


class TestSettings(unittest.TestCase):

    def test_missing_token_raises(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(RuntimeError):
                Settings.from_env()

    def test_from_env(self):
        env = {
            "DISCORD_TOKEN": "token",
            "LEADERBOARD_CHANNEL_ID": "123456789",
            "PORT": "8080",
            "OWNER_IDS": "1, 2",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            settings = Settings.from_env()
        self.assertEqual(settings.leaderboard_channel_id, 123456789)
        self.assertEqual(settings.interactions_port, 8080)
        self.assertEqual(settings.owner_ids, [1, 2])
        self.assertIsNone(settings.public_key)
        self.assertEqual(settings.leaderboard_interval, 21600)


if __name__ == '__main__':
    unittest.main()

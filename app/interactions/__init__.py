import json
import random
from typing import Any, Optional

from aiohttp import web
from discord.enums import InteractionResponseType, InteractionType
from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

from app.logger import logger

SIGNATURE_HEADER = "X-Signature-Ed25519"
TIMESTAMP_HEADER = "X-Signature-Timestamp"

IS_COMPONENTS_V2 = 1 << 15
TEXT_DISPLAY_COMPONENT = 10

EMOJIS = ["😭", "😄", "😌", "🤓", "😎", "😤", "🤖", "😶‍🌫️", "🌏", "📸", "💿", "👋", "🌊", "✨"]


class InvalidSignature(Exception):
    pass


class MalformedInteraction(Exception):
    pass


class InteractionVerifier:
    """Checks the Ed25519 signature Discord puts on every interaction request."""

    def __init__(self, public_key: str):
        self._key = VerifyKey(bytes.fromhex(public_key))

    def verify(self, body: bytes, signature: Optional[str], timestamp: Optional[str]) -> dict:
        if not signature or not timestamp:
            raise InvalidSignature("missing signature headers")
        try:
            self._key.verify(timestamp.encode() + body, bytes.fromhex(signature))
        except (BadSignatureError, ValueError) as e:
            raise InvalidSignature(str(e)) from e
        try:
            interaction = json.loads(body)
        except ValueError as e:
            raise MalformedInteraction("body is not valid JSON") from e
        if not isinstance(interaction, dict):
            raise MalformedInteraction("body is not a JSON object")
        return interaction


def get_random_emoji() -> str:
    return random.choice(EMOJIS)


def dispatch_interaction(interaction: dict[str, Any]) -> tuple[dict, int]:
    """
    Answers a verified interaction.
    :return: the JSON payload and the HTTP status to send it with
    """
    interaction_type = interaction.get("type")

    if interaction_type == InteractionType.ping.value:
        return {"type": InteractionResponseType.pong.value}, 200

    if interaction_type == InteractionType.application_command.value:
        data = interaction.get("data")
        name = data.get("name") if isinstance(data, dict) else None
        if name == "test":
            return {
                "type": InteractionResponseType.channel_message.value,
                "data": {
                    "flags": IS_COMPONENTS_V2,
                    "components": [
                        {
                            "type": TEXT_DISPLAY_COMPONENT,
                            "content": f"hello world {get_random_emoji()}"
                        }
                    ]
                }
            }, 200

        logger.error(f"unknown command: {name}")
        return {"error": "unknown command"}, 400

    logger.error(f"unknown interaction type: {interaction_type}")
    return {"error": "unknown interaction type"}, 400


verifier_key = web.AppKey("verifier", InteractionVerifier)


async def handle_interaction(request: web.Request) -> web.Response:
    verifier = request.app[verifier_key]
    body = await request.read()
    try:
        interaction = verifier.verify(
            body,
            request.headers.get(SIGNATURE_HEADER),
            request.headers.get(TIMESTAMP_HEADER)
        )
    except InvalidSignature as e:
        logger.warning(f"Rejected interaction request: {e}")
        return web.json_response({"error": "invalid request signature"}, status=401)
    except MalformedInteraction as e:
        logger.warning(f"Malformed interaction request: {e}")
        return web.json_response({"error": "malformed interaction"}, status=400)

    payload, status = dispatch_interaction(interaction)
    return web.json_response(payload, status=status)


def create_app(verifier: InteractionVerifier) -> web.Application:
    app = web.Application()
    app[verifier_key] = verifier
    app.router.add_post("/interactions", handle_interaction)
    return app


class InteractionsServer:
    """Runs the interactions endpoint on the bot's event loop."""

    def __init__(self, verifier: InteractionVerifier, host: str, port: int):
        self.host = host
        self.port = port
        self._app = create_app(verifier)
        self._runner: Optional[web.AppRunner] = None

    @property
    def running(self) -> bool:
        return self._runner is not None

    async def start(self) -> None:
        if self._runner is not None:
            return
        runner = web.AppRunner(self._app)
        await runner.setup()
        await web.TCPSite(runner, self.host, self.port).start()
        self._runner = runner
        logger.info(f"Listening for interactions on {self.host}:{self.port}")

    async def stop(self) -> None:
        if self._runner is None:
            return
        await self._runner.cleanup()
        self._runner = None
        logger.info("Interactions server stopped.")

"""Pycord bot that feeds inbound messages to a CommandManager."""

from __future__ import annotations

import asyncio
import contextlib

import discord

from ..logging import bind_run_context, clear_context, get_logger
from ..manager import CommandManager
from .context import DiscordMessageContext

logger = get_logger(__name__)


class DiscordCommandBot:
    def __init__(
        self,
        token: str,
        manager: CommandManager,
        *,
        guild_id: int | None = None,
    ) -> None:
        self._token = token
        self._manager = manager
        self._guild_id = guild_id
        # Defer bot creation until inside async context
        self._bot: discord.Bot | None = None
        self._ready = asyncio.Event()
        self._start_task: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[bool]] = set()

    def _ensure_bot(self) -> discord.Bot:
        if self._bot is not None:
            return self._bot

        intents = discord.Intents.default()
        intents.message_content = True
        intents.guilds = True
        intents.messages = True

        debug_guilds = [self._guild_id] if self._guild_id else None
        self._bot = discord.Bot(intents=intents, debug_guilds=debug_guilds)

        @self._bot.event
        async def on_ready() -> None:
            assert self._bot is not None
            logger.info("discord.ready", user=str(self._bot.user))
            self._ready.set()

        @self._bot.event
        async def on_message(message: discord.Message) -> None:
            self.on_message(message)

        return self._bot

    @property
    def bot(self) -> discord.Bot:
        return self._ensure_bot()

    @property
    def manager(self) -> CommandManager:
        return self._manager

    def on_message(self, message: discord.Message) -> asyncio.Task[bool] | None:
        """Dispatch ``message`` on its own task so slow handlers don't block."""
        bot = self._ensure_bot()
        if message.author == bot.user:
            return None
        task = asyncio.create_task(self.handle_message(message))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def handle_message(self, message: discord.Message) -> bool:
        context = DiscordMessageContext(message)
        bind_run_context(channel_id=message.channel.id, message_id=message.id)
        try:
            return await self._manager.execute_command(context)
        except Exception:
            logger.exception("dispatch.error", message_id=message.id)
            return False
        finally:
            clear_context()

    async def start(self) -> None:
        """Log in and return once the gateway reports ready."""
        bot = self._ensure_bot()
        if self._start_task is None:
            self._start_task = asyncio.create_task(
                bot.start(self._token), name="cmdroute-discord"
            )
        waiter = asyncio.create_task(self._ready.wait())
        try:
            await asyncio.wait(
                {self._start_task, waiter}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            waiter.cancel()
        if self._ready.is_set():
            return
        # The connection ended before on_ready; surface the login error.
        self._start_task.result()
        raise RuntimeError("Discord connection closed before it became ready")

    async def run(self) -> None:
        """Connect and process messages until the bot is closed."""
        try:
            await self.start()
            assert self._start_task is not None
            await self._start_task
        finally:
            await self.close()

    async def close(self) -> None:
        pending = list(self._tasks)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        if self._bot is not None and not self._bot.is_closed():
            await self._bot.close()
        if self._start_task is not None and not self._start_task.done():
            self._start_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._start_task

import discord
from discord.ext import commands
import logging
import os
from datetime import datetime

from age_report import DEFAULT_CATEGORY, build_report, default_birth_date, user_message
from errors import InvalidCategoryError, PetAgeError
from pet_calculator import SizeCategory
from preferences import JsonPreferenceStore

logger = logging.getLogger(__name__)

ERROR_PREFIX = "🚨  "
EMBED_COLOR = 0xFFC916


def store_for_user(user_id):
    """Postgres when DATABASE_URL is configured, the JSON file otherwise"""
    if os.getenv('DATABASE_URL'):
        from database import PostgresPreferenceStore
        return PostgresPreferenceStore(user_id)
    return JsonPreferenceStore(user_id)


def resolve_inputs(store, birthdate=None, category=None, today=None):
    """Fill in missing command arguments from stored preferences or defaults"""
    if birthdate is not None and category is None and birthdate.lower() in {c.value for c in SizeCategory}:
        birthdate, category = None, birthdate

    stored_birthdate, stored_category = store.load_preferences()
    if birthdate is None:
        birthdate = stored_birthdate or default_birth_date(today).isoformat()
    if category is None:
        category = stored_category or DEFAULT_CATEGORY.value
    return birthdate, category.lower()


def run_dogage(store, birthdate=None, category=None, now=None):
    """Resolve the inputs, build the report and remember them on success"""
    now = now or datetime.now()
    birthdate, category = resolve_inputs(store, birthdate, category, now.date())
    report = build_report(birthdate, category, now)
    store.save_preferences(report.birth_date.isoformat(), report.category.value)
    return report


def build_age_embed(report):
    embed = discord.Embed(title="🐾 Dog Age Calculator", color=EMBED_COLOR)
    embed.add_field(name="Size", value=report.category.label, inline=False)
    embed.add_field(name="Actual Age", value=report.dog_age_display, inline=True)
    embed.add_field(name="Human Age", value=f"**{report.human_age} years**", inline=True)
    if report.note:
        embed.set_footer(text=report.note)
    return embed


@commands.command(aliases=['age', 'humanage'])
async def dogage(ctx, birthdate: str = None, category: str = None):
    """Convert a dog's age to human years
    Usage: gs.dogage [birthdate] [small|medium|large]
    Example: gs.dogage 2021-05-14 large
    """
    store = store_for_user(ctx.author.id)
    try:
        report = run_dogage(store, birthdate, category)
    except InvalidCategoryError as e:
        logger.warning(f"Bad size category from {ctx.author}: {e}")
        await ctx.send(ERROR_PREFIX + "Size must be one of: small, medium, large")
        return
    except PetAgeError as e:
        logger.warning(f"Rejected dogage input from {ctx.author}: {e}")
        await ctx.send(ERROR_PREFIX + user_message(e))
        return

    await ctx.send(embed=build_age_embed(report))


class DiscordBot(commands.Bot):
    def __init__(self):
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(command_prefix='gs.', intents=intents)
        self.add_command(dogage)

    async def on_ready(self):
        """Called when the bot is ready"""
        logger.info(f'{self.user} has connected to Discord!')
        logger.info(f'Bot is in {len(self.guilds)} guilds')

    async def on_error(self, event, *args, **kwargs):
        """Handle errors"""
        logger.error(f'Error in event {event}', exc_info=True)

    async def on_command_error(self, ctx, error):
        """Handle command errors"""
        logger.error(f'Command error: {error}', exc_info=True)

    async def close(self):
        """Clean shutdown"""
        logger.info('Shutting down Discord bot...')
        await super().close()

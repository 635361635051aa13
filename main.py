import asyncio
import threading
import logging
import os
from bot import DiscordBot
from web_server import create_app

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler('dogage.log'),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger(__name__)


def run_discord_bot(discord_token):
    """Run the Discord bot in a separate thread"""
    try:
        bot = DiscordBot()
        logger.info("Starting Discord bot...")
        asyncio.run(bot.start(discord_token))
    except Exception as e:
        logger.error(f"Error running Discord bot: {e}")


def run_flask_server():
    """Run the Flask server with the calculator page"""
    port = int(os.getenv('PORT', 5000))
    app = create_app()
    logger.info(f"Starting Flask server on port {port}...")
    app.run(host='0.0.0.0', port=port, debug=False)


if __name__ == "__main__":
    logger.info("Starting dog age calculator...")

    if os.getenv('DATABASE_URL'):
        from database import PreferenceDB
        try:
            logger.info("Initializing database tables...")
            PreferenceDB().init_database()
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")

    discord_token = os.getenv('DISCORD_TOKEN')
    if discord_token:
        discord_thread = threading.Thread(target=run_discord_bot, args=(discord_token,), daemon=True)
        discord_thread.start()
    else:
        logger.warning("DISCORD_TOKEN not set, running web calculator only")

    run_flask_server()

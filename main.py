import asyncio
import sys
from traceback import print_exc
from mctap.cli import Console
from mctap.config import config
from mctap.logger import Logger
from mctap.proxy import Proxy

stop_event = asyncio.Event()

async def entry():
    config.load()
    logger = Logger(
        thread_name="main",
        output_levels=config.get_list("log-levels", ("INFO", "WARN", "ERROR")),
        log_to_file=config.get_bool("log-to-file", True),
        logs_folder=config.get("logs-folder", "logs")
    )
    proxy = Proxy(config, logger)

    tasks = []
    if sys.stdin.isatty():
        console = Console(stop_event, proxy)
        logger.set_printer(console.print)
        tasks.append(asyncio.create_task(console.input()))

    try:
        await proxy.start()
        await stop_event.wait()
        logger.info("🛑 Proxy shutting down...")
    except Exception as e:
        logger.error(f"🛑 Fatal error: {e}")
        print_exc()
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        await proxy.close()
        logger.close()
        print("\nExited cleanly.")

def run():
    try:
        asyncio.run(entry())
    except KeyboardInterrupt:
        print("\n🛑 Proxy shutdown requested via Ctrl+C")

if __name__ == "__main__":
    run()

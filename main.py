#!/usr/bin/env python3

##############################################
#                                            #
#           PAGE AGENT REPL                  #
#                                            #
##############################################

import asyncio

from dotenv import load_dotenv
from browser_agent.prebuilt import BrowserPageAgent
from utils.cli import read_user_goal, print_result
from utils.load_config import load_config

from utils.logger import get_logger, init_logger
logger = get_logger(__name__)

OPEN_COMMAND = ":open "


async def main() -> None:
    init_logger("config.toml")
    load_dotenv()

    config = load_config()
    agent = BrowserPageAgent(config=config)
    current_url = config.agent.start_url
    logger.info("🤖 Agent started. Ask about the page, or ':open <url>' to switch pages…", url=current_url)

    try:
        while True:
            goal_text = None
            try:
                goal_text = await asyncio.to_thread(read_user_goal)
                if not goal_text:
                    continue

                if goal_text.startswith(OPEN_COMMAND):
                    current_url = goal_text[len(OPEN_COMMAND):].strip() or current_url
                    logger.info("page_selected", url=current_url)
                    continue

                result = await agent.solve(goal_text, current_url)
                print_result(result)

            except KeyboardInterrupt:
                logger.info("🤖 Bye!")
                break

            except Exception as exc:
                logger.exception("solve_failed", goal=goal_text, error=str(exc))
    finally:
        await agent.aclose()


if __name__ == "__main__":
    asyncio.run(main())

import asyncio
import sys

from dotenv import load_dotenv
from loguru import logger

from blog_agent_bot.app_config import load_json_config, parse_app_config, resolve_runtime_env
from blog_agent_bot.bootstrap import bootstrap_runtime
from blog_agent_bot.reply_formatting import split_message, truncate_caption

CONSOLE_USER_KEY = "console"


async def main() -> None:
    load_dotenv()

    app = parse_app_config(load_json_config())
    env = resolve_runtime_env(app.provider_name)
    if not env.provider_api_key:
        logger.error(f"{env.provider_env_var} environment variable is required.")
        sys.exit(1)

    try:
        runtime = await bootstrap_runtime(app, env)
    except ValueError as ex:
        logger.error(f"Invalid configuration: {ex}")
        sys.exit(1)

    print("blog-agent-bot (type 'exit' to quit, '/help' for commands)")
    print(f"Provider: {app.provider_name} ({app.model})")
    print("Tools:")
    for t in runtime.tools:
        print(f"  - {t.name}")
    if runtime.log_descriptions:
        print(f"Logging: {', '.join(runtime.log_descriptions)}")
    print()

    try:
        while True:
            try:
                user_input = await asyncio.to_thread(input, "you> ")
            except (EOFError, KeyboardInterrupt):
                break

            trimmed = user_input.strip()

            if trimmed in ("exit", "quit"):
                break

            if not trimmed:
                continue

            try:
                reply = await runtime.agent.handle(CONSOLE_USER_KEY, trimmed)
            except Exception as ex:
                logger.error(f"Unhandled error: {ex}")
                continue

            for image in reply.images:
                caption = truncate_caption(image.caption)
                print(f"[image] {image.url}" + (f" ({caption})" if caption else ""))
            for part in split_message(reply.text, app.max_reply_length):
                print(f"assistant> {part}")
            print()
    finally:
        await runtime.close()


if __name__ == "__main__":
    asyncio.run(main())

import sys

from modatrix import constants
from modatrix.log import get_logger, setup_sentry
from modatrix.replay import run_from_file

log = get_logger("modatrix")


def main() -> None:
    """Replay the configured chat dump through the filter and log what would be shown."""
    setup_sentry()

    result = run_from_file(constants.Replay.path)
    for message in result.accepted:
        effects = f" [{', '.join(str(effect) for effect in message.effects)}]" if message.effects else ""
        log.info(f"+ {message.user}: {message.content}{effects}")
    log.info(f"Accepted {len(result.accepted)} messages, dropped {result.dropped}.")


try:
    main()
except FileNotFoundError as e:
    log.fatal(str(e))
    log.fatal("Set REPLAY_PATH to the chat dump to replay.")

    sys.exit(1)

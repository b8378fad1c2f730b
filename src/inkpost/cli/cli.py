"""Main CLI entry point"""

import asyncio
from typing import Any, Dict, List, Optional

from rich.console import Console

from inkpost.utils.config import ConfigManager
from inkpost.utils.console import get_console
from inkpost.utils.errors import InkpostError, format_error_message
from inkpost.utils.logging import async_log_call, get_logger, init_logging

from .cli_parser import setup_argument_parser
from .router import CommandRouter

logger = get_logger(__name__)


def _args_to_dict(args) -> Dict[str, Any]:
    """Convert argparse Namespace to dictionary."""
    result = {}
    for key, value in vars(args).items():
        if key != "command" and value is not None:
            result[key] = value
    return result


@async_log_call
async def dispatch_command(args, console: Console, config_manager: ConfigManager) -> int:
    """Dispatch command via router.

    Returns:
        Exit code (0 = success, 1 = error)
    """
    try:
        router = CommandRouter(console, config_manager)
        success = await router.route(args.command, _args_to_dict(args))
        return 0 if success else 1

    except InkpostError as e:
        logger.error(f"Command '{args.command}' failed: {e.message}", extra=e.details)
        console.print(f"Error: {format_error_message(e)}", style="red", markup=False)
        return 1

    except ValueError as e:
        logger.error(f"Invalid command: {e}")
        console.print(f"Error: {e}", style="red", markup=False)
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code
    """
    console = get_console()

    try:
        parser = setup_argument_parser()
        args = parser.parse_args(argv)

        try:
            config_manager = ConfigManager()
        except InkpostError as e:
            console.print(f"Configuration error: {e.message}", style="red", markup=False)
            return 1

        init_logging(config_manager.config.logging.log_level)
        return asyncio.run(dispatch_command(args, console, config_manager))

    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        return 130  # Standard SIGINT exit code


if __name__ == "__main__":
    raise SystemExit(main())

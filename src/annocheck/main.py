from __future__ import annotations

"""
Main Entry Point and Global Supervisor.

Installs a process-wide exception hook so that a crash outside the normal
error paths is logged and its trace printed, then routes to the CLI.
"""

import logging
import sys
import traceback
from typing import Any


def global_exception_handler(exctype: type[BaseException], value: BaseException, tb: Any) -> None:
    """
    Log an unhandled exception and print its trace to stderr.

    Args:
        exctype: Exception class.
        value: Exception instance.
        tb: Traceback object.
    """
    if issubclass(exctype, KeyboardInterrupt):
        sys.__excepthook__(exctype, value, tb)
        return

    stack_trace = "".join(traceback.format_exception(exctype, value, tb))
    logging.getLogger("annocheck.supervisor").critical(f"FATAL EXCEPTION DETECTED: {value}")

    print("\n" + "=" * 80, file=sys.stderr)
    print("CRITICAL ERROR (ANNOCHECK)", file=sys.stderr)
    print("=" * 80, file=sys.stderr)
    print(stack_trace, file=sys.stderr)


sys.excepthook = global_exception_handler


def main() -> int:
    """
    Run the CLI and convert unexpected crashes into exit code 1.

    Returns:
        int: Process exit code.
    """
    try:
        from annocheck.interface.cli.app import main as cli_main
        return cli_main()
    except Exception as e:
        global_exception_handler(type(e), e, e.__traceback__)
        return 1


if __name__ == "__main__":
    sys.exit(main())

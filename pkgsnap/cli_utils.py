"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import logging
import sys
import click
from functools import wraps
from .config import configure_logging, load_config
from .exit_codes import (
    SUCCESS, INTERRUPTED,
    get_exit_code_for_exception, CommandError
)

logger = logging.getLogger(__name__)


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Config loaded once and passed in as ``config``
    - Dict results printed as single-line JSON on stdout
    - Errors printed as a JSON object with a matching exit code
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            config = load_config()
            configure_logging(config)
            kwargs['config'] = config

            result = func(*args, **kwargs)

            if isinstance(result, dict):
                print(json.dumps(result, ensure_ascii=False), flush=True)
            elif isinstance(result, (list, tuple)):
                for item in result:
                    print(json.dumps(item, ensure_ascii=False), flush=True)

            sys.exit(SUCCESS)

        except KeyboardInterrupt:
            click.echo("Interrupted by user", err=True)
            sys.exit(INTERRUPTED)
        except click.ClickException:
            # Click exceptions already have their exit code
            raise
        except CommandError as e:
            # Our custom command errors with specific exit codes
            click.echo(f"Error: {e}", err=True)
            error_obj = {
                "error": str(e),
                "type": type(e).__name__,
                "exit_code": e.exit_code
            }
            print(json.dumps(error_obj, ensure_ascii=False), flush=True)
            sys.exit(e.exit_code)
        except Exception as e:
            click.echo(f"Command failed: {e}", err=True)
            error_obj = {
                "error": str(e),
                "type": type(e).__name__
            }
            print(json.dumps(error_obj, ensure_ascii=False), flush=True)
            sys.exit(get_exit_code_for_exception(e))

    return wrapper

"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import logging
import sys
import click
from functools import wraps
from typing import Any

from .exit_codes import (
    SUCCESS, INTERRUPTED, USAGE_ERROR,
    get_exit_code_for_exception, CommandError
)
from .services.parameters import parse_parameters


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Automatic --verbose/-v and --quiet/-q log level handling
    - Clean JSON output on stdout for returned dicts and lists
    - Errors reported as a JSON object on stderr with a mapped exit code

    A command may return an int to choose its exit code.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        verbose = kwargs.pop('verbose', False)
        quiet = kwargs.pop('quiet', False)
        if verbose:
            logging.getLogger("gitscm").setLevel(logging.DEBUG)
        elif quiet:
            logging.getLogger("gitscm").setLevel(logging.WARNING)

        try:
            result = func(*args, **kwargs)
            if isinstance(result, int) and not isinstance(result, bool):
                sys.exit(result)
            output_result(result)
            sys.exit(SUCCESS)
        except KeyboardInterrupt:
            click.echo("Interrupted by user", err=True)
            sys.exit(INTERRUPTED)
        except click.ClickException:
            raise
        except CommandError as e:
            error_obj = e.to_dict()
            error_obj['exit_code'] = e.exit_code
            click.echo(json.dumps(error_obj, ensure_ascii=False), err=True)
            sys.exit(e.exit_code)
        except ValueError as e:
            click.echo(json.dumps({"error": str(e), "type": type(e).__name__}), err=True)
            sys.exit(USAGE_ERROR)
        except OSError as e:
            click.echo(json.dumps({"error": str(e), "type": type(e).__name__}), err=True)
            sys.exit(get_exit_code_for_exception(e))

    return wrapper


def output_result(result: Any):
    """Print dicts as one JSON line and lists as JSONL."""
    if isinstance(result, (list, tuple)):
        for item in result:
            click.echo(json.dumps(item, ensure_ascii=False))
    elif isinstance(result, dict):
        click.echo(json.dumps(result, ensure_ascii=False))


def parameter_values(values) -> dict:
    """Turn repeated -P NAME=VALUE options into a dict."""
    try:
        return parse_parameters(values)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="'-P' / '--param'")


# Standard options that many commands share
common_options = {
    'verbose': click.option('-v', '--verbose', is_flag=True,
                            help='Show debug logging'),
    'quiet': click.option('-q', '--quiet', is_flag=True,
                          help='Only log warnings and errors'),
    'pretty': click.option('-p', '--pretty', is_flag=True,
                           help='Human-readable output (default: JSONL)'),
    'workspace': click.option('-w', '--workspace', type=click.Path(file_okay=False),
                              help='Workspace directory (default: from config)'),
    'param': click.option('-P', '--param', 'params', multiple=True, metavar='NAME=VALUE',
                          help='Build parameter used to expand branch names (repeatable)'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('verbose', 'pretty')
        def my_command(verbose, pretty):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator

from __future__ import annotations

import functools
import pathlib
from typing import TYPE_CHECKING, Any

import click

from confswap import exceptions

if TYPE_CHECKING:
    from collections.abc import Callable


def _handle_confswap_error(e: exceptions.ConfswapError) -> click.ClickException:
    """Convert ConfswapError to user-friendly ClickException."""
    message = e.format_user_message()
    if suggestion := e.get_suggestion():
        message = f"{message}\n\nTip: {suggestion}"
    return click.ClickException(message)


def with_error_handling[**P, R](func: Callable[P, R]) -> Callable[P, R]:
    """Wrap function with confswap error handling."""

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return func(*args, **kwargs)
        except (click.ClickException, click.exceptions.Exit):
            raise
        except exceptions.ConfswapError as e:
            raise _handle_confswap_error(e) from e
        except Exception as e:
            raise click.ClickException(repr(e)) from e

    return wrapper


def confswap_command(
    name: str | None = None, **attrs: Any
) -> Callable[[Callable[..., Any]], click.Command]:
    """Create a Click command that reports ConfswapError with its suggestion."""

    def decorator(func: Callable[..., Any]) -> click.Command:
        return click.command(name=name, **attrs)(with_error_handling(func))

    return decorator


def root_option[F: Callable[..., Any]](func: F) -> F:
    """Add --root, the directory whose target file is swapped (default: cwd)."""
    return click.option(
        "--root",
        type=click.Path(exists=True, file_okay=False, path_type=pathlib.Path),
        default=None,
        help="Project root (default: current directory)",
    )(func)

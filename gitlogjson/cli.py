#!/usr/bin/env python3

import codecs
import sys
from typing import Optional

import click

from . import __version__
from .config import configure_logging, load_config
from .domain import check_delimiter
from .domain.changelog import ORDERS
from .exit_codes import CommandError, INTERRUPTED, exit_with_code
from .infra import STDOUT
from .render import render_options, render_summary
from .services import ChangelogService


def _parse_delimiter(ctx, param, value: Optional[str]) -> Optional[str]:
    """Accept a literal ASCII character or an escape such as \\x1f or \\t."""
    if value is None:
        return None
    if value.startswith('\\'):
        try:
            value = codecs.decode(value, 'unicode_escape')
        except UnicodeDecodeError as e:
            raise click.BadParameter(f"invalid escape {value!r}: {e}")
    try:
        return check_delimiter(value)
    except ValueError as e:
        raise click.BadParameter(str(e))


@click.command(name='gitlogjson')
@click.option('--repo', default=None, type=click.Path(file_okay=False),
              help='Repository to read tags and history from (default: current directory)')
@click.option('-o', '--dest', default=None,
              help="Output file (default: changelog.json; '-' for stdout)")
@click.option('--short-hash/--full-hash', 'short_hash', default=None,
              help='Use abbreviated commit ids')
@click.option('--filter', 'tag_filter', default=None, metavar='GLOB',
              help="Only use tags matching a glob, e.g. 'v2.*'")
@click.option('--pretty/--compact', 'pretty', default=None,
              help='Indent the JSON document')
@click.option('--order', type=click.Choice(ORDERS), default=None,
              help='Tag order in the document (default: newest-first)')
@click.option('--delimiter', default=None, callback=_parse_delimiter,
              help='Field separator requested from git log (default: \\x1f)')
@click.option('--timeout', type=click.FloatRange(min=0, min_open=True), default=None,
              help='Seconds allowed per git invocation (default: 30)')
@click.option('--config', 'config_path', type=click.Path(dir_okay=False), default=None,
              help='Configuration file (TOML, JSON or YAML)')
@click.option('-v', '--verbose', is_flag=True, help='Show the effective options')
@click.option('-q', '--quiet', is_flag=True, help='Suppress the summary table')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.version_option(version=__version__, prog_name='gitlogjson')
def cli(repo, dest, short_hash, tag_filter, pretty, order, delimiter, timeout,
        config_path, verbose, quiet, debug):
    """Write a JSON changelog of the commits in each release tag.

    Tags that parse as semantic versions are ordered by precedence; each
    tag lists the commits reachable from it but not from the previous tag.
    Commits after the newest tag are not included.

    \b
    Examples:
        gitlogjson                              # ./changelog.json
        gitlogjson --pretty --short-hash
        gitlogjson --filter 'v2.*' -o docs/changelog.json
        gitlogjson --order oldest-first -o -    # print to stdout
    """
    configure_logging(debug)

    try:
        config = load_config(
            repo=repo,
            config_path=config_path,
            overrides={
                'dest': dest,
                'short_hash': short_hash,
                'filter': tag_filter,
                'pretty': pretty,
                'order': order,
                'delimiter': delimiter,
                'timeout': timeout,
            }
        )
        if verbose:
            render_options(config.to_dict())

        result = ChangelogService(config).generate()

        if not quiet and config.dest != STDOUT:
            render_summary(result)

    except KeyboardInterrupt:
        exit_with_code(INTERRUPTED, "Interrupted by user")
    except CommandError as e:
        exit_with_code(e.exit_code, f"ERROR: {e}")


def main():
    cli()


if __name__ == "__main__":
    main()

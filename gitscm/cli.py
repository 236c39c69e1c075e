#!/usr/bin/env python3

import click

from gitscm.config import load_config, configure_logging
from gitscm.commands.poll import poll_handler
from gitscm.commands.checkout import checkout_handler
from gitscm.commands.changes import changes_handler, changelog_handler
from gitscm.commands.env import env_handler

# Command groups
from gitscm.commands.revision import revision_cmd
from gitscm.commands.config import config_cmd


@click.group()
@click.version_option()
def cli():
    """gitscm - Keep build workspaces in sync with git and decide when to build.

    Polls a project's branch for commits that have not been built, prepares
    workspaces (clone, fetch, checkout, optional merge and clean) and
    reports the commits that went into each build.
    """
    configure_logging(load_config())


cli.add_command(poll_handler, name='poll')
cli.add_command(checkout_handler, name='checkout')
cli.add_command(changes_handler, name='changes')
cli.add_command(changelog_handler, name='changelog')
cli.add_command(env_handler, name='env')

# Command groups
cli.add_command(revision_cmd)
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()

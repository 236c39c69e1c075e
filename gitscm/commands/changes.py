"""
Handles the 'changes' and 'changelog' commands.

'changes' lists the commits between two revisions of a project;
'changelog' reads back a change log file written by 'checkout'.
"""

import click

from ..api import GitSCM
from ..cli_utils import standard_command, add_common_options
from ..config import get_project_config
from ..services.changelog import read_changelog, write_changelog
from ..render import render_changes_table


@click.command('changes')
@click.argument('project')
@click.argument('from_revision')
@click.argument('to_revision')
@click.option('-o', '--output', type=click.Path(dir_okay=False),
              help='Also write the changes as a change log file')
@add_common_options('workspace', 'pretty', 'verbose', 'quiet')
@standard_command
def changes_handler(project, from_revision, to_revision, output, workspace, pretty):
    """
    List the commits of PROJECT in FROM_REVISION..TO_REVISION.

    The workspace must already be cloned (run 'gitscm poll' or
    'gitscm checkout' first).

    \b
    Examples:
      gitscm changes myproject 3f2a9c1 HEAD
      gitscm changes myproject v1.0 v1.1 --pretty
    """
    scm = GitSCM()
    browser = get_project_config(scm.config, project).browser
    changes = scm.changes(project, from_revision, to_revision, workspace=workspace)

    if output:
        write_changelog(output, changes)

    if pretty:
        render_changes_table(changes, browser, title=f"{from_revision}..{to_revision}")
        return None
    return [entry.to_dict(browser) for entry in changes]


@click.command('changelog')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@add_common_options('pretty', 'verbose', 'quiet')
@standard_command
def changelog_handler(path, pretty):
    """Show the entries of the change log file at PATH."""
    changes = read_changelog(path)
    if pretty:
        render_changes_table(changes, title=path)
        return None
    return [entry.to_dict() for entry in changes]

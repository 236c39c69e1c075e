"""
Handles the 'checkout' command: prepare a workspace for a build.
"""

import os

import click

from ..api import GitSCM
from ..cli_utils import standard_command, add_common_options, parameter_values, output_result
from ..config import get_project_config
from ..exit_codes import INTEGRATION_FAILED, SUCCESS
from ..render import render_checkout


@click.command('checkout')
@click.argument('project')
@click.option('-c', '--changelog', type=click.Path(dir_okay=False),
              help='Write the commits since the last build to this file')
@click.option('--owner', type=int, metavar='PID',
              help='Process running the build (default: the calling shell)')
@add_common_options('workspace', 'param', 'pretty', 'verbose', 'quiet')
@standard_command
def checkout_handler(project, changelog, owner, workspace, params, pretty):
    """
    Clone/fetch PROJECT's workspace and check out the branch to build.

    With merging enabled the branch is merged onto the merge target first;
    if it does not merge cleanly the command exits with code 67
    and the build should not proceed.

    The project stays marked as building, so polls skip it, until the
    build reports back: run 'gitscm revision record' once it has
    succeeded (records the revision checked out here) or
    'gitscm revision abort' if it failed. The mark is dropped on its own
    when the owner process exits.

    \b
    Examples:
      gitscm checkout myproject --changelog build/changelog.txt
      gitscm checkout myproject -P BRANCH=feature/login --pretty
    """
    scm = GitSCM()
    checkout = scm.checkout(project, workspace=workspace, changelog=changelog,
                            parameters=parameter_values(params),
                            owner=owner if owner is not None else os.getppid())

    if pretty:
        render_checkout(checkout, get_project_config(scm.config, project).browser)
    else:
        output_result(checkout.to_dict())

    return SUCCESS if checkout.success else INTEGRATION_FAILED

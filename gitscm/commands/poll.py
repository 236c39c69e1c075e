"""
Handles the 'poll' command: is there new work to build?

This command follows our design principles:
- Default output is a JSON line
- --pretty flag for human-readable output
- --exit-code to report "no changes" through the exit status
"""

import click

from ..api import GitSCM
from ..cli_utils import standard_command, add_common_options, parameter_values, output_result
from ..exit_codes import NO_CHANGES, SUCCESS
from ..render import render_poll_result


@click.command('poll')
@click.argument('project')
@click.option('--exit-code', 'exit_code', is_flag=True,
              help=f'Exit with {NO_CHANGES} when there is nothing new to build')
@add_common_options('workspace', 'param', 'pretty', 'verbose', 'quiet')
@standard_command
def poll_handler(project, exit_code, workspace, params, pretty):
    """
    Check PROJECT's remote branch for commits that have not been built.

    Clones the workspace on first use and fetches, but does not check
    anything out. A project that is currently building is reported as
    having no changes.

    \b
    Examples:
      gitscm poll myproject
      gitscm poll myproject -P BRANCH=release-2.1 --exit-code && gitscm checkout myproject
    """
    scm = GitSCM()
    result = scm.poll(project, workspace=workspace, parameters=parameter_values(params))

    if pretty:
        render_poll_result(result)
    else:
        output_result(result.to_dict())

    if exit_code and not result.changes:
        return NO_CHANGES
    return SUCCESS

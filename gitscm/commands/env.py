"""
Handles the 'env' command: revision variables for the build environment.
"""

import click

from ..api import GitSCM
from ..cli_utils import standard_command, add_common_options, parameter_values


@click.command('env')
@click.argument('project')
@click.option('--shell', is_flag=True, help='Print NAME=VALUE lines instead of JSON')
@add_common_options('workspace', 'param', 'verbose', 'quiet')
@standard_command
def env_handler(project, shell, workspace, params):
    """
    Print GIT_REVISION and GIT_REVISION_SHORT for PROJECT.

    Variables that cannot be resolved (e.g. before the first clone) are
    omitted.

    \b
    Examples:
      eval "$(gitscm env myproject --shell)"
    """
    scm = GitSCM()
    env = scm.env_vars(project, workspace=workspace, parameters=parameter_values(params))
    if shell:
        for name, value in env.items():
            click.echo(f"{name}={value}")
        return None
    return env

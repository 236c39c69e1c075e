"""
Handles the 'revision' command group: the last built revision per project.
"""

import click

from ..api import GitSCM
from ..cli_utils import standard_command, add_common_options
from ..config import get_project_config
from ..render import render_key_values


@click.group('revision')
def revision_cmd():
    """Last successfully built revision of each project."""
    pass


@revision_cmd.command('show')
@click.argument('project')
@add_common_options('pretty', 'verbose', 'quiet')
@standard_command
def show_revision(project, pretty):
    """Show the last built revision of PROJECT and any build awaiting its result."""
    scm = GitSCM()
    get_project_config(scm.config, project)
    data = {'project': project, 'last_built_revision': scm.last_built(project)}
    pending = scm.pending_revision(project)
    if pending:
        data['pending_revision'] = pending
    if pretty:
        render_key_values(data)
        return None
    return data


@revision_cmd.command('set')
@click.argument('project')
@click.argument('revision')
@add_common_options('verbose', 'quiet')
@standard_command
def set_revision(project, revision):
    """Record REVISION as the last built revision of PROJECT."""
    scm = GitSCM()
    get_project_config(scm.config, project)
    scm.record_build(project, revision)
    return {'project': project, 'last_built_revision': revision}


@revision_cmd.command('record')
@click.argument('project')
@add_common_options('verbose', 'quiet')
@standard_command
def record_revision(project):
    """
    Record the revision prepared by 'gitscm checkout' as built.

    Run this after the build that followed the checkout succeeded. It
    also ends the build, so polls of PROJECT resume.
    """
    scm = GitSCM()
    revision = scm.finish_build(project, success=True)
    return {'project': project, 'last_built_revision': revision}


@revision_cmd.command('abort')
@click.argument('project')
@add_common_options('verbose', 'quiet')
@standard_command
def abort_build(project):
    """End a failed build of PROJECT without recording its revision."""
    scm = GitSCM()
    revision = scm.finish_build(project, success=False)
    return {'project': project, 'aborted_revision': revision,
            'last_built_revision': scm.last_built(project)}


@revision_cmd.command('list')
@add_common_options('pretty', 'verbose', 'quiet')
@standard_command
def list_revisions(pretty):
    """List the recorded revisions of all projects."""
    scm = GitSCM()
    rows = [
        {'project': project, 'last_built_revision': scm.last_built(project)}
        for project in scm.revisions.projects()
    ]
    if pretty:
        render_key_values({row['project']: row['last_built_revision'] for row in rows},
                          title="Last built revisions")
        return None
    return rows

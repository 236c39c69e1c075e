import click
import json

from gitscm.api import GitSCM
from gitscm.cli_utils import standard_command, add_common_options
from gitscm.config import load_config, save_config, get_config_path
from gitscm.exit_codes import ConfigError


@click.group("config")
def config_cmd():
    """Configuration management commands."""
    pass


@config_cmd.command("show")
@click.option("--pretty", is_flag=True, help="Display as formatted JSON instead of single-line JSONL")
@click.option("--path", is_flag=True, help="Show the config file path being used")
def show_config(pretty, path):
    """Show the current configuration with all merges applied.

    By default, outputs single-line JSON (JSONL format).
    Use --pretty for human-readable formatted output.
    Use --path to see which config file is being used.
    """
    if path:
        print(json.dumps({"config_path": str(get_config_path())}))
        return

    config = load_config()

    if pretty:
        print(json.dumps(config, indent=2, ensure_ascii=False))
    else:
        print(json.dumps(config, ensure_ascii=False))


@config_cmd.command("add-project")
@click.argument("name")
@click.argument("source")
@click.option("-b", "--branch", default="master", show_default=True,
              help="Branch to build; may reference build parameters as $NAME")
@click.option("--clean", is_flag=True, help="Remove untracked files after checkout")
@click.option("--merge-target", help="Merge the branch onto this branch before building")
@click.option("--gitweb", "gitweb_url", help="Base URL of a gitweb instance for links")
@click.option("--force", is_flag=True, help="Replace an existing project of the same name")
@add_common_options('verbose', 'quiet')
@standard_command
def add_project(name, source, branch, clean, merge_target, gitweb_url, force):
    """Add project NAME building from repository SOURCE."""
    config_path = get_config_path()
    config = load_config(config_path)
    projects = config.setdefault("projects", {})
    if name in projects and not force:
        raise ConfigError(f"Project '{name}' already exists (use --force to replace it)")

    project = {
        "source": source,
        "branch": branch,
        "clean": clean,
        "merge": bool(merge_target),
        "merge_target": merge_target or "",
    }
    if gitweb_url:
        project["browser"] = {"type": "gitweb", "url": gitweb_url}
    projects[name] = project

    save_config(config, config_path)
    return {"project": name, **project}


@config_cmd.command("check-git")
@add_common_options('verbose', 'quiet')
@standard_command
def check_git():
    """Check that the configured git executable can be run."""
    scm = GitSCM()
    return {"executable": scm.git.executable, "version": scm.git.version()}

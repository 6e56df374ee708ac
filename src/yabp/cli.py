"""Command-line interface for yabp."""

import logging
from pathlib import Path
from typing import Any, NoReturn

import click
import yaml
from rich.logging import RichHandler
from rich.markup import escape
from rich.tree import Tree

from yabp import __version__
from yabp.agents import AgentStore
from yabp.config import (
    DEFAULT_CONFIG,
    YabpConfig,
    apply_env_overrides,
    copy_default_agents,
    ensure_home_yabp_dir,
    get_home_config_path,
    get_registry_path,
    home_config_exists,
    load_config,
    resolve_dir,
    run_all_checks,
    run_home_wizard,
    settings_from_config,
)
from yabp.console import console
from yabp.errors import YabpError
from yabp.history import ExecutionLogRepository
from yabp.projects import (
    WORKFLOW_TEMPLATES,
    FileNode,
    ProjectStore,
    create_project,
    get_policy,
    get_workflow_by_id,
    parse_prompt_catalogue,
    update_project_config,
)
from yabp.projects.base import AGENTS_KEY, PHASES_KEY, PROJECT_PATH_KEY, SELECTIONS_KEY
from yabp.projects.store import PROMPTS_MD
from yabp.prompts import build_variables, run_prompt
from yabp.runner import resolve_engine

logger = logging.getLogger(__name__)


def _load_settings() -> YabpConfig:
    return apply_env_overrides(load_config())


def _agent_store(config: YabpConfig) -> AgentStore:
    return AgentStore(resolve_dir(config.agents_dir, DEFAULT_CONFIG.agents_dir or ""))


def _project_store(config: YabpConfig) -> ProjectStore:
    base = resolve_dir(config.projects_dir, DEFAULT_CONFIG.projects_dir or "")
    return ProjectStore(get_registry_path(), base)


def _fail(error: Exception) -> NoReturn:
    console.print(f"[red]{escape(str(error))}[/red]")
    raise SystemExit(1) from error


def parse_assignments(values: tuple[str, ...]) -> dict[str, Any]:
    """Parse ``key=value`` options. Values are read as YAML scalars or lists."""
    result: dict[str, Any] = {}
    for item in values:
        key, sep, raw = item.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"Expected key=value, got: {item}")
        result[key.strip()] = yaml.safe_load(raw) if raw.strip() else ""
    return result


def parse_selections(values: tuple[str, ...]) -> dict[str, Any]:
    """Parse ``Section=Value`` options. A repeated section becomes a list."""
    selections: dict[str, Any] = {}
    for item in values:
        section, sep, value = item.partition("=")
        section, value = section.strip(), value.strip()
        if not sep or not section or not value:
            raise click.BadParameter(f"Expected Section=Value, got: {item}")
        if section not in selections:
            selections[section] = value
        elif isinstance(selections[section], list):
            selections[section].append(value)
        else:
            selections[section] = [selections[section], value]
    return selections


def version_callback(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    """Print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    console.print(f"yabp [bold cyan]{__version__}[/bold cyan]")
    ctx.exit()


@click.group(invoke_without_command=True)
@click.option(
    "--version",
    is_flag=True,
    callback=version_callback,
    expose_value=False,
    is_eager=True,
    help="Show version and exit.",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """YABP - compose agent prompt templates into project scaffolding."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    if ctx.invoked_subcommand is None:
        console.print("[bold]yabp[/bold] - agent-driven project scaffolding")
        console.print("\nRun [cyan]yabp --help[/cyan] for available commands.")


@main.command()
def preflight() -> None:
    """Validate environment is ready (agents, engine CLIs)."""
    config = _load_settings()
    if not run_all_checks(_agent_store(config).root):
        raise SystemExit(1)


@main.command()
@click.option(
    "--configure",
    is_flag=True,
    help="Run the configuration wizard for ~/.yabp/config.yaml.",
)
def init(configure: bool) -> None:
    """Initialize ~/.yabp and install the default agents.

    Agents that already exist in the agents directory are not overwritten.
    """
    home = ensure_home_yabp_dir()

    if configure:
        if home_config_exists():
            console.print(
                f"[yellow]Global config already exists at {get_home_config_path()}"
                "[/yellow]"
            )
            if click.confirm("Overwrite with new configuration?", default=False):
                run_home_wizard()
            else:
                console.print("\nNo changes made.")
        else:
            run_home_wizard()

    store = _agent_store(_load_settings())
    copied = copy_default_agents(store.root)
    if copied:
        console.print(
            f"[green]Copied {len(copied)} default agents to {store.root}[/green]"
        )
    else:
        console.print("[dim]Default agents already installed.[/dim]")
    console.print(f"[dim]yabp home: {home}[/dim]")


# Agents


@main.group(invoke_without_command=True)
@click.pass_context
def agent(ctx: click.Context) -> None:
    """Manage agents.

    Use subcommands: yabp agent list, yabp agent show, yabp agent create
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@agent.command("list")
@click.option("--verbose", "-v", is_flag=True, help="Show agent details.")
def agent_list(verbose: bool) -> None:
    """List available agents."""
    agents = _agent_store(_load_settings()).list_agents()

    if not agents:
        console.print("[yellow]No agents found.[/yellow]")
        console.print("[dim]Run 'yabp init' to install the default agents.[/dim]")
        return

    console.print("[bold]Available Agents:[/bold]\n")
    for a in agents:
        inactive = "" if a.active else " [dim](inactive)[/dim]"
        console.print(f"  {a.icon} [cyan]{a.id}[/cyan] {a.name}{inactive}")
        if verbose:
            console.print(f"    {a.role}")
            console.print(f"    [dim]Category: {a.category}[/dim]")
            console.print()


@agent.command("show")
@click.argument("agent_id")
def agent_show(agent_id: str) -> None:
    """Show an agent's metadata and fragments."""
    store = _agent_store(_load_settings())
    try:
        a = store.require_agent(agent_id)
    except YabpError as e:
        _fail(e)

    console.print(f"{a.icon} [bold]{a.name}[/bold] ([cyan]{a.id}[/cyan])")
    console.print(f"  Role: {a.role}")
    console.print(f"  Category: {a.category}")
    if a.description:
        console.print(f"  {a.description}")
    if a.docs_folder:
        console.print(f"  Docs folder: docs/{a.docs_folder}/")
    if a.system_instruction:
        console.print(f"  System instruction: {a.system_instruction}")

    console.print("\n[bold]Prompts:[/bold]")
    for ref in a.prompts:
        flag = " [green](executable)[/green]" if ref.executable else ""
        console.print(f"  - {ref.id}: {ref.title}{flag}")

    console.print("\n[bold]Fragments:[/bold]")
    for relative_path in store.list_fragments(agent_id):
        console.print(f"  - {relative_path}")


@agent.command("create")
@click.argument("name")
@click.option("--role", default="", help="Short description of the agent's role.")
@click.option("--category", default="General", help="Category shown in listings.")
@click.option("--icon", default="🤖", help="Icon shown in listings.")
def agent_create(name: str, role: str, category: str, icon: str) -> None:
    """Create an empty agent."""
    store = _agent_store(_load_settings())
    try:
        created = store.create_agent(name, role=role, category=category, icon=icon)
    except YabpError as e:
        _fail(e)
    console.print(f"[green]Created agent {created.id} at {created.source}[/green]")


@agent.command("update")
@click.argument("agent_id")
@click.option(
    "--set",
    "assignments",
    multiple=True,
    metavar="KEY=VALUE",
    help="Metadata field to set. Repeatable.",
)
def agent_update(agent_id: str, assignments: tuple[str, ...]) -> None:
    """Update fields of an agent's metadata."""
    updates = parse_assignments(assignments)
    if not updates:
        console.print("[yellow]Nothing to update.[/yellow]")
        return
    store = _agent_store(_load_settings())
    try:
        store.update_metadata(agent_id, updates)
    except YabpError as e:
        _fail(e)
    console.print(f"[green]Updated {', '.join(updates)} of {agent_id}[/green]")


@agent.command("add-prompt")
@click.argument("agent_id")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--name", "filename", help="File name in prompts/ (default: source name).")
def agent_add_prompt(agent_id: str, source: Path, filename: str | None) -> None:
    """Add a prompt file to an agent."""
    store = _agent_store(_load_settings())
    try:
        store.require_agent(agent_id)
    except YabpError as e:
        _fail(e)
    target = filename or source.name
    if not target.endswith(".md"):
        target += ".md"
    path = store.save_prompt(agent_id, target, source.read_text(encoding="utf-8"))
    console.print(f"[green]Saved prompt {path}[/green]")


@agent.command("remove-prompt")
@click.argument("agent_id")
@click.argument("filename")
def agent_remove_prompt(agent_id: str, filename: str) -> None:
    """Remove a prompt file from an agent."""
    store = _agent_store(_load_settings())
    if store.delete_prompt(agent_id, filename):
        console.print(f"[green]Removed prompt {filename} from {agent_id}[/green]")
    else:
        console.print(f"[yellow]Prompt {filename} not found in {agent_id}[/yellow]")


@agent.command("import")
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def agent_import(archive: Path) -> None:
    """Install agents from a zip bundle."""
    store = _agent_store(_load_settings())
    try:
        installed = store.import_bundle(archive)
    except YabpError as e:
        _fail(e)
    for a in installed:
        console.print(f"[green]Installed agent {a.id}[/green]")


# Projects


@main.group(invoke_without_command=True)
@click.pass_context
def project(ctx: click.Context) -> None:
    """Create projects and run prompts against them.

    Use subcommands: yabp project create, yabp project run, yabp project files
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@project.command("list")
def project_list() -> None:
    """List registered projects."""
    projects = _project_store(_load_settings()).list_projects()
    if not projects:
        console.print("[dim]No projects found.[/dim]")
        return

    console.print(f"[bold]Projects ({len(projects)}):[/bold]\n")
    for info in projects:
        agents = ", ".join(info.config.get(AGENTS_KEY) or []) or "-"
        console.print(f"  [cyan]{info.name}[/cyan] {info.path}")
        console.print(f"      Agents: {agents}")


@project.command("create")
@click.argument("name")
@click.option("--agent", "-a", "agents", multiple=True, help="Agent id. Repeatable.")
@click.option(
    "--select",
    "-s",
    "selections",
    multiple=True,
    metavar="SECTION=VALUE",
    help="Selection for an agent section. Repeat a section for multi-select.",
)
@click.option("--workflow", "-w", help="Workflow template id for the project phases.")
@click.option(
    "--path",
    "project_path",
    type=click.Path(file_okay=False, path_type=Path),
    help="Project directory (default: <projects_dir>/<name>).",
)
def project_create(
    name: str,
    agents: tuple[str, ...],
    selections: tuple[str, ...],
    workflow: str | None,
    project_path: Path | None,
) -> None:
    """Create a project and compile its prompt catalogue."""
    config = _load_settings()
    project_config: dict[str, Any] = {
        AGENTS_KEY: list(agents),
        SELECTIONS_KEY: parse_selections(selections),
    }

    if workflow:
        template = get_workflow_by_id(workflow)
        if template is None:
            console.print(f"[red]Unknown workflow: {workflow}[/red]")
            raise SystemExit(1)
        project_config[PHASES_KEY] = template.phases_config()
        if not agents:
            project_config[AGENTS_KEY] = list(template.recommended_agents)

    if project_path is not None:
        project_config[PROJECT_PATH_KEY] = str(project_path.resolve())

    try:
        result = create_project(
            name,
            project_config,
            _project_store(config),
            _agent_store(config),
            get_policy(config.executable_policy),
        )
    except YabpError as e:
        _fail(e)

    console.print(f"[green]Created project {name}[/green]")
    console.print(f"  Fragments: {len(result.fragments)}")
    for filename in result.executable_files:
        console.print(f"  [cyan]{filename}[/cyan]")


@project.command("show")
@click.argument("name")
def project_show(name: str) -> None:
    """Show a project's configuration."""
    try:
        info = _project_store(_load_settings()).get_project(name)
    except YabpError as e:
        _fail(e)
    console.print(f"[bold]{info.name}[/bold] {info.path}\n")
    console.print(yaml.safe_dump(info.config, default_flow_style=False, sort_keys=False))


@project.command("configure")
@click.argument("name")
@click.option("--agent", "-a", "agents", multiple=True, help="Replace the agent list.")
@click.option(
    "--select",
    "-s",
    "selections",
    multiple=True,
    metavar="SECTION=VALUE",
    help="Replace the selections.",
)
@click.option(
    "--set",
    "assignments",
    multiple=True,
    metavar="KEY=VALUE",
    help="Other configuration key to set. Repeatable.",
)
def project_configure(
    name: str,
    agents: tuple[str, ...],
    selections: tuple[str, ...],
    assignments: tuple[str, ...],
) -> None:
    """Update a project's configuration.

    Changing agents or selections recompiles the prompt catalogue.
    """
    updates = parse_assignments(assignments)
    if agents:
        updates[AGENTS_KEY] = list(agents)
    if selections:
        updates[SELECTIONS_KEY] = parse_selections(selections)
    if not updates:
        console.print("[yellow]Nothing to update.[/yellow]")
        return

    config = _load_settings()
    try:
        stored = update_project_config(
            name,
            updates,
            _project_store(config),
            _agent_store(config),
            get_policy(config.executable_policy),
        )
    except YabpError as e:
        _fail(e)
    console.print(f"[green]Updated {name}[/green]")
    console.print(yaml.safe_dump(stored, default_flow_style=False, sort_keys=False))


@project.command("context")
@click.argument("name")
@click.option(
    "--set",
    "assignments",
    multiple=True,
    metavar="KEY=VALUE",
    help="Context value to set, available as {{context.KEY}}. Repeatable.",
)
def project_context(name: str, assignments: tuple[str, ...]) -> None:
    """Show or update a project's shared context."""
    store = _project_store(_load_settings())
    updates = parse_assignments(assignments)
    try:
        context = store.update_context(name, updates) if updates else None
    except YabpError as e:
        _fail(e)
    if context is None:
        context = store.read_context(name)
    console.print(yaml.safe_dump(context, default_flow_style=False, sort_keys=False))


@project.command("prompts")
@click.argument("name")
@click.option("--show", "title", help="Print the interpolated prompt with this title.")
def project_prompts(name: str, title: str | None) -> None:
    """List the prompts in a project's catalogue."""
    store = _project_store(_load_settings())
    try:
        info = store.get_project(name)
    except YabpError as e:
        _fail(e)
    document = store.read_file(name, f".yabp/{PROMPTS_MD}")
    if document is None:
        console.print("[yellow]Project has no prompt catalogue.[/yellow]")
        return

    variables = build_variables(info.config, store.read_context(name), name)
    entries = parse_prompt_catalogue(document, variables)
    if title is None:
        for entry in entries:
            console.print(f"  [cyan]{entry.title}[/cyan]")
        return

    for entry in entries:
        if entry.title == title:
            console.print(entry.body, markup=False, highlight=False)
            return
    console.print(f"[red]Prompt not found: {title}[/red]")
    raise SystemExit(1)


def _add_nodes(tree: Tree, nodes: list[FileNode] | tuple[FileNode, ...]) -> None:
    for node in nodes:
        if node.is_dir:
            _add_nodes(tree.add(f"[bold]{node.name}/[/bold]"), node.children)
        elif node.executable:
            tree.add(f"[green]{node.name}[/green] [dim](executable)[/dim]")
        else:
            tree.add(node.name)


@project.command("files")
@click.argument("name")
@click.option(
    "--delete",
    "delete_path",
    metavar="PATH",
    help="Move a file to .deleted/ instead of listing.",
)
def project_files(name: str, delete_path: str | None) -> None:
    """Show a project's file tree."""
    store = _project_store(_load_settings())
    try:
        if delete_path:
            moved = store.delete_file(name, delete_path)
            if moved is None:
                console.print(f"[yellow]File not found: {delete_path}[/yellow]")
            else:
                console.print(f"[green]Moved {delete_path} to .deleted/{moved}[/green]")
            return
        nodes = store.list_files(name)
    except YabpError as e:
        _fail(e)

    tree = Tree(f"[bold]{name}[/bold]")
    _add_nodes(tree, nodes)
    console.print(tree)


@project.command("history")
@click.argument("name")
def project_history(name: str) -> None:
    """List the execution logs of a project."""
    try:
        info = _project_store(_load_settings()).get_project(name)
    except YabpError as e:
        _fail(e)
    filenames = ExecutionLogRepository(info.path).list_filenames()
    if not filenames:
        console.print("[dim]No executions recorded.[/dim]")
        return
    for filename in filenames:
        console.print(f"  {filename}")


@project.command("run")
@click.argument("name")
@click.argument("prompt", required=False)
@click.option(
    "--file",
    "prompt_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read the prompt from a file.",
)
@click.option("--title", help="Run the catalogue prompt with this title.")
@click.option("--agent", "-a", "agent_id", help="Agent the prompt runs as.")
@click.option("--docs-folder", help="Override the agent's docs folder.")
@click.option(
    "--live/--simulate",
    default=None,
    help="Spawn the engine CLI, or only write mock artifacts.",
)
@click.option("--engine", "-e", help="Engine for live runs (e.g., cursor, claude).")
def project_run(
    name: str,
    prompt: str | None,
    prompt_file: Path | None,
    title: str | None,
    agent_id: str | None,
    docs_folder: str | None,
    live: bool | None,
    engine: str | None,
) -> None:
    """Run a prompt against a project."""
    config = _load_settings()
    if engine:
        config = config.merge(YabpConfig(engine=engine))
    projects = _project_store(config)

    sources = [s for s in (prompt, prompt_file, title) if s is not None]
    if len(sources) != 1:
        console.print("[red]Give exactly one of PROMPT, --file or --title.[/red]")
        raise SystemExit(1)

    raw_prompt = prompt
    if prompt_file is not None:
        raw_prompt = prompt_file.read_text(encoding="utf-8")
    elif title is not None:
        document = projects.read_file(name, f".yabp/{PROMPTS_MD}") or ""
        matches = [e for e in parse_prompt_catalogue(document) if e.title == title]
        if not matches:
            console.print(f"[red]Prompt not found in catalogue: {title}[/red]")
            raise SystemExit(1)
        raw_prompt = matches[0].body

    settings = settings_from_config(config, simulation=None if live is None else not live)
    if not settings.simulation and resolve_engine(settings.engine) is None:
        raise SystemExit(1)

    try:
        result = run_prompt(
            name,
            raw_prompt or "",
            projects,
            _agent_store(config),
            settings,
            agent_id=agent_id,
            docs_folder=docs_folder,
        )
    except YabpError as e:
        _fail(e)

    mode = "simulation" if result.simulated else "live"
    console.print(f"[dim]Ran prompt in {mode} mode[/dim]")
    output = result.output.strip()
    if output:
        console.print(output, markup=False, highlight=False)
    elif result.simulated:
        console.print("[dim]No artifacts declared by this prompt.[/dim]")

    if not result.success or (result.exit_code not in (None, 0)):
        raise SystemExit(result.exit_code or 1)


@project.command("delete")
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
def project_delete(name: str, yes: bool) -> None:
    """Unregister a project and remove its directory.

    Directories outside the projects directory are only unregistered.
    """
    store = _project_store(_load_settings())
    if not yes and not click.confirm(f"Delete project {name}?", default=False):
        console.print("No changes made.")
        return
    removed = store.delete_project(name)
    if removed:
        console.print(f"[green]Deleted project {name}[/green]")
    else:
        console.print(f"[green]Unregistered project {name}[/green]")


# Workflows


@main.group(invoke_without_command=True)
@click.pass_context
def workflow(ctx: click.Context) -> None:
    """Browse workflow templates."""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@workflow.command("list")
@click.option("--verbose", "-v", is_flag=True, help="Show phases.")
def workflow_list(verbose: bool) -> None:
    """List built-in workflow templates."""
    console.print("[bold]Workflow Templates:[/bold]\n")
    for template in WORKFLOW_TEMPLATES:
        console.print(f"  [cyan]{template.id}[/cyan] {template.name}")
        if verbose:
            console.print(f"    {template.description}")
            for phase in template.phases:
                agents = ", ".join(phase.allowed_agents)
                console.print(
                    f"    - {phase.label}: {phase.description} [dim]({agents})[/dim]"
                )
            console.print()


if __name__ == "__main__":
    main()

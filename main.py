import click
from base_classes import FatalError
from config_manager import ConfigManager
from core.interpreter import Operation
from core.loader import PacmanLoader
from core.session import Session
from utils.logging_utils import LoggingHandler


@click.group(invoke_without_command=True)
@click.option('-c', '--conf', default=None, help='Path to a custom configuration file')
@click.pass_context
def cli(ctx, conf):
    """
    the main entry point for the CLI click interface
    """
    ctx.ensure_object(dict)  # set up the context object to be passed around

    try:
        config_manager = ConfigManager(conf)
    except FileNotFoundError as e:
        raise click.ClickException(str(e))
    ctx.obj['CONFIG_MANAGER'] = config_manager

    # browsing is the default when no subcommand was given
    if ctx.invoked_subcommand is None:
        ctx.invoke(browse)


def build_session(config_manager: ConfigManager) -> Session:
    """Wire the loader, logger and config into a session (records not loaded yet)"""
    logger = LoggingHandler(config_manager)
    pacman = config_manager.pacman_settings()
    logger.settings({'conf': pacman, 'macros': sorted(config_manager.macro_table())})
    loader = PacmanLoader(pacman['db_path'], pacman['repos'], logger=logger)
    return Session(loader, config_manager, logger=logger)


@cli.command()
@click.pass_context
def browse(ctx):
    """Start the interactive package browser"""
    session = build_session(ctx.obj['CONFIG_MANAGER'])

    click.echo('Reading package dbs, please wait...')
    try:
        session.load()
        from tui.mode import BrowserMode
        mode = BrowserMode(session)
        mode.start()
    except FatalError as e:
        session.logger.error('main', e)
        raise click.ClickException(e.user_message)


@cli.command()
@click.pass_context
def list_macros(ctx):
    """List the configured macros"""
    macros = ctx.obj['CONFIG_MANAGER'].macro_table()
    if not macros:
        click.echo('No macros configured')
        return
    for name in sorted(macros):
        click.echo(f'{name} = {macros[name]}')


@cli.command()
@click.pass_context
@click.argument('filters', nargs=-1, required=True)
def query(ctx, filters):
    """Apply filters non-interactively and print the matching package names"""
    session = build_session(ctx.obj['CONFIG_MANAGER'])
    try:
        # the startup macro may run external commands, so it is skipped here
        session.load(run_startup=False)
    except FatalError as e:
        session.logger.error('main', e)
        raise click.ClickException(e.user_message)

    for argument in filters:
        result = session.interpreter.commit(Operation.FILTER, argument)
        if not result.applied:
            raise click.ClickException(f"Filter '{argument}' not applied: {result.outcome.value}")

    for record in session.filtered:
        click.echo(record.name)


if __name__ == '__main__':
    cli()

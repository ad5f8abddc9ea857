# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

import logging
import sys
from pathlib import Path

import click

from .constants import CLI_NAME, ExitCode
from .context import ApplicationContext
from .utils import err_console

logger = logging.getLogger(__name__)


def _version_callback(ctx, param, value):
    if not value:
        return
    import importlib.metadata
    from .messages import PACKAGE_NAME
    version = importlib.metadata.version(PACKAGE_NAME)
    click.echo(f"{CLI_NAME}, version {version}")
    ctx.exit()


class LazyGroup(click.Group):
    def __init__(self, *args, lazy_commands=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.lazy_commands = lazy_commands or {}

    def list_commands(self, ctx):
        lazy_names = set(self.lazy_commands.keys())
        manual_names = set(super().list_commands(ctx))
        return sorted(lazy_names | manual_names)

    def get_command(self, ctx, name):
        if name in self.lazy_commands:
            from importlib import import_module
            module_path, attr_name = self.lazy_commands[name]
            module = import_module(module_path)
            return getattr(module, attr_name)

        return super().get_command(ctx, name)


def create_cli(name: str = CLI_NAME) -> click.Group:
    from plugsmith.cli.commands import COMMAND_MAP

    @click.pass_context
    def callback(
        ctx: click.Context,
        config: Path | None,
        source_dir: Path | None,
        dist_dir: Path | None,
        log_level: str | None,
        no_progress: bool
    ) -> None:
        if ctx.resilient_parsing:
            return

        from pydantic import ValidationError as PydanticValidationError
        from .exceptions import ConfigurationError

        try:
            ctx.obj = ApplicationContext.from_cli_args(
                config_file=config,
                source_dir=source_dir,
                dist_dir=dist_dir,
                log_level=log_level,
                no_progress=no_progress,
            )
        except PydanticValidationError as e:
            raise ConfigurationError(
                "Configuration validation failed",
                details=[f"{' → '.join(str(x) for x in err['loc'])}: {err['msg']}" for err in e.errors()],
            ) from e

    cli = LazyGroup(
        name=name,
        callback=callback,
        context_settings={"help_option_names": ["-h", "--help"]},
        lazy_commands=COMMAND_MAP
    )

    cli.params.append(click.Option(
        ["-c", "--config"],
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Override configuration file"
    ))
    cli.params.append(click.Option(
        ["-s", "--source-dir"],
        type=click.Path(path_type=Path),
        help="Override plugin source directory"
    ))
    cli.params.append(click.Option(
        ["-o", "--dist-dir"],
        type=click.Path(path_type=Path),
        help="Override bundle output directory"
    ))
    cli.params.append(click.Option(
        ["-l", "--log-level"],
        type=click.Choice(["quiet", "normal", "verbose", "debug"]),
        default=None,
        metavar="LEVEL",
        help="Set log verbosity (quiet|normal|verbose|debug)"
    ))
    cli.params.append(click.Option(
        ["--no-progress"],
        is_flag=True,
        help="Disable progress spinners and animations"
    ))
    cli.params.append(click.Option(
        ["--version"],
        is_flag=True,
        expose_value=False,
        is_eager=True,
        callback=_version_callback,
        help="Show the version and exit."
    ))

    cli.help = """Plugsmith - Build each library plugin as a standalone UMD bundle.

\b
COMMANDS:
  build          Bundle every plugin into the dist directory
  list           Show discovered plugins and their dependencies
  config         Show the effective configuration

\b
Use --help with any command for detailed options."""

    return cli


def _run_cli(name: str) -> None:
    """Run CLI with consistent error handling."""
    from plugsmith.exceptions import PlugsmithError
    from .exceptions import CLIError

    try:
        cli = create_cli(name)
        exit_code = cli(standalone_mode=False)
        if isinstance(exit_code, int) and exit_code:
            sys.exit(exit_code)
    except click.UsageError as e:
        e.show()
        sys.exit(ExitCode.USAGE)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except (KeyboardInterrupt, click.Abort):
        err_console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(ExitCode.INTERRUPTED)
    except CLIError as e:
        err_console.print(e.format_for_console())
        sys.exit(e.exit_code)
    except PlugsmithError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        sys.exit(ExitCode.ERROR)
    except Exception as e:
        err_console.print(f"[red]Unexpected error:[/red] {e}")
        logging.exception(f"Unexpected error in {name} CLI")
        sys.exit(ExitCode.SOFTWARE)


def main() -> None:
    _run_cli(CLI_NAME)


if __name__ == "__main__":
    main()

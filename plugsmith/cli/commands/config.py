# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

import logging

import click

from plugsmith._internal.io.yaml import format_yaml

from ..context import ApplicationContext
from ..utils import console

logger = logging.getLogger(__name__)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.pass_obj
def config(ctx: ApplicationContext) -> None:
    """Print the effective configuration as YAML.

    \b
    Values are merged from (highest priority first):
      CLI options, PLUGSMITH_* environment variables,
      plugsmith.yaml, built-in defaults
    """
    effective = ctx.get_effective_config()
    logger.debug(f"Showing config loaded from {effective.config_file or 'defaults'}")

    data = effective.model_dump(mode="json")
    console.print(format_yaml(data), markup=False, highlight=False, emoji=False, soft_wrap=True, end="")

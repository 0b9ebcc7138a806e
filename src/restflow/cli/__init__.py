from __future__ import annotations

import click

from restflow.cli.commands.run import run_command
from restflow.core.version import RESTFLOW_VERSION


@click.group(name="restflow")
@click.version_option(RESTFLOW_VERSION, prog_name="restflow")
def restflow() -> None:
    """Run HTTP flows described in .flow files."""


restflow.add_command(run_command)


def main() -> None:
    restflow()

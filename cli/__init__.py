import click

from cli.proposal import proposal


@click.group()
@click.version_option(version="0.1.0")
@click.pass_context
def cli(ctx):
    pass


# Inspect / interact with on-chain proposals
cli.add_command(proposal, "proposal")

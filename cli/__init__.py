import click

from cli.simulate_proposals import simulate_proposals


@click.group()
@click.version_option(version="0.1.0")
@click.pass_context
def cli(ctx):
    pass


# Fork simulation and proposal checks
cli.add_command(simulate_proposals, "simulate_proposals")

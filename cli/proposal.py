import asyncio
from typing import Optional

import click

from config.settings import settings
from proposals.factory import create_proposal, create_web3
from proposals.mappers.proposal_report_mapper import ProposalReportMapper
from utils.logger_utils import configure_logging, get_logger

logger = get_logger("Proposal CLI")

ACTIONS = ("info",)


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option(
    "-a",
    "--action",
    default="info",
    show_default=True,
    type=click.Choice(ACTIONS),
    help="What to do with the proposal.",
)
@click.option("-g", "--governor", default=settings.proposals.governor, type=str, help="The governor address.")
@click.option(
    "-t",
    "--voting-token",
    default=settings.proposals.voting_token,
    type=str,
    help="The voting token registered with the governor.",
)
@click.option(
    "-p",
    "--provider-uri",
    default=settings.ethereum.provider_uri,
    show_default=True,
    type=str,
    help="The URI of the web3 provider e.g. http://127.0.0.1:8545",
)
@click.option("--log-file", default=None, show_default=True, type=str, help="Path to the log file.")
@click.argument("proposal_id", type=int)
def proposal(
    action: str,
    governor: Optional[str],
    voting_token: Optional[str],
    provider_uri: str,
    log_file: Optional[str],
    proposal_id: int,
):
    """Interact with an on-chain GovernorAlpha proposal."""
    configure_logging(log_file, settings.app.log_level)

    if not governor:
        raise click.BadOptionUsage("--governor", "A governor address is required (or set GOVERNOR_ADDRESS).")
    if not voting_token:
        raise click.BadOptionUsage("--voting-token", "A voting token address is required (or set VOTING_TOKEN_ADDRESS).")

    try:
        if action == "info":
            click.echo(asyncio.run(_proposal_info(provider_uri, governor, voting_token, proposal_id)))
    except Exception as e:
        logger.exception("An error occurred:")
        raise e


async def _proposal_info(provider_uri: str, governor: str, voting_token: str, proposal_id: int) -> str:
    web3 = create_web3(provider_uri)
    handle = create_proposal(web3, governor=governor, voting_token=voting_token)

    loaded_proposal = await handle.load_proposal(proposal_id)
    report = await loaded_proposal.proposal_report()
    return ProposalReportMapper.report_to_text(report)

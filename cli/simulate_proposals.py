import asyncio
from typing import List, Optional

import click

from config.settings import settings
from decoding.abi_resolver import BaseAbiResolver, CachingAbiResolver, EtherscanAbiResolver, FileAbiResolver
from decoding.formatters.formatter_helpers import FormatterContext
from decoding.token_metadata_service import TokenMetadataService
from decoding.transaction_decoder import TransactionDecoder
from governance.enums.chain import Chain
from orchestration.batch_orchestrator import ProposalBatchOrchestrator, SimulationFailurePolicy
from reporting.report_renderer import JsonReportRenderer
from reporting.report_store import FileReportStore
from simulation.adapters.tenderly_simulation_adapter import TenderlySimulationAdapter
from simulation.models.simulation_config import load_simulation_config
from utils.logger_utils import configure_logging, get_logger
from utils.web3_utils import get_async_web3

logger = get_logger("Simulate Proposals CLI")


def _parse_proposal_ids(proposal_ids: Optional[str]) -> Optional[List[int]]:
    if not proposal_ids:
        return None
    # int(x, 0) accepts both decimal Bravo ids and 0x-prefixed hashed ids
    return [int(proposal_id.strip(), 0) for proposal_id in proposal_ids.split(",") if proposal_id.strip()]


def _parse_checks(checks: Optional[str]) -> Optional[List[str]]:
    if not checks:
        return None
    return [check_id.strip() for check_id in checks.split(",") if check_id.strip()]


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option(
    "-p",
    "--provider-uri",
    default=settings.chain.provider_uri,
    show_default=True,
    type=str,
    help="The URI of the web3 provider e.g. https://mainnet.infura.io",
)
@click.option(
    "-c",
    "--chain",
    default=settings.chain.chain,
    show_default=True,
    type=click.Choice([chain.value for chain in Chain]),
    help="Chain the governor is deployed on.",
)
@click.option("-d", "--dao-name", default=settings.governor.dao_name, type=str, help="DAO name used in report paths.")
@click.option("-g", "--governor-address", default=settings.governor.governor_address, type=str, help="Governor address.")
@click.option(
    "--from-block",
    default=settings.governor.deploy_block,
    show_default=True,
    type=int,
    help="First block to scan for ProposalCreated events.",
)
@click.option(
    "-i",
    "--proposal-ids",
    default=None,
    type=str,
    help="Comma-separated proposal ids to simulate. All proposals when omitted.",
)
@click.option(
    "--sim-config",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a JSON simulation config. Runs only that simulation.",
)
@click.option(
    "--checks",
    default=settings.checks.enabled,
    type=str,
    help="Comma-separated check ids to run. All registered checks when omitted.",
)
@click.option(
    "--failure-policy",
    default=settings.checks.simulation_failure_policy,
    show_default=True,
    type=click.Choice([policy.value for policy in SimulationFailurePolicy]),
    help="What to do with the rest of the batch when a simulation request fails.",
)
@click.option("-r", "--reports-dir", default=settings.reports.reports_dir, show_default=True, type=str)
@click.option("--log-file", default=None, show_default=True, type=str, help="Path to the log file.")
def simulate_proposals(
    provider_uri: str,
    chain: str,
    dao_name: Optional[str],
    governor_address: Optional[str],
    from_block: int,
    proposal_ids: Optional[str],
    sim_config: Optional[str],
    checks: Optional[str],
    failure_policy: str,
    reports_dir: str,
    log_file: Optional[str] = None,
):
    """Simulates governance proposals on a fork and writes one audit report per proposal."""
    configure_logging(log_file, settings.app.log_level)

    config = load_simulation_config(sim_config) if sim_config else None
    if config is None:
        if not governor_address:
            raise click.UsageError("Must provide a governor address (--governor-address or GOVERNOR_ADDRESS)")
        if not dao_name:
            raise click.UsageError("Must provide a DAO name (--dao-name or DAO_NAME)")
    else:
        dao_name = config.dao_name
        governor_address = config.governor_address

    try:
        asyncio.run(
            _simulate(
                provider_uri=provider_uri,
                chain=Chain(chain),
                dao_name=dao_name,
                governor_address=governor_address,
                from_block=from_block,
                proposal_ids=_parse_proposal_ids(proposal_ids),
                sim_config=config,
                checks=_parse_checks(checks),
                failure_policy=SimulationFailurePolicy(failure_policy),
                reports_dir=reports_dir,
            )
        )
    except KeyboardInterrupt:
        logger.info("Simulation interrupted by user.")
    except Exception:
        logger.exception("An error occurred while simulating proposals:")
        raise


async def _simulate(
    provider_uri: str,
    chain: Chain,
    dao_name: str,
    governor_address: str,
    from_block: int,
    proposal_ids: Optional[List[int]],
    sim_config,
    checks: Optional[List[str]],
    failure_policy: SimulationFailurePolicy,
    reports_dir: str,
):
    web3 = get_async_web3(provider_uri, settings.chain.rpc_timeout)
    store = FileReportStore(reports_dir)

    etherscan_resolver = EtherscanAbiResolver(settings.etherscan)
    simulation_adapter = TenderlySimulationAdapter(
        web3,
        settings.tenderly,
        chain=chain,
        governor_from_block=from_block,
        log_chunk_size=settings.governor.log_chunk_size,
    )

    async with etherscan_resolver, simulation_adapter:
        file_cache = FileAbiResolver(settings.etherscan.abi_cache_dir) if settings.etherscan.abi_cache_dir else None
        resolvers: List[BaseAbiResolver] = [file_cache, etherscan_resolver] if file_cache else [etherscan_resolver]
        abi_resolver = CachingAbiResolver(resolvers, file_cache=file_cache)

        formatter_context = FormatterContext(chain, web3, TokenMetadataService(web3), abi_resolver)
        orchestrator = ProposalBatchOrchestrator(
            web3=web3,
            dao_name=dao_name,
            governor_address=governor_address,
            simulation_adapter=simulation_adapter,
            report_renderer=JsonReportRenderer(store),
            report_store=store,
            abi_resolver=abi_resolver,
            decoder=TransactionDecoder(abi_resolver, formatter_context),
            chain=chain,
            check_allow_list=checks,
            failure_policy=failure_policy,
            governor_from_block=from_block,
            log_chunk_size=settings.governor.log_chunk_size,
        )

        if sim_config is not None:
            await orchestrator.run_config(sim_config)
        else:
            await orchestrator.run(proposal_ids)


if __name__ == "__main__":
    simulate_proposals()

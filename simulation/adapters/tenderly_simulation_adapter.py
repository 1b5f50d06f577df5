import asyncio
from typing import Any, Dict, List, Optional, Union

import aiohttp
from web3 import AsyncWeb3

from config.settings import TenderlySettings
from constants.constants import DEFAULT_SIMULATION_GAS
from governance.enums.chain import Chain
from governance.models.block import BlockSnapshot
from governance.models.proposal import Proposal
from governance.service.governor_service import BaseGovernor, get_governor
from governance.service.proposal_state_service import resolve_proposal_stage
from simulation.adapters.base_simulation_adapter import BaseSimulationAdapter
from simulation.mappers.tenderly_mapper import TenderlyResponseMapper
from simulation.models.simulation_config import (
    OverridePlan,
    PrivilegedCall,
    SimulationConfigExecuted,
    SimulationConfigProposed,
)
from simulation.models.simulation_result import SimulationBundle, SimulationResult
from utils.exceptions import SimulationAdapterFailure
from utils.formatter_utils import to_normalized_address
from utils.logger_utils import get_logger

logger = get_logger("Tenderly Simulation Adapter")


class TenderlySimulationAdapter(BaseSimulationAdapter):
    """
    Runs proposal simulations on Tenderly forks.

    Executed proposals replay their historical transaction at its original position in
    the block. Proposed ones are sent with the override plan: storage overrides on a
    single simulation, or a bundle when privileged calls must run first.
    """

    def __init__(
        self,
        web3: AsyncWeb3,
        tenderly_settings: TenderlySettings,
        chain: Chain = Chain.MAINNET,
        governor_from_block: int = 0,
        log_chunk_size: Optional[int] = None,
    ):
        self._web3 = web3
        self.settings = tenderly_settings
        self.chain = chain
        self._governor_from_block = governor_from_block
        self._log_chunk_size = log_chunk_size
        self._governors: Dict[str, BaseGovernor] = {}
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        if not (self.settings.access_token and self.settings.user and self.settings.project_slug):
            raise SimulationAdapterFailure(
                "Tenderly is not configured: TENDERLY_ACCESS_TOKEN, TENDERLY_USER and TENDERLY_PROJECT_SLUG are required"
            )
        self.session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.settings.timeout),
            headers={"X-Access-Key": self.settings.access_token, "Content-Type": "application/json"},
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.session:
            await self.session.close()
            self.session = None

    @property
    def project_url(self) -> str:
        return f"{self.settings.base_url}/account/{self.settings.user}/project/{self.settings.project_slug}"

    async def simulate(self, config: Union[SimulationConfigExecuted, SimulationConfigProposed]) -> SimulationResult:
        governor = self._get_governor(config)
        if isinstance(config, SimulationConfigExecuted):
            bundle = await self._simulate_executed(config)
        else:
            bundle = await self._simulate_proposed(config)

        if not bundle.success:
            logger.warning(
                f"Proposal {governor.format_proposal_id(config.proposal_id)} reverted in simulation: {bundle.error_message}"
            )

        proposal = await self._hydrate_proposal(governor, config.proposal_id)
        latest_block = BlockSnapshot.from_web3_block(await self._web3.eth.get_block("latest"))
        return SimulationResult(sim=bundle, proposal=proposal, latest_block=latest_block)

    def _get_governor(self, config: Union[SimulationConfigExecuted, SimulationConfigProposed]) -> BaseGovernor:
        address = to_normalized_address(config.governor_address)
        if address not in self._governors:
            kwargs: Dict[str, Any] = {"from_block": self._governor_from_block}
            if self._log_chunk_size:
                kwargs["log_chunk_size"] = self._log_chunk_size
            self._governors[address] = get_governor(self._web3, config.governor_type, address, **kwargs)
        return self._governors[address]

    async def _hydrate_proposal(self, governor: BaseGovernor, proposal_id: int) -> Proposal:
        proposal = await governor.proposal_details(proposal_id)
        raw_state = await governor.state(proposal_id)
        return proposal.with_stage(resolve_proposal_stage(governor.governor_type, proposal_id, raw_state))

    async def _simulate_executed(self, config: SimulationConfigExecuted) -> SimulationBundle:
        transaction = await self._web3.eth.get_transaction(config.replay.tx_hash)
        payload = {
            "network_id": str(self.chain.chain_id),
            "block_number": config.replay.block_number,
            "transaction_index": transaction.get("transactionIndex"),
            "from": transaction["from"],
            "to": transaction["to"],
            "input": _hex_input(transaction.get("input")),
            "gas": transaction.get("gas", DEFAULT_SIMULATION_GAS),
            "gas_price": "0",
            "value": str(transaction.get("value", 0)),
            "save": True,
            "save_if_fails": True,
            "simulation_type": "full",
        }
        response = await self._post("simulate", payload, config.proposal_id)
        return self._to_bundle(response, config.proposal_id)

    async def _simulate_proposed(self, config: SimulationConfigProposed) -> SimulationBundle:
        plan = config.override_plan
        if not plan.privileged_calls:
            payload = self._call_payload(plan, plan.execution_call, with_overrides=True)
            response = await self._post("simulate", payload, config.proposal_id)
            return self._to_bundle(response, config.proposal_id)

        calls = list(plan.privileged_calls) + [plan.execution_call]
        simulations = [self._call_payload(plan, call, with_overrides=index == 0) for index, call in enumerate(calls)]
        response = await self._post("simulate-bundle", {"simulations": simulations}, config.proposal_id)
        results = _bundle_results(response, len(calls), config.proposal_id)

        for call, result in zip(plan.privileged_calls, results):
            if not result.get("transaction", {}).get("status"):
                raise SimulationAdapterFailure(
                    f"Privileged call '{call.description}' reverted: {result.get('transaction', {}).get('error_message')}",
                    proposal_id=config.proposal_id,
                )
        return self._to_bundle(results[-1], config.proposal_id)

    def _call_payload(self, plan: OverridePlan, call: PrivilegedCall, with_overrides: bool) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "network_id": str(self.chain.chain_id),
            "block_number": plan.state_block,
            "from": call.from_address,
            "to": call.to,
            "input": call.data,
            "gas": DEFAULT_SIMULATION_GAS,
            "gas_price": "0",
            "value": str(call.value),
            "save": True,
            "save_if_fails": True,
            "simulation_type": "full",
            "block_header": {"number": hex(plan.fork_block), "timestamp": hex(call.timestamp)},
        }
        if with_overrides and plan.storage_overrides:
            payload["state_objects"] = {
                address: {"storage": dict(slots)} for address, slots in plan.storage_overrides.items()
            }
        return payload

    async def _post(self, endpoint: str, payload: Dict[str, Any], proposal_id: int) -> Dict[str, Any]:
        if self.session is None:
            raise SimulationAdapterFailure("Adapter used outside of its async context", proposal_id=proposal_id)

        url = f"{self.project_url}/{endpoint}"
        logger.debug(f"POST {url} for proposal {proposal_id}")
        try:
            async with self.session.post(url, json=payload) as response:
                if response.status != 200:
                    body = await response.text()
                    raise SimulationAdapterFailure(
                        f"Tenderly {endpoint} returned {response.status}: {body[:500]}", proposal_id=proposal_id
                    )
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise SimulationAdapterFailure(f"Tenderly {endpoint} request failed: {e!r}", proposal_id=proposal_id) from e
        except ValueError as e:
            raise SimulationAdapterFailure(f"Tenderly {endpoint} returned invalid JSON: {e}", proposal_id=proposal_id) from e

        if not isinstance(data, dict):
            raise SimulationAdapterFailure(f"Tenderly {endpoint} returned a non-object body", proposal_id=proposal_id)
        return data

    @staticmethod
    def _to_bundle(response: Dict[str, Any], proposal_id: int) -> SimulationBundle:
        try:
            return TenderlyResponseMapper.json_dict_to_bundle(response)
        except (KeyError, TypeError, ValueError) as e:
            raise SimulationAdapterFailure(f"Malformed Tenderly response: {e!r}", proposal_id=proposal_id) from e


def _bundle_results(response: Dict[str, Any], expected: int, proposal_id: int) -> List[Dict[str, Any]]:
    results = response.get("simulation_results")
    if not isinstance(results, list) or len(results) != expected:
        raise SimulationAdapterFailure(
            f"Tenderly bundle returned {len(results) if isinstance(results, list) else 'no'} results, expected {expected}",
            proposal_id=proposal_id,
        )
    return results


def _hex_input(value: Any) -> str:
    if value is None:
        return "0x"
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return str(value)

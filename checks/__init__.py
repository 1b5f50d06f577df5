from types import MappingProxyType
from typing import Mapping

from checks.check_decode_calldata import CheckDecodeCalldata
from checks.check_logs import CheckLogs
from checks.check_simulation_succeeds import CheckSimulationSucceeds
from checks.check_state_changes import CheckStateChanges
from checks.check_targets_no_selfdestruct import CheckTargetsNoSelfdestruct
from checks.check_targets_verified_etherscan import CheckTargetsVerifiedEtherscan
from checks.check_types import ProposalCheck
from checks.check_value_required import CheckValueRequired

# Registry order is the order of results in every report
ALL_CHECKS: Mapping[str, ProposalCheck] = MappingProxyType(
    {
        check.check_id: check
        for check in (
            CheckSimulationSucceeds(),
            CheckDecodeCalldata(),
            CheckLogs(),
            CheckStateChanges(),
            CheckValueRequired(),
            CheckTargetsVerifiedEtherscan(),
            CheckTargetsNoSelfdestruct(),
        )
    }
)

class GovernanceAuditError(Exception):
    """Base class for every error raised by the proposal auditing pipeline."""


class UnsupportedGovernor(GovernanceAuditError):
    """The governor contract does not match any known dialect."""

    def __init__(self, address: str, reason: str = ""):
        self.address = address
        message = f"Unsupported governor at {address}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class UnknownProposalState(GovernanceAuditError):
    """A raw state ordinal has no lifecycle mapping for the governor dialect."""

    def __init__(self, proposal_id: int, raw_state: int, governor_type: str):
        self.proposal_id = proposal_id
        self.raw_state = raw_state
        self.governor_type = governor_type
        super().__init__(f"Unknown state {raw_state} for proposal {proposal_id} on {governor_type} governor")


class MissingTimelock(GovernanceAuditError):
    """The governor reports no executor but the simulation strategy needs one."""

    def __init__(self, governor_address: str):
        self.governor_address = governor_address
        super().__init__(f"Governor {governor_address} has no associated timelock")


class AbiNotFound(GovernanceAuditError):
    def __init__(self, address: str, reason: str = ""):
        self.address = address
        message = f"No ABI found for {address}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class FormatterFailure(GovernanceAuditError):
    def __init__(self, contract_name: str, function_signature: str, cause: Exception):
        self.contract_name = contract_name
        self.function_signature = function_signature
        self.cause = cause
        super().__init__(f"Formatter {contract_name}.{function_signature} failed: {cause!r}")


class CheckFailure(GovernanceAuditError):
    def __init__(self, check_id: str, cause: BaseException):
        self.check_id = check_id
        self.cause = cause
        super().__init__(f"Check {check_id} failed: {type(cause).__name__}: {cause}")


class SimulationAdapterFailure(GovernanceAuditError):
    """The fork simulation service could not produce a result."""

    def __init__(self, message: str, proposal_id: int | None = None):
        self.proposal_id = proposal_id
        super().__init__(message)


class ReportIncomplete(GovernanceAuditError):
    """A report violates the completeness guarantees of the output boundary."""


class MissingExecution(GovernanceAuditError):
    """An Executed proposal whose execution transaction cannot be located."""

    def __init__(self, proposal_id: int, governor_address: str):
        self.proposal_id = proposal_id
        self.governor_address = governor_address
        super().__init__(f"No ProposalExecuted event for proposal {proposal_id} on {governor_address}")

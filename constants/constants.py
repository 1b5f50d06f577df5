ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
ZERO_BYTES32 = "0x" + "00" * 32

# --- Governor Bravo storage layout (GovernorBravoDelegateStorageV1) ---
# mapping (uint => Proposal) public proposals
BRAVO_PROPOSALS_SLOT = 10

# Word offsets inside the Proposal struct
BRAVO_PROPOSAL_ETA_OFFSET = 2
BRAVO_PROPOSAL_FOR_VOTES_OFFSET = 9
BRAVO_PROPOSAL_AGAINST_VOTES_OFFSET = 10
BRAVO_PROPOSAL_ABSTAIN_VOTES_OFFSET = 11
# bool canceled and bool executed share one packed word
BRAVO_PROPOSAL_FLAGS_OFFSET = 12

# --- Compound Timelock storage layout ---
# mapping (bytes32 => bool) public queuedTransactions
COMPOUND_TIMELOCK_QUEUED_TRANSACTIONS_SLOT = 3

# --- Simulation defaults ---
DEFAULT_SIMULATION_GAS = 30_000_000
DEFAULT_LOG_CHUNK_SIZE = 100_000

# --- Reports ---
REPORT_FILE_EXTENSION = ".json"

from eth_utils import event_signature_to_log_topic

# ERC-20 / ERC-721 Transfer(address indexed from, address indexed to, uint256 value/tokenId)
TRANSFER_EVENT_SIGNATURE = "0x" + event_signature_to_log_topic("Transfer(address,address,uint256)").hex()

# ERC-20 Approval(address indexed owner, address indexed spender, uint256 value)
APPROVAL_EVENT_SIGNATURE = "0x" + event_signature_to_log_topic("Approval(address,address,uint256)").hex()

# Governor ProposalExecuted(uint256 id)
PROPOSAL_EXECUTED_EVENT_SIGNATURE = "0x" + event_signature_to_log_topic("ProposalExecuted(uint256)").hex()

# Compound Timelock ExecuteTransaction(bytes32 indexed txHash, address indexed target, uint value, string signature, bytes data, uint eta)
EXECUTE_TRANSACTION_EVENT_SIGNATURE = "0x" + event_signature_to_log_topic(
    "ExecuteTransaction(bytes32,address,uint256,string,bytes,uint256)"
).hex()

KNOWN_EVENT_NAMES = {
    TRANSFER_EVENT_SIGNATURE: "Transfer",
    APPROVAL_EVENT_SIGNATURE: "Approval",
    PROPOSAL_EXECUTED_EVENT_SIGNATURE: "ProposalExecuted",
    EXECUTE_TRANSACTION_EVENT_SIGNATURE: "ExecuteTransaction",
}

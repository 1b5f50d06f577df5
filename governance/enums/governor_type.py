from enum import Enum


class GovernorType(str, Enum):
    BRAVO = "bravo"                         # Compound GovernorBravoDelegate and forks
    BRAVO_COMPATIBLE = "bravo_compatible"   # OZ Governor + GovernorCompatibilityBravo
    OZ = "oz"                               # OpenZeppelin Governor

    @property
    def has_predictable_storage(self) -> bool:
        """Only the Bravo delegate storage layout is fixed across deployments."""
        return self is GovernorType.BRAVO

    @property
    def uses_hashed_proposal_ids(self) -> bool:
        return self is not GovernorType.BRAVO

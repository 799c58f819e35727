"""
Common test fixtures shared by all modules.

Provides factory functions for core vault data structures:
- OwnershipRecord
- A fully deployed custody scenario (collection, vault, commitment)

The scenario mirrors a typical recovery:
- Four minters each mint one token (ids 1-4); minter 4 also mints id 5
- All five (collection, minter, id) records are committed
- Tokens 1-4 are moved into the vault; token 5 stays with minter 4, so it
  has a valid proof but cannot be released
- Delivery opens sixty days after deployment
"""

from dataclasses import dataclass, field
from typing import Optional

from chain import Chain, ERC721Collection, FrozenClock
from core.merkle import OwnershipMerkleTree
from core.schemas.records import OwnershipRecord
from vault import TokenVault


ETHER = 10**18
SIXTY_DAYS = 60 * 24 * 60 * 60

DEFAULT_COLLECTION = "0x5fbdb2315678afecb367f032d93f642f64180aa3"
DEFAULT_OWNER = "0x70997970c51812dc3a010c7d01b50e0d17dc79c8"


# =============================================================================
# OwnershipRecord Factory
# =============================================================================

def make_record(
    collection: str = DEFAULT_COLLECTION,
    owner: str = DEFAULT_OWNER,
    token_id: int = 1,
) -> OwnershipRecord:
    """Create an OwnershipRecord for testing."""
    return OwnershipRecord(collection=collection, owner=owner, token_id=token_id)


def make_records(count: int, collection: str = DEFAULT_COLLECTION) -> list[OwnershipRecord]:
    """
    Create `count` records with distinct owners and sequential token ids.

    Owners are the addresses 0x...01, 0x...02, ...
    """
    return [
        OwnershipRecord(
            collection=collection,
            owner="0x" + f"{i:040x}",
            token_id=i,
        )
        for i in range(1, count + 1)
    ]


# =============================================================================
# Vault Scenario Factory
# =============================================================================

@dataclass
class VaultScenario:
    """Everything a custody test needs, already deployed and funded."""
    chain: Chain
    clock: FrozenClock
    owner: str
    minters: list[str]
    random_account: str
    token: ERC721Collection
    vault: TokenVault
    records: list[OwnershipRecord]
    tree: OwnershipMerkleTree
    delivery_allowed_at: int
    extra: dict = field(default_factory=dict)

    def minter(self, n: int) -> str:
        """Minter n (1-based, matching the token it minted)."""
        return self.minters[n - 1]

    def record_for(self, token_id: int) -> OwnershipRecord:
        for record in self.records:
            if record.token_id == token_id:
                return record
        raise KeyError(token_id)

    def proof_for(self, token_id: int) -> list[bytes]:
        return self.tree.proof_of(self.record_for(token_id))

    def transact(self, sender: str, method: str, *args, **kwargs):
        """Send a transaction to the vault."""
        return self.chain.transact(sender, self.vault.address, method, *args, **kwargs)


def make_vault_scenario(
    paused: bool = False,
    delivery_offset: Optional[int] = SIXTY_DAYS,
    start_time: Optional[int] = None,
) -> VaultScenario:
    """
    Deploy a collection and a vault holding tokens 1-4.

    Args:
        paused: Initial pause flag of the vault
        delivery_offset: Seconds from now until delivery opens; None
            deploys with delivery disabled (threshold 0)
        start_time: Initial clock time (default FrozenClock's)
    """
    clock = FrozenClock(start_time)
    chain = Chain(clock=clock)

    owner = chain.create_account("owner", balance=100 * ETHER)
    minters = [chain.create_account(f"minter-{i}", balance=100 * ETHER) for i in range(1, 5)]
    random_account = chain.create_account("random", balance=100 * ETHER)

    token = chain.deploy(owner, ERC721Collection)
    for minter in minters:
        chain.transact(minter, token.address, "free_mint", 1)
    chain.transact(minters[3], token.address, "free_mint", 1)

    records = [
        OwnershipRecord(collection=token.address, owner=minter, token_id=i)
        for i, minter in enumerate(minters, start=1)
    ]
    records.append(OwnershipRecord(collection=token.address, owner=minters[3], token_id=5))
    tree = OwnershipMerkleTree.build(records)

    delivery_allowed_at = 0 if delivery_offset is None else clock.now() + delivery_offset
    vault = chain.deploy(owner, TokenVault, tree.root, paused, delivery_allowed_at)

    for i, minter in enumerate(minters, start=1):
        chain.transact(minter, token.address, "transfer_from", minter, vault.address, i)

    return VaultScenario(
        chain=chain,
        clock=clock,
        owner=owner,
        minters=minters,
        random_account=random_account,
        token=token,
        vault=vault,
        records=records,
        tree=tree,
        delivery_allowed_at=delivery_allowed_at,
    )

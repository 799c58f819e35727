"""
Token Vault Tests
Tests for vault/token_vault.py release paths

Tests:
1. retrieve_token - owner with valid proof, wrong caller, wrong proof
2. Zero root disables verification
3. deliver_token - gating on the delivery timestamp, identity binding
4. Pause flag blocks both release paths
5. TokenTransferFailed when the vault does not hold the token
6. The two-record scenario end to end
"""
import pytest

from chain import Chain, ERC721Collection, FrozenClock
from core.crypto.hashing import ZERO_HASH, keccak256, to_hex
from core.merkle import OwnershipMerkleTree
from core.schemas.errors import (
    DeliveryNotAllowedException,
    ErrorCodes,
    InvalidProofException,
    PausedException,
    TokenTransferFailedException,
)
from core.schemas.records import OwnershipRecord
from vault import DeliveryState, TokenVault

from fixtures.common import ETHER, SIXTY_DAYS, make_vault_scenario


# =============================================================================
# retrieve_token
# =============================================================================

class TestRetrieveToken:
    """Self-service release to the committed owner."""

    def test_owner_retrieves_with_valid_proof(self, scenario, assert_event):
        """Rightful owner gets the token and TokenRetrieved is emitted."""
        token, vault = scenario.token, scenario.vault
        minter1 = scenario.minter(1)
        proof = scenario.proof_for(1)

        assert token.balance_of(vault.address) == 4
        assert token.balance_of(minter1) == 0
        assert vault.verify_merkle_proof(token.address, minter1, 1, proof)

        scenario.transact(minter1, "retrieve_token", token.address, 1, proof)

        assert token.owner_of(1) == minter1
        assert token.balance_of(vault.address) == 3
        assert_event(scenario.chain, "TokenRetrieved", vault.address, token_id=1, owner=minter1)

    def test_proof_accepted_as_hex_strings(self, scenario):
        """Proofs copied from the published artifact work as-is."""
        minter2 = scenario.minter(2)
        proof = [to_hex(p) for p in scenario.proof_for(2)]

        scenario.transact(minter2, "retrieve_token", scenario.token.address, 2, proof)

        assert scenario.token.owner_of(2) == minter2

    def test_malformed_proof_entry_is_invalid_proof(self, scenario):
        """Garbage in a proof is a failed membership check, not a crash."""
        token = scenario.token
        minter1 = scenario.minter(1)

        assert not scenario.vault.verify_merkle_proof(token.address, minter1, 1, ["not-hex"])
        with pytest.raises(InvalidProofException):
            scenario.transact(minter1, "retrieve_token", token.address, 1, ["not-hex"])
        with pytest.raises(InvalidProofException):
            scenario.transact(minter1, "retrieve_token", token.address, 1, ["0xzz"])
        assert token.owner_of(1) == scenario.vault.address

    def test_other_caller_with_owners_proof_rejected(self, scenario):
        """A valid proof is bound to its owner; nobody else can use it."""
        token = scenario.token
        proof = scenario.proof_for(1)

        with pytest.raises(InvalidProofException, match="Invalid proof"):
            scenario.transact(scenario.random_account, "retrieve_token", token.address, 1, proof)

        assert token.balance_of(scenario.vault.address) == 4

    def test_caller_with_own_proof_for_other_token_rejected(self, scenario):
        """minter2's proof for token 2 does not release token 1."""
        token = scenario.token

        with pytest.raises(InvalidProofException):
            scenario.transact(scenario.minter(2), "retrieve_token", token.address, 1, scenario.proof_for(2))

        assert token.owner_of(1) == scenario.vault.address

    def test_zero_root_skips_verification(self, scenario):
        """With the root cleared anyone can take any held token, whatever the proof."""
        token = scenario.token
        random_account = scenario.random_account

        scenario.transact(scenario.owner, "set_merkle_root", ZERO_HASH)
        scenario.transact(random_account, "retrieve_token", token.address, 1, [keccak256(b"garbage")])

        assert token.balance_of(random_account) == 1
        assert token.balance_of(scenario.vault.address) == 3

    def test_token_not_held_fails_transfer(self, scenario):
        """Token 5 has a valid proof but never entered the vault."""
        minter4 = scenario.minter(4)
        proof = scenario.proof_for(5)
        assert scenario.vault.verify_merkle_proof(scenario.token.address, minter4, 5, proof)

        with pytest.raises(TokenTransferFailedException) as exc_info:
            scenario.transact(minter4, "retrieve_token", scenario.token.address, 5, proof)

        assert exc_info.value.code == ErrorCodes.TOKEN_TRANSFER_FAILED
        assert scenario.token.owner_of(5) == minter4

    def test_failed_retrieve_leaves_no_event(self, scenario):
        """The event is emitted before the transfer but rolled back with it."""
        with pytest.raises(TokenTransferFailedException):
            scenario.transact(
                scenario.minter(4), "retrieve_token", scenario.token.address, 5, scenario.proof_for(5),
            )

        assert scenario.chain.events_named("TokenRetrieved") == []

    def test_retrieve_twice_fails(self, scenario):
        minter3 = scenario.minter(3)
        proof = scenario.proof_for(3)
        scenario.transact(minter3, "retrieve_token", scenario.token.address, 3, proof)

        with pytest.raises(TokenTransferFailedException):
            scenario.transact(minter3, "retrieve_token", scenario.token.address, 3, proof)

    def test_retrieve_works_before_delivery_opens(self, scenario):
        """The delivery timestamp only gates deliver_token."""
        assert scenario.vault.delivery_state() is DeliveryState.SCHEDULED

        scenario.transact(scenario.minter(1), "retrieve_token", scenario.token.address, 1, scenario.proof_for(1))

        assert scenario.token.owner_of(1) == scenario.minter(1)


# =============================================================================
# deliver_token
# =============================================================================

class TestDeliverToken:
    """Third-party facilitated release."""

    def test_delivery_not_allowed_before_threshold(self, scenario):
        token = scenario.token

        with pytest.raises(DeliveryNotAllowedException) as exc_info:
            scenario.transact(
                scenario.random_account, "deliver_token",
                token.address, scenario.minter(1), 1, scenario.proof_for(1),
            )

        assert exc_info.value.details["token_delivery_allowed_timestamp"] == scenario.delivery_allowed_at
        assert token.owner_of(1) == scenario.vault.address

    def test_delivery_not_allowed_when_threshold_zero(self, scenario):
        scenario.transact(scenario.owner, "set_token_delivery_allowed_timestamp", 0)
        scenario.clock.advance(10 * SIXTY_DAYS)

        assert scenario.vault.delivery_state() is DeliveryState.DISABLED
        with pytest.raises(DeliveryNotAllowedException):
            scenario.transact(
                scenario.random_account, "deliver_token",
                scenario.token.address, scenario.minter(1), 1, scenario.proof_for(1),
            )

    def test_delivery_allowed_at_threshold(self, scenario, assert_event):
        """Exactly at the threshold counts as open."""
        token = scenario.token
        minter1 = scenario.minter(1)
        facilitator = scenario.random_account

        scenario.clock.set_time(scenario.delivery_allowed_at)
        scenario.transact(facilitator, "deliver_token", token.address, minter1, 1, scenario.proof_for(1))

        assert token.owner_of(1) == minter1
        assert token.balance_of(facilitator) == 0
        assert_event(
            scenario.chain, "TokenDelivered", scenario.vault.address,
            token_id=1, owner=minter1, facilitator=facilitator,
        )

    def test_delivery_one_second_early_rejected(self, scenario):
        scenario.clock.set_time(scenario.delivery_allowed_at - 1)
        with pytest.raises(DeliveryNotAllowedException):
            scenario.transact(
                scenario.random_account, "deliver_token",
                scenario.token.address, scenario.minter(1), 1, scenario.proof_for(1),
            )

    def test_delivery_rejects_wrong_owner(self, scenario):
        """Proof for minter1 cannot deliver token 1 to somebody else."""
        scenario.clock.advance(SIXTY_DAYS)

        with pytest.raises(InvalidProofException):
            scenario.transact(
                scenario.random_account, "deliver_token",
                scenario.token.address, scenario.random_account, 1, scenario.proof_for(1),
            )

    def test_delivery_by_owner_themselves(self, scenario):
        minter2 = scenario.minter(2)
        scenario.clock.advance(SIXTY_DAYS)

        scenario.transact(minter2, "deliver_token", scenario.token.address, minter2, 2, scenario.proof_for(2))

        assert scenario.token.owner_of(2) == minter2

    def test_delivery_of_token_not_held_fails(self, scenario):
        scenario.clock.advance(SIXTY_DAYS)

        with pytest.raises(TokenTransferFailedException):
            scenario.transact(
                scenario.random_account, "deliver_token",
                scenario.token.address, scenario.minter(4), 5, scenario.proof_for(5),
            )

    def test_zero_root_delivery_to_anyone(self, scenario):
        scenario.transact(scenario.owner, "set_merkle_root", ZERO_HASH)
        scenario.clock.advance(SIXTY_DAYS)

        scenario.transact(
            scenario.random_account, "deliver_token",
            scenario.token.address, scenario.random_account, 3, [],
        )

        assert scenario.token.owner_of(3) == scenario.random_account

    def test_delivery_to_contract_without_receiver_hook_fails(self, scenario):
        """Safe transfer refuses recipients that cannot acknowledge."""
        scenario.transact(scenario.owner, "set_merkle_root", ZERO_HASH)
        scenario.clock.advance(SIXTY_DAYS)

        with pytest.raises(TokenTransferFailedException):
            scenario.transact(
                scenario.random_account, "deliver_token",
                scenario.token.address, scenario.token.address, 1, [],
            )


# =============================================================================
# Pause flag
# =============================================================================

class TestPaused:
    """Pause blocks both release paths regardless of proof validity."""

    def test_retrieve_blocked_when_paused(self):
        scenario = make_vault_scenario(paused=True)

        with pytest.raises(PausedException, match="Contract is paused"):
            scenario.transact(
                scenario.minter(1), "retrieve_token", scenario.token.address, 1, scenario.proof_for(1),
            )

    def test_deliver_blocked_when_paused_even_if_open(self):
        scenario = make_vault_scenario(paused=True)
        scenario.clock.advance(SIXTY_DAYS)

        with pytest.raises(PausedException):
            scenario.transact(
                scenario.random_account, "deliver_token",
                scenario.token.address, scenario.minter(1), 1, scenario.proof_for(1),
            )

    def test_pause_checked_before_delivery_window(self):
        """Paused and delivery disabled together report Paused."""
        scenario = make_vault_scenario(paused=True, delivery_offset=None)

        with pytest.raises(PausedException):
            scenario.transact(
                scenario.random_account, "deliver_token",
                scenario.token.address, scenario.minter(1), 1, scenario.proof_for(1),
            )

    def test_unpause_restores_retrieval(self):
        scenario = make_vault_scenario(paused=True)
        scenario.transact(scenario.owner, "set_paused", False)

        scenario.transact(scenario.minter(1), "retrieve_token", scenario.token.address, 1, scenario.proof_for(1))

        assert scenario.token.owner_of(1) == scenario.minter(1)


# =============================================================================
# Construction and views
# =============================================================================

class TestConstruction:
    """Constructor wiring and read-only views."""

    def test_initial_state(self, scenario):
        vault = scenario.vault
        assert vault.merkle_root() == scenario.tree.root
        assert vault.paused() is False
        assert vault.token_delivery_allowed_timestamp() == scenario.delivery_allowed_at
        assert vault.owner() == scenario.owner

    def test_ownership_event_at_construction(self, scenario, assert_event):
        assert_event(
            scenario.chain, "OwnershipTransferred", scenario.vault.address,
            previous_owner="0x0000000000000000000000000000000000000000",
            new_owner=scenario.owner,
        )

    def test_delivery_state_transitions(self, scenario):
        vault = scenario.vault
        assert vault.delivery_state() is DeliveryState.SCHEDULED
        assert vault.delivery_state(scenario.delivery_allowed_at) is DeliveryState.OPEN
        scenario.clock.advance(SIXTY_DAYS)
        assert vault.delivery_state() is DeliveryState.OPEN

    def test_verify_merkle_proof_false_for_mismatch(self, scenario):
        vault, token = scenario.vault, scenario.token
        proof = scenario.proof_for(1)
        assert not vault.verify_merkle_proof(token.address, scenario.minter(2), 1, proof)
        assert not vault.verify_merkle_proof(token.address, scenario.minter(1), 2, proof)

    def test_vault_accepts_safe_transfers(self, scenario):
        """Tokens pushed with safe_transfer_from are acknowledged."""
        token = scenario.token
        minter4 = scenario.minter(4)

        scenario.chain.transact(minter4, token.address, "safe_transfer_from", minter4, scenario.vault.address, 5)

        assert token.owner_of(5) == scenario.vault.address


# =============================================================================
# Concrete two-record scenario
# =============================================================================

class TestTwoRecordScenario:
    """records = [(C, A, 1), (C, B, 2)]; A retrieves 1, then retries."""

    def test_retrieve_then_retry(self):
        clock = FrozenClock()
        chain = Chain(clock=clock)
        admin = chain.create_account("admin", balance=ETHER)
        alice = chain.create_account("alice")
        bob = chain.create_account("bob")

        collection = chain.deploy(admin, ERC721Collection)
        chain.transact(alice, collection.address, "free_mint", 1)
        chain.transact(bob, collection.address, "free_mint", 1)

        records = [
            OwnershipRecord(collection=collection.address, owner=alice, token_id=1),
            OwnershipRecord(collection=collection.address, owner=bob, token_id=2),
        ]
        tree = OwnershipMerkleTree.build(records)
        vault = chain.deploy(admin, TokenVault, tree.root, False, 0)
        chain.transact(alice, collection.address, "transfer_from", alice, vault.address, 1)
        chain.transact(bob, collection.address, "transfer_from", bob, vault.address, 2)

        proof_a = tree.proof_of(records[0])
        chain.transact(alice, vault.address, "retrieve_token", collection.address, 1, proof_a)
        assert collection.owner_of(1) == alice

        with pytest.raises(TokenTransferFailedException):
            chain.transact(alice, vault.address, "retrieve_token", collection.address, 1, proof_a)
        assert collection.owner_of(2) == vault.address

"""
test_chain.py - Unit tests for chain.py

Tests:
- Clock and tx-sender management
- Deployment and lookup errors
- call(): Result values, receipts, sequence numbers, rollback
- read(): read-only dispatch
- Verbose receipt printing
- state(), clone(), replay()
"""

import pytest

from provenance import (
    Chain, Contract, create_default_chain, Result, Receipt, ErrorCode, ChainError, ContractError,
    BATCH_TRACKING, AUTHENTICATION, TEMPERATURE_MONITORING, MANUFACTURER_VERIFICATION,
    BatchTracking,
)
from tests.principals import MANUFACTURER, DISTRIBUTOR, OUTSIDER, GENESIS_HEIGHT


# ============================================================================
# Clock and sender
# ============================================================================

class TestClock:

    def test_initial_height(self, chain):
        assert chain.block_height == GENESIS_HEIGHT

    def test_default_chain_starts_at_zero(self):
        assert Chain(verbose=False).block_height == 0

    def test_negative_initial_height_rejected(self):
        with pytest.raises(ValueError):
            Chain(initial_block_height=-1, verbose=False)

    def test_advance(self, chain):
        assert chain.advance_block_height(10) == 110
        assert chain.advance_block_height() == 111
        assert chain.block_height == 111

    def test_advance_zero_is_allowed(self, chain):
        assert chain.advance_block_height(0) == GENESIS_HEIGHT

    def test_advance_negative_rejected(self, chain):
        with pytest.raises(ValueError):
            chain.advance_block_height(-1)
        assert chain.block_height == GENESIS_HEIGHT

    def test_set_block_height_forward_only(self, chain):
        chain.set_block_height(150)
        chain.set_block_height(150)
        with pytest.raises(ValueError):
            chain.set_block_height(149)
        assert chain.block_height == 150

    def test_tx_sender_defaults_to_deployer(self, chain):
        assert chain.tx_sender == MANUFACTURER

    def test_set_tx_sender_applies_to_calls(self, chain):
        chain.set_tx_sender(DISTRIBUTOR)
        chain.call(BATCH_TRACKING, "register_batch", "B1", "P1", 1, 2)
        assert chain.read(BATCH_TRACKING, "get_batch_info", "B1").manufacturer == DISTRIBUTOR

    def test_explicit_sender_overrides_tx_sender(self, chain):
        chain.call(BATCH_TRACKING, "register_batch", "B1", "P1", 1, 2, sender=OUTSIDER)
        assert chain.read(BATCH_TRACKING, "get_batch_info", "B1").manufacturer == OUTSIDER
        assert chain.tx_sender == MANUFACTURER


# ============================================================================
# Deployment
# ============================================================================

class TestDeployment:

    def test_default_chain_has_all_contracts(self, chain):
        assert set(chain.contracts) == {
            BATCH_TRACKING, AUTHENTICATION, TEMPERATURE_MONITORING, MANUFACTURER_VERIFICATION,
        }

    def test_deployer_is_admin(self, chain):
        assert chain.admin == MANUFACTURER
        assert chain.read(MANUFACTURER_VERIFICATION, "get_admin") == MANUFACTURER

    def test_duplicate_deploy_rejected(self, chain):
        with pytest.raises(ValueError):
            chain.deploy(BatchTracking())

    def test_nameless_contract_rejected(self):
        class Nameless(Contract):
            pass

        with pytest.raises(ChainError):
            Chain(verbose=False).deploy(Nameless())

    def test_unknown_contract(self, chain):
        with pytest.raises(ChainError):
            chain.get_contract("nope")
        with pytest.raises(ChainError):
            chain.call("nope", "register_batch")

    def test_unknown_function(self, chain):
        with pytest.raises(ChainError):
            chain.call(BATCH_TRACKING, "delete_everything")
        assert chain.receipts == []

    def test_read_only_function_is_not_callable(self, chain):
        with pytest.raises(ChainError):
            chain.call(BATCH_TRACKING, "get_batch_info", "B1")

    def test_public_function_is_not_readable(self, chain):
        with pytest.raises(ChainError):
            chain.read(BATCH_TRACKING, "register_batch", "B1", "P1", 1, 2)

    def test_undeployed_contract_has_no_admin(self):
        with pytest.raises(ChainError):
            BatchTracking().admin

    def test_verbose_deploy_prints(self, capsys):
        create_default_chain(verbose=True)
        out = capsys.readouterr().out
        assert "Deployed: batch-tracking" in out
        assert "Deployed: manufacturer-verification" in out


# ============================================================================
# Execution
# ============================================================================

class TestCall:

    def test_accepted_call_returns_success(self, chain):
        result = chain.call(BATCH_TRACKING, "register_batch", "B1", "P1", 1, 2)
        assert result == Result.success(True)
        assert result.ok
        assert result.unwrap() is True

    def test_rejected_call_returns_failure_with_number(self, batch_chain):
        result = batch_chain.call(BATCH_TRACKING, "register_batch", "BATCH001", "P", 1, 2)
        assert not result.ok
        assert result.error == ErrorCode.BATCH_EXISTS
        assert result.error_number == 101
        assert result.value is None

    def test_unwrap_failure_raises(self, batch_chain):
        result = batch_chain.call(BATCH_TRACKING, "transfer_batch", "BATCH001", OUTSIDER, "x",
                                  sender=OUTSIDER)
        with pytest.raises(ContractError) as exc:
            result.unwrap()
        assert exc.value.code == ErrorCode.NOT_CURRENT_CUSTODIAN

    def test_every_call_gets_a_receipt(self, batch_chain):
        batch_chain.call(BATCH_TRACKING, "register_batch", "BATCH001", "P", 1, 2)
        batch_chain.call(BATCH_TRACKING, "register_batch", "BATCH002", "P", 1, 2)

        receipts = batch_chain.receipts
        assert [r.sequence_number for r in receipts] == [0, 1, 2]
        assert [r.accepted for r in receipts] == [True, False, True]

    def test_receipt_records_context_and_changes(self, chain):
        chain.advance_block_height(5)
        chain.call(BATCH_TRACKING, "register_batch", "B1", "P1", 1, 2, sender=DISTRIBUTOR)

        receipt = chain.receipts[-1]
        assert isinstance(receipt, Receipt)
        assert receipt.contract == BATCH_TRACKING
        assert receipt.function == "register_batch"
        assert receipt.args == ("B1", "P1", 1, 2)
        assert receipt.context.sender == DISTRIBUTOR
        assert receipt.context.block_height == 105
        assert {sc.store for sc in receipt.state_changes} == {
            "batches", "batch-history-entries", "batch-history-counts",
        }

    def test_rejected_receipt_has_no_changes(self, batch_chain):
        batch_chain.call(BATCH_TRACKING, "register_batch", "BATCH001", "P", 1, 2)
        assert batch_chain.receipts[-1].state_changes == ()

    def test_rejection_leaves_state_unchanged(self, batch_chain):
        before = batch_chain.state()
        batch_chain.call(BATCH_TRACKING, "transfer_batch", "BATCH001", OUTSIDER, "stolen",
                         sender=OUTSIDER)
        assert batch_chain.state() == before

    def test_unexpected_exception_rolls_back_and_propagates(self, batch_chain):
        before = batch_chain.state()
        contract = batch_chain.get_contract(BATCH_TRACKING)

        def explode(ctx, batch_id):
            contract.batches.put(batch_id, "garbage")
            raise RuntimeError("boom")

        contract.register_batch = explode
        with pytest.raises(RuntimeError):
            batch_chain.call(BATCH_TRACKING, "register_batch", "B9")

        assert batch_chain.state() == before
        assert not batch_chain.journal.active
        assert len(batch_chain.receipts) == 1


class TestVerbose:

    def test_applied_receipt_printed(self, capsys):
        chain = create_default_chain(verbose=True)
        capsys.readouterr()
        chain.call(BATCH_TRACKING, "register_batch", "B1", "P1", 1, 2)
        out = capsys.readouterr().out
        assert "Receipt #0: batch-tracking.register_batch" in out
        assert "✓ APPLIED" in out
        assert "[batches] 'B1'" in out

    def test_rejected_receipt_printed(self, capsys):
        chain = create_default_chain(verbose=True)
        chain.call(BATCH_TRACKING, "transfer_batch", "missing", "x", "shipped")
        out = capsys.readouterr().out
        assert "✗ REJECTED" in out

    def test_quiet_chain_prints_nothing(self, capsys, chain):
        chain.call(BATCH_TRACKING, "register_batch", "B1", "P1", 1, 2)
        assert capsys.readouterr().out == ""


# ============================================================================
# Chain operations
# ============================================================================

class TestState:

    def test_state_includes_admin_and_contract_stores(self, chain):
        state = chain.state()
        assert state["admin-role"] == {"admin": MANUFACTURER}
        for name in ["batches", "authentication-codes", "batch-thresholds", "verified-manufacturers"]:
            assert state[name] == {}


class TestClone:

    def test_clone_is_independent(self, batch_chain):
        clone = batch_chain.clone()
        clone.call(BATCH_TRACKING, "transfer_batch", "BATCH001", DISTRIBUTOR, "shipped")
        clone.advance_block_height(50)

        assert batch_chain.read(BATCH_TRACKING, "get_batch_info", "BATCH001").current_custodian == MANUFACTURER
        assert batch_chain.block_height == GENESIS_HEIGHT
        assert len(batch_chain.receipts) == 1
        assert len(clone.receipts) == 2

    def test_clone_has_equal_state(self, batch_chain):
        assert batch_chain.clone().state() == batch_chain.state()


class TestReplay:

    def _history(self, chain):
        chain.call(BATCH_TRACKING, "register_batch", "B1", "P1", 1, 2)
        chain.advance_block_height(10)
        chain.call(BATCH_TRACKING, "transfer_batch", "B1", DISTRIBUTOR, "shipped")
        chain.call(BATCH_TRACKING, "transfer_batch", "B1", OUTSIDER, "stolen", sender=OUTSIDER)
        chain.call(AUTHENTICATION, "generate_authentication_code", "A1", "B1", "P1")
        chain.advance_block_height(3)
        chain.call(AUTHENTICATION, "verify_authentication_code", "A1", "Pharmacy", sender=OUTSIDER)
        chain.call(MANUFACTURER_VERIFICATION, "transfer_admin", DISTRIBUTOR)
        chain.call(AUTHENTICATION, "invalidate_authentication_code", "A1", sender=DISTRIBUTOR)

    def test_replay_reproduces_state(self, chain):
        self._history(chain)
        replayed = chain.replay()

        assert replayed.state() == chain.state()
        assert replayed.block_height == chain.block_height
        assert replayed.admin == DISTRIBUTOR
        assert [r.result for r in replayed.receipts] == [r.result for r in chain.receipts]

    def test_replay_upto(self, chain):
        self._history(chain)
        partial = chain.replay(upto=2)

        batch = partial.read(BATCH_TRACKING, "get_batch_info", "B1")
        assert batch.current_custodian == DISTRIBUTOR
        assert partial.read(AUTHENTICATION, "get_authentication_info", "A1") is None
        assert partial.block_height == 110

    def test_replay_of_empty_chain(self, chain):
        assert chain.replay().state() == chain.state()

    def test_replay_detects_divergence(self, batch_chain):
        receipt = batch_chain.receipts[0]
        batch_chain.receipts[0] = Receipt(
            sequence_number=receipt.sequence_number,
            contract=receipt.contract,
            function=receipt.function,
            args=receipt.args,
            context=receipt.context,
            result=Result.failure(ErrorCode.BATCH_EXISTS, 101),
        )
        with pytest.raises(ChainError):
            batch_chain.replay()

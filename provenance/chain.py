"""
chain.py - Single-executor contract chain

The Chain is the central state manager of the provenance ledger. It is the only
object that invokes mutating contract functions, so every state change is
serialized, atomic and logged.

Key responsibilities:
    - Owns the logical clock (block height) and the current tx-sender
    - Deploys contracts and binds them to a shared Journal and AdminRole
    - Executes calls atomically: a rejected call leaves no trace in any store
    - Converts contract rejections into Result values (never raises them)
    - Records every call, accepted or rejected, as a Receipt
    - Rebuilds state from the receipt log (replay) and clones itself
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
import copy

from .core import (
    Result, ChainError, ContractError,
    Principal, BlockHeight,
    DEFAULT_DEPLOYER, DEFAULT_BLOCK_HEIGHT,
)
from .context import CallContext
from .contract import Contract
from .guards import AdminRole
from .contracts import (
    BatchTracking, Authentication, TemperatureMonitoring, ManufacturerVerification,
)
from .store import Journal, StateChange


# ============================================================================
# RECEIPT
# ============================================================================

@dataclass(frozen=True, slots=True)
class Receipt:
    """
    Immutable record of one executed call.

    Attributes:
        sequence_number: Monotonic position in the chain's receipt log
        contract: Name of the called contract
        function: Name of the called public function
        args: Positional arguments of the call
        context: Sender and block height the call ran with
        result: Outcome returned to the caller
        state_changes: Store writes the call committed (empty if rejected)
    """
    sequence_number: int
    contract: str
    function: str
    args: Tuple[Any, ...]
    context: CallContext
    result: Result
    state_changes: Tuple[StateChange, ...] = ()

    @property
    def accepted(self) -> bool:
        return self.result.ok

    def __repr__(self) -> str:
        w = 100
        bar = "─" * w

        def pad(text: str) -> str:
            if len(text) > w:
                return text[:w-3] + "..."
            return text + " " * (w - len(text))

        call = f"{self.contract}.{self.function}({', '.join(repr(a) for a in self.args)})"
        lines = [
            "",
            f"┌{bar}┐",
            f"│{pad(' Receipt #' + str(self.sequence_number) + ': ' + call)}│",
            f"├{bar}┤",
            f"│{pad('   sender       : ' + str(self.context.sender))}│",
            f"│{pad('   block_height : ' + str(self.context.block_height))}│",
            f"│{pad('   result       : ' + repr(self.result))}│",
        ]
        if self.state_changes:
            lines.append(f"├{bar}┤")
            lines.append(f"│{pad(' State Changes (' + str(len(self.state_changes)) + '):')}│")
            for sc in self.state_changes:
                lines.append(f"│{pad('   [' + sc.store + '] ' + repr(sc.key))}│")
                for field_name, (old_val, new_val) in sc.changed_fields().items():
                    lines.append(f"│{pad(f'      {field_name}: {old_val!r} → {new_val!r}')}│")
        lines.append(f"└{bar}┘")
        return "\n".join(lines)


# ============================================================================
# CHAIN
# ============================================================================

class Chain:
    """
    Deterministic single-executor chain hosting the supply-chain contracts.

    Design Principles:
        - Always atomic: each call runs inside a journal; a rejection rolls
          back every write the call made, including history appends.
        - Always logs: every call gets a Receipt, enabling replay().
        - Never reads wall-clock time: block height only moves when the caller
          advances it.

    Thread Safety:
        Not thread-safe. One chain models one serialized executor.

    Example:
        chain = create_default_chain(verbose=False)
        chain.set_block_height(100)
        chain.call(BATCH_TRACKING, "register_batch", "BATCH001", "PROD001", 20230101, 20250101,
                   sender="manufacturer")
        chain.advance_block_height(10)
        result = chain.call(BATCH_TRACKING, "transfer_batch", "BATCH001", "distributor", "shipped",
                            sender="manufacturer")
    """

    def __init__(
        self,
        name: str = "simnet",
        deployer: Principal = DEFAULT_DEPLOYER,
        initial_block_height: BlockHeight = DEFAULT_BLOCK_HEIGHT,
        verbose: bool = True,
    ):
        """
        Create an empty chain.

        Args:
            name: Chain identifier
            deployer: Initial admin and initial tx-sender
            initial_block_height: Starting logical clock value (default: 0)
            verbose: Print a receipt for every call (default: True)
        """
        if initial_block_height < 0:
            raise ValueError(f"initial_block_height cannot be negative, got {initial_block_height}")
        self.name = name
        self.deployer = deployer
        self.verbose = verbose
        self.journal = Journal()
        self.admin_role = AdminRole(deployer, self.journal)
        self.contracts: Dict[str, Contract] = {}
        self.receipts: List[Receipt] = []
        self._initial_block_height = initial_block_height
        self._block_height: BlockHeight = initial_block_height
        self._tx_sender: Principal = deployer
        self._next_sequence: int = 0

    # ========================================================================
    # CLOCK AND SENDER
    # ========================================================================

    @property
    def block_height(self) -> BlockHeight:
        """Current logical clock value."""
        return self._block_height

    @property
    def tx_sender(self) -> Principal:
        """Principal used for calls that do not pass sender explicitly."""
        return self._tx_sender

    def set_tx_sender(self, sender: Principal) -> None:
        self._tx_sender = sender

    def advance_block_height(self, blocks: int = 1) -> BlockHeight:
        """
        Move the clock forward by a number of blocks.

        Raises:
            ValueError: If blocks is negative
        """
        if blocks < 0:
            raise ValueError(f"Cannot move block height backwards: {blocks} blocks")
        self._block_height += blocks
        return self._block_height

    def set_block_height(self, height: BlockHeight) -> None:
        """
        Set the clock to an absolute value.

        Height can only move forward or stay, never backward.

        Raises:
            ValueError: If height is below the current height
        """
        if height < self._block_height:
            raise ValueError(f"Cannot move block height backwards: {height} < {self._block_height}")
        self._block_height = height

    # ========================================================================
    # DEPLOYMENT
    # ========================================================================

    def deploy(self, contract: Contract) -> Contract:
        """
        Deploy a contract under its name.

        Raises:
            ChainError: If the contract has no name
            ValueError: If a contract with the same name is already deployed
        """
        if not contract.name:
            raise ChainError(f"{type(contract).__name__} has no name")
        if contract.name in self.contracts:
            raise ValueError(f"Contract {contract.name} already deployed")
        contract.bind(self.journal, self.admin_role)
        self.contracts[contract.name] = contract
        if self.verbose:
            print(f"📝 Deployed: {contract.name} [{type(contract).__name__}]")
        return contract

    def get_contract(self, name: str) -> Contract:
        if name not in self.contracts:
            raise ChainError(f"Contract {name} not deployed")
        return self.contracts[name]

    @property
    def admin(self) -> Principal:
        return self.admin_role.holder

    # ========================================================================
    # EXECUTION
    # ========================================================================

    def call(self, contract: str, function: str, *args: Any, sender: Optional[Principal] = None) -> Result:
        """
        Execute a public contract function atomically.

        Args:
            contract: Deployed contract name
            function: Public function name
            *args: Function arguments (after the call context)
            sender: Calling principal (default: the current tx-sender)

        Returns:
            Result.success(value) if accepted, Result.failure(code, number) if
            the contract rejected the call. A rejected call changes nothing.

        Raises:
            ChainError: If the contract or function does not exist
        """
        target = self.get_contract(contract)
        if function not in target.PUBLIC_FUNCTIONS:
            raise ChainError(f"{contract} has no public function {function}")

        ctx = CallContext(sender=self._tx_sender if sender is None else sender,
                          block_height=self._block_height)

        self.journal.begin()
        try:
            value = getattr(target, function)(ctx, *args)
        except ContractError as e:
            self.journal.rollback()
            result = Result.failure(e.code, target.error_number(e.code), str(e))
            changes: Tuple[StateChange, ...] = ()
        except Exception:
            self.journal.rollback()
            raise
        else:
            changes = self.journal.commit()
            result = Result.success(value)

        receipt = Receipt(
            sequence_number=self._next_sequence,
            contract=contract,
            function=function,
            args=tuple(args),
            context=ctx,
            result=result,
            state_changes=changes,
        )
        self._next_sequence += 1
        self.receipts.append(receipt)

        if self.verbose:
            self._print_receipt(receipt)
        return result

    def read(self, contract: str, function: str, *args: Any) -> Any:
        """
        Call a read-only contract function. No receipt is recorded.

        Raises:
            ChainError: If the contract or function does not exist
        """
        target = self.get_contract(contract)
        if function not in target.READ_ONLY_FUNCTIONS:
            raise ChainError(f"{contract} has no read-only function {function}")
        return getattr(target, function)(*args)

    def _print_receipt(self, receipt: Receipt) -> None:
        """Print the receipt with a trailing result line."""
        lines = repr(receipt).split('\n')
        w = 100
        bar = "─" * w
        if receipt.accepted:
            status = " ✓ APPLIED"
        else:
            status = f" ✗ REJECTED: {receipt.result.message}"
        if len(status) > w:
            status = status[:w-3] + "..."
        lines[-1] = f"├{bar}┤"
        lines.append(f"│{status}{' ' * (w - len(status))}│")
        lines.append(f"└{bar}┘")
        print("\n".join(lines))

    # ========================================================================
    # CHAIN OPERATIONS
    # ========================================================================

    def state(self) -> Dict[str, Dict[Any, Any]]:
        """
        Snapshot every store on the chain.

        Returns:
            Dict mapping store name to a dict of its records. Includes the
            admin role. Two chains with equal state() hold identical records.
        """
        snapshot = {store.name: dict(store.items()) for store in self.admin_role.stores}
        for contract in self.contracts.values():
            for store in contract.stores():
                snapshot[store.name] = dict(store.items())
        return snapshot

    def clone(self) -> Chain:
        """
        Create a fully independent deep copy of this chain.

        Contracts, stores, admin role, receipts, clock and sender are all
        copied; changes to the clone never affect the original.
        """
        return copy.deepcopy(self)

    def replay(self, upto: Optional[int] = None) -> Chain:
        """
        Build a new chain by re-executing the receipt log.

        Fresh instances of every deployed contract are deployed on a new
        chain with the same deployer and genesis height, then each receipt is
        re-executed with its recorded sender and block height.

        Args:
            upto: Replay only receipts[:upto] (default: all). Gives the state
                  as it was after that many calls.

        Returns:
            New Chain instance with replayed state

        Raises:
            ChainError: If a replayed call produces a different result
        """
        replayed = Chain(
            name=f"{self.name}_replayed",
            deployer=self.deployer,
            initial_block_height=self._initial_block_height,
            verbose=self.verbose,
        )
        for contract in self.contracts.values():
            replayed.deploy(type(contract)())

        receipts = self.receipts if upto is None else self.receipts[:upto]
        for receipt in receipts:
            replayed.set_block_height(receipt.context.block_height)
            result = replayed.call(
                receipt.contract, receipt.function, *receipt.args,
                sender=receipt.context.sender,
            )
            if result != receipt.result:
                raise ChainError(
                    f"Replay diverged at receipt {receipt.sequence_number}: "
                    f"{result!r} != {receipt.result!r}"
                )

        if upto is None:
            replayed.set_block_height(self._block_height)
            replayed.set_tx_sender(self._tx_sender)
        return replayed


def create_default_chain(
    name: str = "simnet",
    deployer: Principal = DEFAULT_DEPLOYER,
    initial_block_height: BlockHeight = DEFAULT_BLOCK_HEIGHT,
    verbose: bool = True,
) -> Chain:
    """
    Create a chain with all four supply-chain contracts deployed.

    Returns:
        Chain with BatchTracking, Authentication, TemperatureMonitoring and
        ManufacturerVerification deployed by deployer
    """
    chain = Chain(name, deployer, initial_block_height, verbose)
    chain.deploy(ManufacturerVerification())
    chain.deploy(BatchTracking())
    chain.deploy(Authentication())
    chain.deploy(TemperatureMonitoring())
    return chain

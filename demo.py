#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: Follow a Batch Through the Supply Chain

This walkthrough shows how the provenance ledger works by following one batch
of medicine from the factory to the pharmacy shelf. Press Enter to advance.

WHAT YOU'LL LEARN:
  1-3:   Foundation   - The chain, the admin, verified manufacturers
  4-6:   Custody      - Registering a batch, hand-offs, rejected transfers
  7-8:   Cold Chain   - Thresholds, compliant readings and violations
  9-10:  Point of Sale - Authentication scans and counterfeit revocation
  11-12: Audit        - The receipt log, clone() and replay()

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

from dataclasses import dataclass
import sys

from provenance import (
    Chain, create_default_chain,
    BATCH_TRACKING, AUTHENTICATION, TEMPERATURE_MONITORING, MANUFACTURER_VERIFICATION,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    genesis_height: int = 100

    manufacturer: str = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"
    distributor: str = "ST2CY5V39NHDPWSXMW9QDT3HC3GD6Q6XX4CFRK9AG"
    pharmacist: str = "ST2JHG361ZXG51QTKY2NQCVBPPRRE2KZB1HR05NNC"
    counterfeiter: str = "ST3NBRSFKX28FQ2ZJ1MAKX58HKHSDGNV5YC7WZ5S"

    batch_id: str = "BATCH001"
    product_id: str = "PROD001"
    code: str = "AUTH123456789"

    # Vaccine storage band
    min_temp: float = 2.0
    max_temp: float = 8.0
    min_humidity: float = 30.0
    max_humidity: float = 60.0


CONFIG = DemoConfig()

QUICK_MODE = "--quick" in sys.argv


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    """Print a step header with learning objective."""
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    """Print a section header within a step."""
    print(f"\n--- {text} ---\n")


def short(principal: str) -> str:
    return principal[:6] + "..." + principal[-4:]


# ============================================================================
# PHASE 1: FOUNDATION (Steps 1-3)
# ============================================================================

def step_01_empty_chain() -> Chain:
    """Create a chain with every contract deployed."""
    step_header(1, "The Chain",
        "See that a chain starts with four contracts, an admin and a clock.")

    print("""
    The ledger is a single executor hosting four contracts:

    1. batch-tracking            - who holds each batch, and its custody trail
    2. authentication            - per-unit codes scanned to prove authenticity
    3. temperature-monitoring    - cold-chain readings checked against a band
    4. manufacturer-verification - the admin's list of trusted manufacturers

    Time is a block height. It only moves when we advance it.
    """)

    wait_for_enter()

    print(">>> chain = create_default_chain('tutorial', deployer=manufacturer, initial_block_height=100)")
    chain = create_default_chain(
        name="tutorial",
        deployer=CONFIG.manufacturer,
        initial_block_height=CONFIG.genesis_height,
        verbose=True,
    )

    section_header("Initial State")
    print(f"Chain name:    {chain.name}")
    print(f"Block height:  {chain.block_height}")
    print(f"Admin:         {short(chain.admin)}")
    print(f"Contracts:     {sorted(chain.contracts)}")
    print(f"Receipts:      {len(chain.receipts)}")
    return chain


def step_02_verify_manufacturer(chain: Chain) -> Chain:
    """The admin vouches for the manufacturer."""
    step_header(2, "Verified Manufacturers",
        "Only the admin can mark a manufacturer as verified.")

    print(">>> chain.call(MANUFACTURER_VERIFICATION, 'verify_manufacturer', manufacturer)")
    chain.call(MANUFACTURER_VERIFICATION, "verify_manufacturer", CONFIG.manufacturer)

    section_header("Someone else tries")
    chain.call(MANUFACTURER_VERIFICATION, "verify_manufacturer", CONFIG.counterfeiter,
               sender=CONFIG.counterfeiter)

    print(f"\nis_verified(manufacturer):  {chain.read(MANUFACTURER_VERIFICATION, 'is_verified', CONFIG.manufacturer)}")
    print(f"is_verified(counterfeiter): {chain.read(MANUFACTURER_VERIFICATION, 'is_verified', CONFIG.counterfeiter)}")
    return chain


def step_03_results(chain: Chain) -> Chain:
    """Rejections are values, not exceptions."""
    step_header(3, "Results",
        "Every call returns a Result; a rejection carries a code and a number.")

    result = chain.call(MANUFACTURER_VERIFICATION, "verify_manufacturer", CONFIG.manufacturer)
    print(f"\nresult.ok           = {result.ok}")
    print(f"result.error        = {result.error}")
    print(f"result.error_number = {result.error_number}")
    print("""
    A rejected call changes nothing. The receipt is still logged, with no
    state changes, so the log shows every attempt.
    """)
    return chain


# ============================================================================
# PHASE 2: CUSTODY (Steps 4-6)
# ============================================================================

def step_04_register_batch(chain: Chain) -> Chain:
    step_header(4, "Register a Batch",
        "The caller becomes manufacturer and first custodian; history starts at index 0.")

    chain.call(BATCH_TRACKING, "register_batch",
               CONFIG.batch_id, CONFIG.product_id, 20230101, 20250101)

    entry = chain.read(BATCH_TRACKING, "get_batch_history_entry", CONFIG.batch_id, 0)
    print(f"\nhistory[0] = {entry}")
    return chain


def step_05_transfer(chain: Chain) -> Chain:
    step_header(5, "Hand-off",
        "Only the current custodian can pass the batch on.")

    chain.advance_block_height(10)
    print(f">>> chain.advance_block_height(10)  # now {chain.block_height}")
    chain.call(BATCH_TRACKING, "transfer_batch", CONFIG.batch_id, CONFIG.distributor, "shipped")

    batch = chain.read(BATCH_TRACKING, "get_batch_info", CONFIG.batch_id)
    print(f"\ncustodian = {short(batch.current_custodian)}, status = {batch.status}")
    return chain


def step_06_rejected_transfer(chain: Chain) -> Chain:
    step_header(6, "A Diversion Attempt",
        "A non-custodian transfer is rejected and leaves no history entry.")

    chain.call(BATCH_TRACKING, "transfer_batch", CONFIG.batch_id, CONFIG.counterfeiter, "diverted",
               sender=CONFIG.counterfeiter)
    print(f"\nhistory count = {chain.read(BATCH_TRACKING, 'get_history_count', CONFIG.batch_id)}")
    return chain


# ============================================================================
# PHASE 3: COLD CHAIN (Steps 7-8)
# ============================================================================

def step_07_thresholds(chain: Chain) -> Chain:
    step_header(7, "Storage Band",
        "Configure the allowed temperature and humidity for the batch.")

    chain.call(TEMPERATURE_MONITORING, "set_batch_thresholds", CONFIG.batch_id,
               CONFIG.min_temp, CONFIG.max_temp, CONFIG.min_humidity, CONFIG.max_humidity)

    section_header("An inverted band is refused")
    chain.call(TEMPERATURE_MONITORING, "set_batch_thresholds", "BATCH-BAD", 8, 2, 30, 60)
    return chain


def step_08_readings(chain: Chain) -> Chain:
    step_header(8, "Readings in Transit",
        "Readings are stored either way; out-of-band ones bump the violation counter.")

    for temperature, humidity, location in [(4.5, 45, "Truck 7"), (9.1, 45, "Truck 7"), (5.0, 28, "Depot")]:
        chain.advance_block_height(2)
        result = chain.call(TEMPERATURE_MONITORING, "record_temperature", CONFIG.batch_id,
                            temperature, humidity, location, sender=CONFIG.distributor)
        print(f"{temperature:>5} C / {humidity:>3}% at {location:<8} -> {result.value.value}")

    count = chain.read(TEMPERATURE_MONITORING, "get_violation_count", CONFIG.batch_id)
    print(f"\nviolations = {count}")
    return chain


# ============================================================================
# PHASE 4: POINT OF SALE (Steps 9-10)
# ============================================================================

def step_09_scan(chain: Chain) -> Chain:
    step_header(9, "Authentication Scans",
        "Each scan is counted and logged with verifier, block height and location.")

    chain.call(AUTHENTICATION, "generate_authentication_code",
               CONFIG.code, CONFIG.batch_id, CONFIG.product_id)
    chain.advance_block_height(5)
    chain.call(BATCH_TRACKING, "transfer_batch", CONFIG.batch_id, CONFIG.pharmacist, "received",
               sender=CONFIG.distributor)
    result = chain.call(AUTHENTICATION, "verify_authentication_code", CONFIG.code, "Pharmacy A",
                        sender=CONFIG.pharmacist)
    print(f"\n{result.value}")
    return chain


def step_10_revoke(chain: Chain) -> Chain:
    step_header(10, "Counterfeit Revocation",
        "The admin invalidates a cloned code; later scans are refused.")

    chain.call(AUTHENTICATION, "verify_authentication_code", CONFIG.code, "Market stall",
               sender=CONFIG.counterfeiter)
    chain.call(AUTHENTICATION, "invalidate_authentication_code", CONFIG.code)
    chain.call(AUTHENTICATION, "verify_authentication_code", CONFIG.code, "Market stall",
               sender=CONFIG.counterfeiter)

    for i, entry in enumerate(chain.read(AUTHENTICATION, "get_verification_log", CONFIG.code)):
        print(f"scan {i}: {short(entry.verifier)} at {entry.location} (block {entry.timestamp})")
    return chain


# ============================================================================
# PHASE 5: AUDIT (Steps 11-12)
# ============================================================================

def step_11_receipts(chain: Chain) -> Chain:
    step_header(11, "The Receipt Log",
        "Every call, accepted or rejected, is in the log in order.")

    for receipt in chain.receipts:
        mark = "✓" if receipt.accepted else "✗"
        print(f"{mark} #{receipt.sequence_number:<3} @{receipt.context.block_height:<4} "
              f"{receipt.contract}.{receipt.function}")
    return chain


def step_12_replay(chain: Chain) -> Chain:
    step_header(12, "Replay",
        "Re-executing the log on a fresh chain rebuilds the same state.")

    chain.verbose = False
    replayed = chain.replay()
    print(f"\nreplayed.state() == chain.state(): {replayed.state() == chain.state()}")

    trail = replayed.read(BATCH_TRACKING, "get_batch_history", CONFIG.batch_id)
    section_header("Custody trail (replayed)")
    for entry in trail:
        print(f"block {entry.timestamp:<4} {entry.action:<10} {short(entry.custodian)}")
    return replayed


def main():
    """Run the complete tutorial."""
    print("=" * 70)
    print("       PROVENANCE LEDGER - INTERACTIVE TUTORIAL")
    print("=" * 70)

    if QUICK_MODE:
        print("Running in QUICK mode (no pauses)")
    else:
        print("Running in INTERACTIVE mode (press Enter to advance)")

    wait_for_enter()

    chain = step_01_empty_chain()
    steps = [
        step_02_verify_manufacturer,
        step_03_results,
        step_04_register_batch,
        step_05_transfer,
        step_06_rejected_transfer,
        step_07_thresholds,
        step_08_readings,
        step_09_scan,
        step_10_revoke,
        step_11_receipts,
        step_12_replay,
    ]
    for step in steps:
        wait_for_enter()
        chain = step(chain)

    print("\n" + "=" * 70)
    print("       TUTORIAL COMPLETE!")
    print("=" * 70)
    print("""
    You've learned:

      - Guarded calls are rejected as values and leave no trace
      - Custody and scans build append-only, gap-free histories
      - Cold-chain readings are checked against a per-batch band
      - The receipt log is the source of truth: replay() proves it

    Next steps:
      - See provenance/contracts/*.py for the contract implementations
      - Run tests: pytest tests/
    """)


if __name__ == "__main__":
    main()

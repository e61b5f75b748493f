"""
Verification and report routines for the auction runner.

None of this is needed for a correct run. The runner calls ``sanity_check``
and ``check_perfect_matching`` only when ``AuctionParams.debug_checks`` is
set; the print routines are meant for interactive inspection.
"""

from ws_auction.exceptions import InvariantError


def sanity_check(ledger):
    """Raise InvariantError if the ledger's index maps are out of sync."""
    ledger.consistency_check()


def check_perfect_matching(ledger):
    """
    Raise InvariantError unless every bidder holds an item.

    Called at the end of a phase, where the phase engine promises a perfect
    matching.
    """
    for bidder_idx, item_idx in enumerate(ledger.bidders_to_items):
        if item_idx is None or not 0 <= item_idx < ledger.num_bidders:
            raise InvariantError(f"After auction terminated bidder {bidder_idx} has no items assigned")
    sanity_check(ledger)


def print_debug(runner):
    """Print the current assignment and the oracle's prices."""
    sanity_check(runner.ledger)

    print("=== Current Assignment ===")
    for bidder_idx, item_idx in enumerate(runner.ledger.bidders_to_items):
        print(f"{bidder_idx} <--> {item_idx}")

    print("=== Prices ===")
    if runner.oracle is not None:
        for item_idx, price in enumerate(runner.oracle.get_prices().tolist()):
            print(f"{item_idx:<6}: {price:.6f}")


def print_matching(runner):
    """Print every matched pair of points together with its cost."""
    sanity_check(runner.ledger)

    print("=== Matching ===")
    for bidder_idx, item_idx in enumerate(runner.ledger.bidders_to_items):
        if item_idx is None:
            raise InvariantError(f"Bidder {bidder_idx} has no item assigned")
        point_a = runner.bidders[bidder_idx].tolist()
        point_b = runner.items[item_idx].tolist()
        cost = runner.get_item_bidder_cost(item_idx, bidder_idx)
        print(f"{point_a} <-> {point_b} + {cost:.6f}")

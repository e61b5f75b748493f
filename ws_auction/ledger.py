import heapq

import torch

from ws_auction.exceptions import InvariantError


class UnassignedBidders:
    """
    Set of unassigned bidder indices.

    Insertion and removal are O(log N); ``first()`` returns the smallest index,
    which makes the bidding order of a phase deterministic. Removed indices
    stay in the heap until they surface at the top.
    """

    def __init__(self):
        self._members = set()
        self._heap = []

    def insert(self, bidder_idx):
        if bidder_idx not in self._members:
            self._members.add(bidder_idx)
            heapq.heappush(self._heap, bidder_idx)

    def erase(self, bidder_idx):
        self._members.discard(bidder_idx)

    def first(self):
        while self._heap[0] not in self._members:
            heapq.heappop(self._heap)
        return self._heap[0]

    def __contains__(self, bidder_idx):
        return bidder_idx in self._members

    def __len__(self):
        return len(self._members)

    def __iter__(self):
        return iter(sorted(self._members))


class AssignmentLedger:
    """
    Partial bijection between bidders and items.

    ``bidders_to_items[b]`` is the item held by bidder b and
    ``items_to_bidders[i]`` the bidder holding item i, None when absent.
    Between public calls the two lists mirror each other and no present
    index repeats. Together with an empty ``unassigned_bidders`` set this is
    a perfect matching.

    Attributes:
        num_bidders (int): Number of bidders, equal to the number of items
        num_rounds (int): Total number of ``assign`` calls, across all phases
    """

    def __init__(self, num_bidders):
        self.num_bidders = num_bidders
        self.bidders_to_items = [None] * num_bidders
        self.items_to_bidders = [None] * num_bidders
        self.unassigned_bidders = UnassignedBidders()
        self.num_rounds = 0

    def assign(self, item_idx, bidder_idx):
        """
        Give ``item_idx`` to ``bidder_idx``, evicting the previous holder.

        The evicted bidder, if any, loses its item and rejoins the unassigned
        set. Only unassigned bidders may bid.

        Raises:
            InvariantError: If ``bidder_idx`` already holds an item
        """
        if self.bidders_to_items[bidder_idx] is not None:
            raise InvariantError(f"Bidder {bidder_idx} already holds item {self.bidders_to_items[bidder_idx]}")

        self.num_rounds += 1
        old_owner = self.items_to_bidders[item_idx]

        self.bidders_to_items[bidder_idx] = item_idx
        self.items_to_bidders[item_idx] = bidder_idx
        self.unassigned_bidders.erase(bidder_idx)

        if old_owner is not None:
            self.bidders_to_items[old_owner] = None
            self.unassigned_bidders.insert(old_owner)

    def reset(self):
        """
        Unassign everybody at the start of a phase.

        Only valid once the previous phase ended with a perfect matching.

        Raises:
            InvariantError: If some bidder is still waiting for an item
        """
        if len(self.unassigned_bidders) > 0:
            raise InvariantError(f"Reset with {len(self.unassigned_bidders)} bidders still unassigned")

        self.bidders_to_items = [None] * self.num_bidders
        self.items_to_bidders = [None] * self.num_bidders
        for bidder_idx in range(self.num_bidders):
            self.unassigned_bidders.insert(bidder_idx)

    def is_perfect(self):
        return len(self.unassigned_bidders) == 0 and all(i is not None for i in self.bidders_to_items)

    def consistency_check(self):
        """
        Verify the partial-injection and mirror invariants.

        Raises:
            InvariantError: On the first violation found
        """
        n = self.num_bidders
        if len(self.bidders_to_items) != n or len(self.items_to_bidders) != n:
            raise InvariantError(f"Wrong size of index maps, must be {n}, are "
                                 f"{len(self.bidders_to_items)} and {len(self.items_to_bidders)}")

        seen_items = set()
        for bidder_idx, item_idx in enumerate(self.bidders_to_items):
            if item_idx is None:
                continue
            if not 0 <= item_idx < n:
                raise InvariantError(f"Bidder {bidder_idx} holds out-of-range item {item_idx}")
            if item_idx in seen_items:
                raise InvariantError(f"Item {item_idx} appears in bidders_to_items more than once")
            seen_items.add(item_idx)
            if self.items_to_bidders[item_idx] != bidder_idx:
                raise InvariantError(f"Inconsistency: bidder {bidder_idx} holds item {item_idx}, "
                                     f"but item {item_idx} is held by {self.items_to_bidders[item_idx]}")
            if bidder_idx in self.unassigned_bidders:
                raise InvariantError(f"Bidder {bidder_idx} holds item {item_idx} but is marked unassigned")

        seen_bidders = set()
        for item_idx, bidder_idx in enumerate(self.items_to_bidders):
            if bidder_idx is None:
                continue
            if not 0 <= bidder_idx < n:
                raise InvariantError(f"Item {item_idx} held by out-of-range bidder {bidder_idx}")
            if bidder_idx in seen_bidders:
                raise InvariantError(f"Bidder {bidder_idx} appears in items_to_bidders more than once")
            seen_bidders.add(bidder_idx)
            if self.bidders_to_items[bidder_idx] != item_idx:
                raise InvariantError(f"Inconsistency: item {item_idx} is held by bidder {bidder_idx}, "
                                     f"but bidder {bidder_idx} holds {self.bidders_to_items[bidder_idx]}")

    def matching(self):
        return [(b, i) for b, i in enumerate(self.bidders_to_items) if i is not None]

    def as_tensor(self, device=None):
        """
        Item index of every bidder as a long tensor, for vectorized cost evaluation.

        Raises:
            InvariantError: If the matching is not perfect
        """
        if not self.is_perfect():
            raise InvariantError("Assignment is not a perfect matching")
        return torch.tensor(self.bidders_to_items, dtype=torch.long, device=device)

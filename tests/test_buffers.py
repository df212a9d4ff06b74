"""Tests for double-buffered snapshots."""

from sar_pcp.buffers import EMPTY, Snapshot, SnapshotPair
from sar_pcp.records import PcswStats


def test_snapshot_positional_access():
    """Snapshots index records by position."""
    snap = Snapshot((PcswStats(processes=1), PcswStats(processes=2)))
    assert len(snap) == 2
    assert snap[1].processes == 2
    assert snap.get(5) is None
    assert snap.first() == PcswStats(processes=1)


def test_empty_snapshot():
    """EMPTY has no records."""
    assert EMPTY.is_empty
    assert len(EMPTY) == 0
    assert EMPTY.first() is None


class TestSnapshotPair:
    """Tests for SnapshotPair."""

    def test_new_pair_is_empty(self):
        """A new pair has neither current nor previous samples."""
        pair = SnapshotPair()
        assert len(pair) == 0
        assert not pair.has_current
        assert pair.current.is_empty
        assert pair.previous.is_empty

    def test_first_push_has_no_previous(self):
        """After the first push the previous snapshot is empty."""
        pair = SnapshotPair()
        pair.push([PcswStats(processes=10)])

        assert len(pair) == 1
        assert pair.has_current
        assert pair.current.first() == PcswStats(processes=10)
        assert pair.previous.is_empty

    def test_second_push_flips_roles(self):
        """The slot that was current becomes previous after a push."""
        pair = SnapshotPair()
        pair.push([PcswStats(processes=10)])
        first_slot = pair.curr

        pair.push([PcswStats(processes=20)])

        assert pair.curr == 1 - first_slot
        assert pair.current.first() == PcswStats(processes=20)
        assert pair.previous.first() == PcswStats(processes=10)
        assert len(pair) == 2

    def test_roles_alternate(self):
        """Each push makes the oldest sample disappear."""
        pair = SnapshotPair()
        for n in (1, 2, 3):
            pair.push([PcswStats(processes=n)])

        assert pair.current.first().processes == 3
        assert pair.previous.first().processes == 2
        assert len(pair) == 2

    def test_entity_count_can_change(self):
        """Current and previous may hold a different number of entities."""
        pair = SnapshotPair()
        pair.push([PcswStats(), PcswStats()])
        pair.push([PcswStats()])
        assert len(pair.previous) == 2
        assert len(pair.current) == 1

    def test_clear(self):
        """clear() drops both samples."""
        pair = SnapshotPair()
        pair.push([PcswStats()])
        pair.push([PcswStats()])
        pair.clear()
        assert len(pair) == 0
        assert pair.previous.is_empty

from venue_planner.core.models import Block, Hall, Rect
from venue_planner.optimization.hall_partitioner import HallPartitioner, normalise_halls


def make_block(name, rect):
    return Block(id=name, name=name, bounds=rect)


class TestHallMembership:
    def test_rectangle_hall(self):
        partitioner = HallPartitioner([Hall("h1", "Hall 1", [(1, 1), (1, 10), (10, 10), (10, 1)])])
        assert partitioner.hall_at(5, 5).id == "h1"
        assert partitioner.hall_at(15, 15) is None

    def test_undefined_halls_are_skipped(self):
        partitioner = HallPartitioner([
            Hall("draft", "Draft", [(0, 0), (0, 20), (20, 20)]),
            Hall("real", "Real", [(0, 0), (0, 20), (20, 20), (20, 0)]),
        ])
        assert partitioner.hall_at(5, 5).id == "real"

    def test_no_halls_means_no_membership(self):
        partitioner = HallPartitioner([])
        assert not partitioner.has_defined_halls
        assert partitioner.hall_at(1, 1) is None

    def test_overlap_resolves_to_first_hall(self):
        halls = [
            Hall("second", "Second", [(0, 5), (0, 20), (20, 20), (20, 5)]),
            Hall("first", "First", [(0, 0), (0, 10), (20, 10), (20, 0)]),
        ]
        assert HallPartitioner(halls).hall_at(8, 8).id == "second"
        assert HallPartitioner(list(reversed(halls))).hall_at(8, 8).id == "first"


class TestBlockAssignment:
    def test_block_uses_bounds_centroid(self, west_east_halls):
        partitioner = HallPartitioner(west_east_halls)
        # Centroid (3, 5.5) is in the west hall although the block reaches column 8
        block = make_block("A", Rect(2, 3, 4, 8))
        assert partitioner.hall_of_block(block).id == "west"

    def test_assign_blocks(self, two_block_map, west_east_halls):
        partitioner = HallPartitioner(west_east_halls)
        assert partitioner.assign_blocks(two_block_map.blocks) == {"A": "west", "B": "east"}

    def test_block_outside_every_hall(self, west_east_halls):
        partitioner = HallPartitioner(west_east_halls)
        assert partitioner.assign_blocks([make_block("Q", Rect(30, 30, 31, 31))]) == {"Q": None}

    def test_blocks_in_hall(self, two_block_map, west_east_halls):
        partitioner = HallPartitioner(west_east_halls)
        east = west_east_halls[1]
        assert [b.name for b in partitioner.blocks_in_hall(east, two_block_map.blocks)] == ["B"]


def test_outline_capped_at_six_vertices(caplog):
    hall = Hall("h", "Heptagon", [(0, 0), (0, 5), (0, 10), (5, 12), (10, 10), (10, 0), (5, -2)])
    with caplog.at_level("WARNING", logger="venue_planner"):
        [capped] = normalise_halls([hall])
    assert len(capped.vertices) == 6
    assert "keeping the first 6" in caplog.text

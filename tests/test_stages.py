"""
Unit tests for the query stages.

Each stage is exercised directly, outside of a Query.
"""

from relquery.models import Group
from relquery.stages import (
    ComposedStage,
    CrossJoinSource,
    FilterStage,
    GroupByStage,
    HavingStage,
    IdentityStage,
    OrderByStage,
    SelectStage,
    cross_join,
    group_rows,
    partition,
)


# =============================================================================
# Source Tests
# =============================================================================

class TestCrossJoinSource:

    def test_no_tables(self):
        assert CrossJoinSource([]).execute().unwrap() == []

    def test_single_table_is_not_wrapped(self):
        assert CrossJoinSource([[1, 2, 3]]).execute().unwrap() == [1, 2, 3]

    def test_single_table_is_copied(self):
        table = [1, 2]
        rows = CrossJoinSource([table]).execute().unwrap()
        assert rows == table and rows is not table

    def test_two_tables(self):
        result = CrossJoinSource([[1, 2], [4, 5]]).execute()
        assert result.is_ok()
        assert result.unwrap() == [(1, 4), (1, 5), (2, 4), (2, 5)]

    def test_cross_join_length_is_product(self):
        tables = [list(range(3)), list("ab"), list(range(5)), [None]]
        assert len(cross_join(tables)) == 3 * 2 * 5 * 1

    def test_cross_join_keeps_objects(self):
        a, b = {"id": 1}, {"id": 2}
        (pair,) = cross_join([[a], [b]])
        assert pair[0] is a and pair[1] is b

    def test_cross_join_with_empty_table(self):
        assert cross_join([[1], []]) == []


# =============================================================================
# Stage Tests
# =============================================================================

class TestFilterStage:

    def test_or_within_stage(self):
        stage = FilterStage([lambda n: n == 1, lambda n: n == 3])
        assert stage.execute([1, 2, 3]).unwrap() == [1, 3]

    def test_no_predicates_drops_everything(self):
        assert FilterStage([]).execute([1, 2, 3]).unwrap() == []

    def test_failure_is_err(self):
        result = FilterStage([lambda n: n.missing]).execute([1])
        assert result.is_err()
        assert result.error.stage == "where"
        assert isinstance(result.error.cause, AttributeError)


class TestGrouping:

    def test_partition_first_occurrence_order(self):
        groups = partition([3, 1, 2, 4, 6], lambda n: n % 3)
        assert groups == [Group(0, [3, 6]), Group(1, [1, 4]), Group(2, [2])]

    def test_group_rows_without_key_functions(self):
        assert group_rows([1, 2], []) == [1, 2]

    def test_group_rows_nests_per_function(self):
        groups = group_rows(["aa", "ab", "b", "ba"], [lambda s: s[0], len])
        assert groups == [
            Group("a", [Group(2, ["aa", "ab"])]),
            Group("b", [Group(1, ["b"]), Group(2, ["ba"])]),
        ]

    def test_mixed_hashable_and_unhashable_keys(self):
        rows = [{"k": [1]}, {"k": "x"}, {"k": [1]}, {"k": "x"}]
        groups = partition(rows, lambda r: r["k"])
        assert [g.key for g in groups] == [[1], "x"]
        assert [len(g.members) for g in groups] == [2, 2]

    def test_group_by_stage(self):
        result = GroupByStage([lambda n: n > 1]).execute([1, 2, 3])
        assert result.unwrap() == [(False, [1]), (True, [2, 3])]

    def test_group_by_stage_failure(self):
        result = GroupByStage([lambda n: n["k"]]).execute([1])
        assert result.is_err()
        assert result.error.stage == "group_by"


class TestHavingStage:

    def test_all_predicates_must_pass(self):
        groups = [Group("a", [1, 2]), Group("b", [3]), Group("c", [4, 5])]
        stage = HavingStage([lambda g: len(g.members) > 1, lambda g: g.key != "c"])
        assert stage.execute(groups).unwrap() == [Group("a", [1, 2])]

    def test_no_predicates_keeps_everything(self):
        groups = [Group("a", [1])]
        assert HavingStage([]).execute(groups).unwrap() == groups


class TestOrderByStage:

    def test_sorts_into_new_list(self):
        data = [2, 3, 1]
        result = OrderByStage(lambda a, b: a - b).execute(data).unwrap()
        assert result == [1, 2, 3]
        assert data == [2, 3, 1]

    def test_stable_for_equal_items(self):
        data = [("b", 1), ("a", 1), ("c", 0)]
        result = OrderByStage(lambda x, y: x[1] - y[1]).execute(data).unwrap()
        assert result == [("c", 0), ("b", 1), ("a", 1)]

    def test_failure_is_err(self):
        result = OrderByStage(lambda a, b: a - b).execute([1, "x"])
        assert result.is_err()
        assert isinstance(result.error.cause, TypeError)


class TestSelectStage:

    def test_maps_items(self):
        assert SelectStage(str).execute([1, 2]).unwrap() == ["1", "2"]


# =============================================================================
# Composition Tests
# =============================================================================

class TestComposition:

    def test_rshift_builds_composed_stage(self):
        chain = IdentityStage() >> FilterStage([lambda n: n > 1]) >> SelectStage(lambda n: n * 10)
        assert isinstance(chain, ComposedStage)
        assert chain.execute([1, 2, 3]).unwrap() == [20, 30]

    def test_err_short_circuits(self):
        calls = []
        chain = FilterStage([lambda n: 1 / 0]) >> SelectStage(calls.append)
        result = chain.execute([1])
        assert result.is_err()
        assert calls == []

    def test_identity_stage(self):
        data = [1]
        assert IdentityStage().execute(data).unwrap() is data

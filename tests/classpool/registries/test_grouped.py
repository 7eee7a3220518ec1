"""Composition semantics of GroupedRegistry."""

import pytest
from hypothesis import given, strategies as st

from classpool import (
    DuplicateKeyError,
    EntryNotFoundError,
    GroupedRegistry,
    KeyedRegistry,
    StringKeyedRegistry,
)


class Action:
    pass


class Sprint(Action):
    pass


class Unrelated:
    pass


def _registry(namespace, *keys, base=Action):
    return StringKeyedRegistry(base, {key: base() for key in keys}, namespace=namespace)


@pytest.fixture
def actions():
    return _registry("pkg.actions", "Jump", "Run")


@pytest.fixture
def moves():
    return _registry("pkg.moves", "Jump", "Hop")


@pytest.fixture
def tricks():
    return _registry("pkg.tricks", "Flip")


class TestAddMember:

    def test_empty_group(self):
        group = GroupedRegistry(Action)

        assert group.stored_keys() == frozenset()
        assert group.members == ()
        with pytest.raises(EntryNotFoundError):
            group.get("Jump")

    def test_disjoint_members_are_composed(self, actions, tricks):
        group = GroupedRegistry(Action)
        group.add_member(actions)
        group.add_member(tricks)

        assert group.stored_keys() == {"Jump", "Run", "Flip"}
        assert group.get("Flip") is tricks.get("Flip")
        assert group.members == (actions, tricks)
        assert group.namespaces == ("pkg.actions", "pkg.tricks")

    def test_scenario_b_collision_is_rejected_without_side_effects(self, actions, moves):
        group = GroupedRegistry(Action, actions)
        before = group.stored_keys()

        with pytest.raises(DuplicateKeyError) as exc_info:
            group.add_member(moves)

        assert exc_info.value.key == "Jump"
        assert "Jump" in str(exc_info.value)
        assert group.stored_keys() == before
        assert group.members == (actions,)
        assert "Hop" not in group

    @pytest.mark.parametrize("first_name", ["actions", "moves"])
    def test_collision_detected_in_either_order(self, request, first_name):
        first = request.getfixturevalue(first_name)
        second = request.getfixturevalue("moves" if first_name == "actions" else "actions")
        group = GroupedRegistry(Action, first)

        with pytest.raises(DuplicateKeyError):
            group.add_member(second)

    def test_collision_reports_first_key_in_sorted_order_and_all_duplicates(self):
        group = GroupedRegistry(Action, _registry("a", "Zed", "Alpha", "Mid"))

        with pytest.raises(DuplicateKeyError) as exc_info:
            group.add_member(_registry("b", "Mid", "Zed"))

        assert exc_info.value.key == "Mid"
        assert exc_info.value.duplicates == {"Mid", "Zed"}

    def test_collision_in_constructor(self, actions, moves):
        with pytest.raises(DuplicateKeyError):
            GroupedRegistry(Action, actions, moves)

    def test_member_with_subtype_base_is_accepted(self, actions):
        group = GroupedRegistry(Action, actions)
        group.add_member(_registry("pkg.sprints", "Sprint", base=Sprint))

        assert isinstance(group.get("Sprint"), Sprint)

    def test_member_with_unrelated_base_is_rejected(self, actions):
        group = GroupedRegistry(Action, actions)

        with pytest.raises(TypeError):
            group.add_member(_registry("pkg.other", "Other", base=Unrelated))

        assert group.members == (actions,)

    def test_non_registry_member_is_rejected(self):
        with pytest.raises(TypeError):
            GroupedRegistry(Action).add_member({"Jump": Action()})

    def test_group_cannot_contain_itself(self):
        group = GroupedRegistry(Action)

        with pytest.raises(ValueError):
            group.add_member(group)

    def test_group_cannot_be_built_from_namespace(self):
        with pytest.raises(TypeError):
            GroupedRegistry.from_namespace("pkg.actions", Action)


class TestLookup:

    def test_lookup_probes_members_in_insertion_order(self, actions, tricks):
        group = GroupedRegistry(Action, actions, tricks)

        assert group.get("Jump") is actions.get("Jump")
        assert group.get("Flip") is tricks.get("Flip")

    def test_scenario_c_missing_key(self, actions):
        group = GroupedRegistry(Action, actions)

        with pytest.raises(LookupError) as exc_info:
            group.get("Nonexistent")

        assert "Action" in str(exc_info.value)

    def test_stored_keys_tracks_membership_growth(self, actions, tricks):
        group = GroupedRegistry(Action, actions)
        assert group.stored_keys() == {"Jump", "Run"}

        group.add_member(tricks)

        assert group.stored_keys() == {"Jump", "Run", "Flip"}
        assert group.stored_keys() == group.stored_keys()

    def test_container_protocol(self, actions, tricks):
        group = GroupedRegistry(Action, actions, tricks)

        assert len(group) == 3
        assert "Flip" in group
        assert "Hop" not in group
        assert list(group) == ["Jump", "Run", "Flip"]
        assert dict(group.items())["Run"] is actions.get("Run")

    def test_unhashable_key_is_not_found(self, actions):
        group = GroupedRegistry(Action, actions)

        assert ["Jump"] not in group
        with pytest.raises(EntryNotFoundError):
            group.get(["Jump"])


class TestNesting:

    def test_group_is_rejected_as_member(self, actions, tricks):
        inner = GroupedRegistry(Action, actions)
        outer = GroupedRegistry(Action, tricks)

        assert isinstance(inner, KeyedRegistry)
        with pytest.raises(TypeError, match="nested"):
            outer.add_member(inner)

        assert outer.members == (tricks,)
        assert outer.stored_keys() == {"Flip"}

    def test_growing_a_group_cannot_break_another_group(self, actions, tricks):
        inner = GroupedRegistry(Action, actions)
        with pytest.raises(TypeError):
            GroupedRegistry(Action, inner, tricks)

        inner.add_member(tricks)

        assert len(inner) == len(inner.stored_keys()) == 3

    def test_mutual_membership_is_rejected(self):
        first = GroupedRegistry(Action)
        second = GroupedRegistry(Action)

        with pytest.raises(TypeError):
            second.add_member(first)
        with pytest.raises(TypeError):
            first.add_member(second)

        assert first.members == () and second.members == ()
        assert len(first) == 0
        with pytest.raises(EntryNotFoundError):
            first.get("Jump")


@given(st.lists(st.sets(st.sampled_from("ABCDEFGHIJ"), max_size=5), max_size=6))
def test_member_keys_stay_pairwise_disjoint(key_sets):
    group = GroupedRegistry(Action)
    accepted = []

    for index, keys in enumerate(key_sets):
        member = _registry(f"ns{index}", *keys)
        try:
            group.add_member(member)
        except DuplicateKeyError as e:
            assert e.duplicates <= set(keys)
            assert e.duplicates & set().union(*accepted)
        else:
            accepted.append(set(keys))

    assert len(group) == sum(len(keys) for keys in accepted)
    assert group.stored_keys() == set().union(*accepted)

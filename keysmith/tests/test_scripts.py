"""
Tests for card scripts and the script registry.

Tests:
- Registry construction and immutability
- Play, fight and after-action hooks
- Static effects (auras) and their idempotence
"""

import pytest

from ..api.service import instance_info
from ..engine_core.state import ZoneName
from ..engine_core.action import Action, ActionType
from ..engine_core.errors import InvalidTarget
from ..scripts import (
    CardScript,
    DuplicateScriptError,
    Hook,
    ScriptRegistry,
    ScriptRegistryBuilder,
    default_registry,
)


class TestRegistry:
    """Tests for building and reading the registry."""

    def test_bundled_scripts(self, registry):
        for title in [
            "Headhunter", "King of the Crag", "Little Rapscal", "Warsong",
            "Bumpsy", "Lomir Flamefist", "Urchin", "Protect the Weak",
        ]:
            assert registry.for_title(title) is not None, title

    def test_lookup_by_card(self, registry, catalog):
        assert registry.for_card(catalog.by_title("Headhunter")) is registry["headhunter"]
        assert registry.for_card(catalog.by_title("Troll")) is None

    def test_lookup_by_display_title(self, registry):
        """Display titles and script keys find the same script."""
        king = registry["king-of-the-crag"]
        assert registry.for_title("King of the Crag") is king
        assert registry.get("King of the Crag") is king
        assert registry.get("king-of-the-crag") is king
        assert registry.get("Troll") is None

    def test_default_registry_is_shared(self):
        assert default_registry() is default_registry()

    def test_duplicate_registration(self):
        builder = ScriptRegistryBuilder()
        builder.register("Troll", CardScript())
        with pytest.raises(DuplicateScriptError):
            builder.register("troll", CardScript())

    def test_decorator_registration(self):
        builder = ScriptRegistryBuilder()

        @builder.script("Troll")
        def troll() -> CardScript:
            return CardScript(power=lambda: 9)

        assert builder.build().for_title("Troll").power() == 9

    def test_registry_is_read_only(self, registry):
        with pytest.raises(TypeError):
            registry._scripts["new"] = CardScript()
        with pytest.raises(AttributeError):
            registry["headhunter"].power = None

    def test_built_registry_ignores_later_registration(self):
        builder = ScriptRegistryBuilder()
        registry = builder.build()
        builder.register("Troll", CardScript())
        assert len(registry) == 0

    def test_empty_registry_means_defaults(self, state, table):
        """Without scripts, cards use printed values only."""
        from ..engine_core.reducer import Reducer

        reducer = Reducer(registry=ScriptRegistry())
        king = table.put("p1", ZoneName.CREATURES, "King of the Crag")
        enemy = table.put("p2", ZoneName.CREATURES, "Headhunter")

        reducer.apply(state, Action.end_turn())

        assert king.power == 7
        assert enemy.power == 5


class TestPlayHooks:
    """Tests for play abilities."""

    def test_bumpsy_opponent_loses_amber(self, state, table, reducer):
        state.player_two.amber = 3
        bumpsy = table.put("p1", ZoneName.HAND, "Bumpsy")

        reducer.apply(state, Action.play_creature(bumpsy.id))

        assert state.player_two.amber == 2

    def test_bumpsy_clamps(self, state, table, reducer):
        bumpsy = table.put("p1", ZoneName.HAND, "Bumpsy")
        reducer.apply(state, Action.play_creature(bumpsy.id))
        assert state.player_two.amber == 0

    @pytest.mark.parametrize("opponent_amber,expected", [(6, 6), (7, 5), (9, 7)])
    def test_lomir_flamefist(self, state, table, reducer, opponent_amber, expected):
        state.player_two.amber = opponent_amber
        lomir = table.put("p1", ZoneName.HAND, "Lomir Flamefist")

        reducer.apply(state, Action.play_creature(lomir.id))

        assert state.player_two.amber == expected

    def test_urchin_steals(self, state, table, reducer):
        state.player_one.amber = 2
        urchin = table.put("p2", ZoneName.HAND, "Urchin")

        reducer.apply(state, Action.play_creature(urchin.id))

        assert state.player_one.amber == 1
        assert state.player_two.amber == 1


class TestFightHooks:
    """Tests for fight abilities."""

    def test_headhunter_fight_gains_amber(self, state, table, reducer):
        headhunter = table.put("p1", ZoneName.CREATURES, "Headhunter")
        target = table.put("p2", ZoneName.CREATURES, "Urchin")
        # Urchin is elusive: the fight still happens, Headhunter survives
        reducer.apply(state, Action.fight(headhunter.id, target.id))

        assert state.player_one.amber == 1

    def test_headhunter_play_does_not_gain(self, state, table, reducer):
        headhunter = table.put("p1", ZoneName.HAND, "Headhunter")

        reducer.apply(state, Action.play_creature(headhunter.id))

        assert state.player_one.amber == 0

    def test_fight_hook_skipped_when_attacker_dies(self, state, table, reducer):
        headhunter = table.put("p1", ZoneName.CREATURES, "Headhunter")
        troll = table.put("p2", ZoneName.CREATURES, "Troll")

        reducer.apply(state, Action.fight(headhunter.id, troll.id))

        assert state.player_one.discard == [headhunter]
        assert state.player_one.amber == 0


class TestStaticEffects:
    """Tests for auras."""

    def test_king_of_the_crag_weakens_enemy_brobnar(self, state, table, reducer):
        table.put("p1", ZoneName.CREATURES, "King of the Crag")
        enemy_brobnar = table.put("p2", ZoneName.CREATURES, "Headhunter")
        enemy_other = table.put("p2", ZoneName.CREATURES, "Snufflegator")
        friendly = table.put("p1", ZoneName.CREATURES, "Troll")

        reducer.recompute_static_effects(state)

        assert enemy_brobnar.power == 3
        assert enemy_other.power == 4
        assert friendly.power == 8

    def test_king_of_the_crag_does_not_stack(self, state, table, reducer):
        """Repeated actions leave exactly one -2 applied."""
        table.put("p1", ZoneName.CREATURES, "King of the Crag")
        enemy = table.put("p2", ZoneName.CREATURES, "Headhunter")

        for _ in range(5):
            reducer.apply(state, Action.alter_amber("p1", 0))
            reducer.recompute_static_effects(state)

        assert enemy.power == 3

    def test_aura_ends_when_source_leaves(self, state, table, reducer):
        king = table.put("p1", ZoneName.CREATURES, "King of the Crag")
        enemy = table.put("p2", ZoneName.CREATURES, "Headhunter")
        reducer.recompute_static_effects(state)

        reducer.apply(state, Action.discard(king.id))

        assert enemy.power == 5

    def test_weakened_creature_destroyed_by_less_damage(self, state, table, reducer):
        """A weakened creature is destroyed by damage equal to its power."""
        table.put("p1", ZoneName.CREATURES, "King of the Crag")
        enemy = table.put("p2", ZoneName.CREATURES, "Headhunter")
        attacker = table.put("p1", ZoneName.CREATURES, "Snufflegator")
        reducer.recompute_static_effects(state)

        reducer.apply(state, Action.fight(attacker.id, enemy.id))

        assert state.player_two.discard == [enemy]

    def test_little_rapscal_forces_fights(self, state, table, reducer):
        table.put("p1", ZoneName.CREATURES, "Little Rapscal")
        theirs = table.put("p2", ZoneName.CREATURES, "Troll")

        reducer.recompute_static_effects(state)
        assert theirs.must_fight

    def test_must_fight_clears_without_rapscal(self, state, table, reducer):
        rapscal = table.put("p1", ZoneName.CREATURES, "Little Rapscal")
        theirs = table.put("p2", ZoneName.CREATURES, "Troll")
        reducer.recompute_static_effects(state)

        reducer.apply(state, Action.discard(rapscal.id))

        assert not theirs.must_fight

    def test_little_rapscal_blocks_plain_use(self, state, table, reducer):
        """A creature that must fight cannot simply be exhausted while enemies are in play."""
        table.put("p1", ZoneName.CREATURES, "Little Rapscal")
        troll = table.put("p2", ZoneName.CREATURES, "Troll")
        reducer.recompute_static_effects(state)

        with pytest.raises(InvalidTarget):
            reducer.apply(state, Action.of(ActionType.USE_CREATURE, card_id=troll.id))

        assert troll.ready
        assert instance_info(troll).must_fight

    def test_must_fight_creature_can_still_fight(self, state, table, reducer):
        rapscal = table.put("p1", ZoneName.CREATURES, "Little Rapscal")
        troll = table.put("p2", ZoneName.CREATURES, "Troll")
        reducer.recompute_static_effects(state)

        reducer.apply(state, Action.fight(troll.id, rapscal.id))

        assert not troll.ready

    def test_must_fight_without_enemies_is_plain_use(self, state, table, reducer):
        rapscal = table.put("p1", ZoneName.CREATURES, "Little Rapscal")
        reducer.recompute_static_effects(state)

        reducer.apply(state, Action.of(ActionType.USE_CREATURE, card_id=rapscal.id))

        assert not rapscal.ready

    def test_script_keyword_predicate(self, state, table, reducer):
        """Keyword flags are rebuilt by the static pass."""
        rapscal = table.put("p1", ZoneName.CREATURES, "Little Rapscal")
        rapscal.elusive = False
        reducer.recompute_static_effects(state)
        assert rapscal.elusive

    def test_recompute_is_idempotent(self, state, table, reducer):
        table.put("p1", ZoneName.CREATURES, "King of the Crag")
        table.put("p1", ZoneName.CREATURES, "Little Rapscal")
        enemy = table.put("p2", ZoneName.CREATURES, "Bumpsy")
        host = table.put("p2", ZoneName.CREATURES, "Snufflegator")
        table.attach(host, "Protect the Weak")

        reducer.recompute_static_effects(state)
        first = (enemy.power, enemy.must_fight, host.armor, host.has_taunt)
        reducer.recompute_static_effects(state)
        second = (enemy.power, enemy.must_fight, host.armor, host.has_taunt)

        assert first == second == (3, True, 1, True)


class TestTurnEffects:
    """Tests for lingering after-action hooks."""

    def _setup_fight(self, state, table):
        warsong = table.put("p1", ZoneName.HAND, "Warsong")
        first = table.put("p1", ZoneName.CREATURES, "Troll")
        second = table.put("p1", ZoneName.CREATURES, "Bumpsy")
        target = table.put("p2", ZoneName.CREATURES, "Snufflegator")
        return warsong, first, second, target

    def test_warsong_rewards_each_friendly_fight(self, state, table, reducer):
        warsong, first, second, target = self._setup_fight(state, table)
        other_target = table.put("p2", ZoneName.CREATURES, "Urchin")

        reducer.apply(state, Action.play_action(warsong.id))
        assert state.player_one.amber == 0
        assert [e.card for e in state.turn_effects] == [warsong]

        reducer.apply(state, Action.fight(first.id, target.id))
        assert state.player_one.amber == 1

        reducer.apply(state, Action.fight(second.id, other_target.id))
        assert state.player_one.amber == 2

    def test_warsong_ignores_enemy_fights(self, state, table, reducer):
        warsong, _, _, target = self._setup_fight(state, table)
        victim = table.put("p1", ZoneName.CREATURES, "Urchin")

        reducer.apply(state, Action.play_action(warsong.id))
        reducer.apply(state, Action.fight(target.id, victim.id))

        assert state.player_one.amber == 0

    def test_warsong_ends_with_turn(self, state, table, reducer):
        warsong, first, _, target = self._setup_fight(state, table)

        reducer.apply(state, Action.play_action(warsong.id))
        reducer.apply(state, Action.end_turn())
        assert state.turn_effects == []

        reducer.apply(state, Action.fight(first.id, target.id))
        assert state.player_one.amber == 0

    def test_warsong_counts_fight_that_destroys_attacker(self, state, table, reducer):
        warsong = table.put("p1", ZoneName.HAND, "Warsong")
        attacker = table.put("p1", ZoneName.CREATURES, "Urchin")
        defender = table.put("p2", ZoneName.CREATURES, "Troll")

        reducer.apply(state, Action.play_action(warsong.id))
        reducer.apply(state, Action.fight(attacker.id, defender.id))

        assert state.player_one.discard[-1] is attacker
        assert state.player_one.amber == 1

    def test_other_actions_do_not_trigger(self, state, table, reducer):
        warsong, _, _, _ = self._setup_fight(state, table)

        reducer.apply(state, Action.play_action(warsong.id))
        reducer.apply(state, Action.alter_chains("p1", 1))
        reducer.apply(state, Action.of(ActionType.DRAW_CARD, player_id="p1"))

        assert state.player_one.amber == 0

    def test_custom_after_action_hook(self, state, table):
        """After-action hooks see every later action, not the one that registered them."""
        from ..engine_core.reducer import Reducer

        seen = []
        builder = ScriptRegistryBuilder()
        builder.register("Anger", CardScript(
            run_after_any_action_this_turn=Hook(lambda state, ctx: seen.append(ctx.action.type_name)),
        ))
        reducer = Reducer(registry=builder.build())
        anger = table.put("p1", ZoneName.HAND, "Anger")

        reducer.apply(state, Action.play_action(anger.id))
        reducer.apply(state, Action.alter_amber("p1", 1))
        reducer.apply(state, Action.end_turn())
        reducer.apply(state, Action.alter_amber("p1", 1))

        assert seen == ["AlterPlayerAmber"]

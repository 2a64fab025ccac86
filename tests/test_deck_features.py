import pytest

from deck_features import (
    FeatureProfile, analyze_card_types, analyze_deck_consistency,
    build_feature_profile, compute_mana_curve, get_color_identity,
)


class TestManaCurve:
    def test_buckets_and_average(self, card, land):
        cards = [
            land(), land(),
            card("Bear", 2, "Creature — Bear"),
            card("Elf", 1, "Creature — Elf"),
            card("Shock", 1, "Instant"),
            card("Big Spell", 9, "Sorcery"),
        ]
        curve = compute_mana_curve(cards)

        assert curve.distribution == {0: 2, 1: 2, 2: 1, 3: 0, 4: 0, 5: 0, 6: 0, 7: 1}
        assert curve.creature_count == 2
        assert curve.noncreature_count == 2
        assert curve.land_count == 2
        # (2 + 1 + 1 + 9) / 4 non-land cards
        assert curve.average_mana_value == 3.25

    def test_distribution_sums_to_deck_size(self, card, land):
        cards = [land()] * 20 + [card(f"Spell {i}", i % 9, "Sorcery") for i in range(40)]
        curve = compute_mana_curve(cards)
        assert sum(curve.distribution.values()) == len(cards)

    def test_lands_only_has_zero_average(self, land):
        curve = compute_mana_curve([land()] * 5)
        assert curve.average_mana_value == 0.0
        assert curve.distribution[0] == 5

    def test_empty_deck(self):
        curve = compute_mana_curve([])
        assert curve.average_mana_value == 0.0
        assert sum(curve.distribution.values()) == 0


class TestColorIdentity:
    def test_wubrg_order_and_counts(self, card):
        cards = [
            card("Izzet Charm", 2, "Instant", color_identity=("U", "R")),
            card("Shock", 1, "Instant", color_identity=("R",)),
        ]
        identity = get_color_identity(cards)
        assert identity.colors == ["U", "R"]
        assert identity.counts["R"] == 2
        assert identity.counts["U"] == 1
        assert identity.counts["G"] == 0

    def test_colorless_deck_has_no_colors(self, card, land):
        identity = get_color_identity([land(), card("Golem", 3, "Artifact Creature — Golem")])
        assert identity.colors == []


def test_card_types_count_every_matching_category(card):
    counts = analyze_card_types([
        card("Golem", 3, "Artifact Creature — Golem"),
        card("Shock", 1, "Instant"),
    ])
    assert counts["artifact"] == 1
    assert counts["creature"] == 1
    assert counts["instant"] == 1
    assert counts["land"] == 0


class TestConsistency:
    def test_histogram_and_score(self, card):
        cards = ([card("A")] * 4 + [card("B")] * 3 + [card("C")] * 2 + [card("D")])
        stats = analyze_deck_consistency(cards)

        assert stats.unique_cards == 4
        assert stats.total_cards == 10
        assert stats.multiples == {"4+": 1, "3": 1, "2": 1, "1": 1}
        # round(100 * (4 + 3 + 2) / 10)
        assert stats.score == 90

    def test_all_playsets_scores_100(self, card):
        cards = [card(f"Card {i}") for i in range(15) for _ in range(4)]
        assert analyze_deck_consistency(cards).score == 100

    def test_singletons_score_zero(self, card):
        cards = [card(f"Card {i}") for i in range(30)]
        assert analyze_deck_consistency(cards).score == 0

    def test_more_than_four_copies_go_in_top_bucket(self, land):
        stats = analyze_deck_consistency([land()] * 20)
        assert stats.multiples["4+"] == 1
        assert 0 <= stats.score <= 100


class TestFeatureProfile:
    def test_empty_profile_is_zero_valued(self):
        profile = FeatureProfile.empty()
        assert profile.total_cards == 0
        assert profile.colors.colors == []
        assert profile.synergies == []
        assert profile.curve.average_mana_value == 0.0

    def test_empty_deck_builds_the_empty_profile(self):
        profile = build_feature_profile([])
        assert profile == FeatureProfile.empty()
        assert profile.manabase.quality_score == 0

    def test_build_is_repeatable(self, card, land):
        cards = [land()] * 10 + [card("Goblin", 1, "Creature — Goblin", "Haste", ("R",), "{R}")] * 4
        assert build_feature_profile(cards) == build_feature_profile(cards)

    @pytest.mark.parametrize("size", [0, 1, 60])
    def test_scores_stay_in_range(self, card, land, size):
        cards = ([land()] * size) + [card("Spell", 2, "Sorcery")] * size
        profile = build_feature_profile(cards)
        assert 0 <= profile.consistency.score <= 100
        assert 0 <= profile.manabase.quality_score <= 100

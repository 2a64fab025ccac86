import json
import os
import threading
from unittest.mock import patch

import pytest

from archetype_learner import (
    FEATURE_NAMES, ArchetypeLearner, ClusterModel, ClusterStore,
    ModelPersistenceError, build_feature_vector,
)
from deck_features import FeatureProfile, build_feature_profile
from matchups import ReferenceDeck


class TestFeatureVector:
    def test_layout(self):
        assert len(FEATURE_NAMES) == 19
        assert FEATURE_NAMES[:5] == ["color_W", "color_U", "color_B", "color_R", "color_G"]

    def test_vector_for_deck(self, card, land):
        cards = [land()] * 2 + [card("Prowler", 2, "Creature — Cat", "Prowess", ("R",))] * 3
        vector = build_feature_vector(build_feature_profile(cards))

        assert len(vector) == len(FEATURE_NAMES)
        assert vector[:5] == [0.0, 0.0, 0.0, 1.0, 0.0]
        # curve buckets 0 and 2
        assert vector[5] == 2.0
        assert vector[7] == 3.0


class TestClusterModel:
    def test_nearest_centroid(self):
        model = ClusterModel(k=2, centroids=[[0.0] * 19, [10.0] * 19])
        assert model.nearest([1.0] * 19) == 0
        assert model.nearest([9.0] * 19) == 1

    def test_ties_go_to_lowest_index(self):
        model = ClusterModel(k=2, centroids=[[1.0] * 19, [-1.0] * 19])
        assert model.nearest([0.0] * 19) == 0

    def test_dict_round_trip(self):
        model = ClusterModel(k=1, centroids=[[0.5] * 19])
        assert ClusterModel.from_dict(model.to_dict()) == model


class TestClusterStore:
    def test_missing_file(self, model_path):
        assert ClusterStore(model_path).load() is None

    def test_save_and_load(self, model_path):
        store = ClusterStore(model_path)
        model = ClusterModel(k=1, centroids=[[1.0] * 19])
        store.save(model)

        assert json.loads(model_path.read_text())["k"] == 1
        assert store.load() == model
        # no temporary files left behind
        assert os.listdir(model_path.parent) == [model_path.name]

    def test_corrupt_file_is_ignored(self, model_path):
        model_path.write_text("{not json")
        assert ClusterStore(model_path).load() is None

    def test_other_feature_layout_is_ignored(self, model_path):
        model_path.write_text(json.dumps({"k": 1, "centroids": [[0.0] * 17], "features": ["x"] * 17}))
        assert ClusterStore(model_path).load() is None

    def test_malformed_centroids_are_ignored(self, model_path):
        model_path.write_text(json.dumps({"k": 1, "centroids": [[0.0] * 3]}))
        assert ClusterStore(model_path).load() is None

    def test_failed_write_keeps_old_model(self, model_path):
        store = ClusterStore(model_path)
        old = ClusterModel(k=1, centroids=[[1.0] * 19])
        store.save(old)

        with patch("archetype_learner.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(ModelPersistenceError):
                store.save(ClusterModel(k=1, centroids=[[2.0] * 19]))

        assert store.load() == old
        assert os.listdir(model_path.parent) == [model_path.name]


class TestArchetypeLearner:
    def test_classify_without_model(self, analyzer):
        assert analyzer.classify_deck(["Lightning Bolt"]) == {"cluster": "Unknown"}

    def test_k_reduced_to_number_of_decks(self, analyzer, model_path):
        model = analyzer.learn_clusters()

        assert model.k == 3
        assert len(model.centroids) == 3
        assert all(len(centroid) == 19 for centroid in model.centroids)
        assert json.loads(model_path.read_text())["k"] == 3

    def test_classify_after_learning(self, analyzer):
        analyzer.learn_clusters()
        result = analyzer.classify_deck(["Play with Fire", "Kumano Faces Kakkazan", "Furnace Punisher"])
        assert result["cluster"] in {0, 1, 2}

    def test_model_is_reloaded_from_disk(self, analyzer, resolver, model_path):
        analyzer.learn_clusters()
        fresh = ArchetypeLearner(ClusterStore(model_path), profile_builder=lambda names: None)
        profile = build_feature_profile(resolver.resolve_many(["Sunfall", "Memory Deluge"]))

        assert fresh.classify_profile(profile) == analyzer.learner.classify_profile(profile)

    def test_unresolvable_decks_are_skipped(self, analyzer):
        model = analyzer.learn_clusters([
            ReferenceDeck("Ghost Deck", ("Not A Real Card",)),
            ReferenceDeck("Red", ("Lightning Bolt", "Monastery Swiftspear")),
        ])
        assert model.k == 1

    def test_nothing_usable_leaves_model_alone(self, analyzer, model_path):
        assert analyzer.learn_clusters([ReferenceDeck("Ghost Deck", ("Not A Real Card",))]) is None
        assert not model_path.exists()
        assert analyzer.classify_deck(["Lightning Bolt"]) == {"cluster": "Unknown"}


class TestConcurrentLearning:
    DECKS = [ReferenceDeck("Red", ("Goblin Guide",)), ReferenceDeck("Blue", ("Opt",))]

    def slow_learner(self, model_path, card, entered, release, calls):
        """A learner whose first profile build blocks until released."""
        colors = {"Goblin Guide": ("R",), "Opt": ("U",)}

        def builder(names):
            calls.append(names[0])
            if len(calls) == 1:
                entered.set()
                release.wait(timeout=5)
            return build_feature_profile([card(names[0], 1, "Creature", "", colors[names[0]])])

        return ArchetypeLearner(ClusterStore(model_path), profile_builder=builder)

    def test_learning_runs_do_not_overlap(self, model_path, card):
        entered, release, calls = threading.Event(), threading.Event(), []
        learner = self.slow_learner(model_path, card, entered, release, calls)

        first = threading.Thread(target=learner.learn_clusters, args=(self.DECKS,))
        second = threading.Thread(target=learner.learn_clusters, args=(self.DECKS,))
        first.start()
        assert entered.wait(timeout=5)
        second.start()
        second.join(timeout=0.2)

        # the second run waits for the first one to finish
        assert second.is_alive()
        assert calls == ["Goblin Guide"]
        assert learner.classify_profile(FeatureProfile.empty()) == "Unknown"

        release.set()
        first.join(timeout=5)
        second.join(timeout=5)

        assert calls == ["Goblin Guide", "Opt", "Goblin Guide", "Opt"]
        assert learner.current_model().k == 2
        assert learner.classify_profile(FeatureProfile.empty()) in {0, 1}

    def test_classification_during_learning_sees_a_whole_model(self, model_path, card):
        entered, release, calls = threading.Event(), threading.Event(), []
        learner = self.slow_learner(model_path, card, entered, release, calls)
        old = ClusterModel(k=1, centroids=[[0.0] * 19])
        learner.store.save(old)

        worker = threading.Thread(target=learner.learn_clusters, args=(self.DECKS,))
        worker.start()
        assert entered.wait(timeout=5)

        assert learner.classify_profile(FeatureProfile.empty()) == 0
        assert learner.current_model() == old

        release.set()
        worker.join(timeout=5)
        assert learner.current_model().k == 2
        assert learner.store.load() == learner.current_model()

    def test_failed_save_keeps_model_in_memory(self, analyzer):
        old = analyzer.learn_clusters()
        learner = analyzer.learner

        with patch.object(learner.store, "save", side_effect=ModelPersistenceError("disk full")):
            with pytest.raises(ModelPersistenceError):
                learner.learn_clusters([ReferenceDeck("Red", ("Lightning Bolt",))])

        assert learner.current_model() is old
        # the lock was released
        assert learner.learn_clusters([ReferenceDeck("Red", ("Lightning Bolt",))]).k == 1

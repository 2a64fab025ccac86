"""
MTG Deck Archetype Analyzer - Archetype Clustering
==================================================

Learns archetypes without labels: every reference deck becomes a numeric
feature vector, k-means groups the vectors, and the cluster centroids are
saved to disk. New decks are labeled with the index of the closest
centroid.

Feature vector layout (19 numbers, fixed):
    5 color flags (W, U, B, R, G)
    8 mana curve bucket counts (0..7+)
    6 synergy flags (CLUSTER_SYNERGY_VOCABULARY order)

The layout is saved with the model. A model saved with a different layout
is treated as missing rather than compared against the wrong numbers.

Concurrency: learning runs are serialized with a lock, the model file is
replaced atomically, and the in-memory model is only swapped once the new
file is fully written. Classification never sees a half-written model.
"""

import json
import os
import tempfile
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Union

import numpy as np
from sklearn.cluster import KMeans

from config import (
    CLUSTER_COUNT, CLUSTER_MODEL_PATH, CLUSTER_N_INIT, CLUSTER_RANDOM_STATE,
    CLUSTER_SYNERGY_VOCABULARY, CLUSTER_UNKNOWN, COLOR_ORDER,
    MANA_CURVE_MAX_BUCKET,
)
from deck_features import FeatureProfile
from matchups import ReferenceDeck


class ModelPersistenceError(RuntimeError):
    """Raised when a learned model couldn't be written to disk."""


FEATURE_NAMES = (
    [f"color_{color}" for color in COLOR_ORDER]
    + [f"curve_{bucket}" for bucket in range(MANA_CURVE_MAX_BUCKET + 1)]
    + [f"synergy_{tag}" for tag in CLUSTER_SYNERGY_VOCABULARY]
)


def build_feature_vector(profile: FeatureProfile) -> List[float]:
    """Flatten a profile into the fixed-length clustering vector."""
    colors = [1.0 if color in profile.colors.colors else 0.0 for color in COLOR_ORDER]
    curve = [float(profile.curve.distribution.get(bucket, 0))
             for bucket in range(MANA_CURVE_MAX_BUCKET + 1)]
    synergies = [1.0 if tag in profile.synergies else 0.0 for tag in CLUSTER_SYNERGY_VOCABULARY]
    return colors + curve + synergies


@dataclass
class ClusterModel:
    k: int
    centroids: List[List[float]]
    features: List[str] = field(default_factory=lambda: list(FEATURE_NAMES))

    def nearest(self, vector: Sequence[float]) -> int:
        """Index of the closest centroid (Euclidean); ties go to the lowest index."""
        centroids = np.asarray(self.centroids, dtype=float)
        distances = np.linalg.norm(centroids - np.asarray(vector, dtype=float), axis=1)
        return int(np.argmin(distances))

    def to_dict(self) -> dict:
        return {"k": self.k, "centroids": self.centroids, "features": self.features}

    @classmethod
    def from_dict(cls, data: dict) -> "ClusterModel":
        return cls(
            k=int(data["k"]),
            centroids=[[float(value) for value in centroid] for centroid in data["centroids"]],
            features=list(data.get("features") or FEATURE_NAMES),
        )


class ClusterStore:
    """
    A single JSON file holding the learned model.

    save() writes a temporary file next to the target and renames it over
    the old one, so readers only ever see a complete file.
    """

    def __init__(self, path: Union[str, os.PathLike] = CLUSTER_MODEL_PATH):
        self.path = os.fspath(path)

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def load(self) -> Optional[ClusterModel]:
        """Read the saved model, or None if there isn't a usable one."""
        if not self.exists():
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                model = ClusterModel.from_dict(json.load(f))
        except (OSError, ValueError, KeyError, TypeError) as e:
            print(f"  ⚠️  Couldn't read archetype model '{self.path}': {e}")
            return None

        if model.features != FEATURE_NAMES:
            print(f"  ⚠️  Archetype model '{self.path}' uses a different feature layout - ignoring it")
            return None
        if not model.centroids or any(len(c) != len(FEATURE_NAMES) for c in model.centroids):
            print(f"  ⚠️  Archetype model '{self.path}' has malformed centroids - ignoring it")
            return None

        return model

    def save(self, model: ClusterModel):
        """Atomically replace the saved model."""
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=directory, suffix=".tmp", delete=False
            ) as tmp:
                tmp_path = tmp.name
                json.dump(model.to_dict(), tmp, indent=2)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise ModelPersistenceError(f"Couldn't write archetype model '{self.path}': {e}") from e


class ArchetypeLearner:
    """
    Learns archetype clusters from reference decks and labels new decks.

    Args:
        store: Where the model lives on disk
        profile_builder: Turns a list of card names into a FeatureProfile,
            or None when none of the cards could be resolved
        n_clusters: Number of clusters to learn (reduced when there are
            fewer usable decks)
    """

    def __init__(self, store: ClusterStore,
                 profile_builder: Callable[[Sequence[str]], Optional[FeatureProfile]],
                 n_clusters: int = CLUSTER_COUNT):
        self.store = store
        self.profile_builder = profile_builder
        self.n_clusters = n_clusters

        self._model: Optional[ClusterModel] = None
        self._learn_lock = threading.Lock()
        self._load_lock = threading.Lock()

    def learn_clusters(self, reference_decks: Sequence[ReferenceDeck]) -> Optional[ClusterModel]:
        """
        Learn centroids from reference decks and save them.

        Decks whose cards can't be resolved are skipped. Returns the new
        model, or None (and leaves the old model alone) when no deck was
        usable.

        Raises:
            ModelPersistenceError: the model couldn't be saved
        """
        with self._learn_lock:
            vectors = []
            for deck in reference_decks:
                profile = self.profile_builder(list(deck.key_cards))
                if profile is None:
                    print(f"  ⚠️  Skipping reference deck '{deck.name}': no cards could be resolved")
                    continue
                vectors.append(build_feature_vector(profile))

            if not vectors:
                print("  ⚠️  No usable reference decks - archetype model unchanged")
                return None

            k = min(self.n_clusters, len(vectors))
            print(f"  🧠 Learning {k} archetype cluster(s) from {len(vectors)} deck(s)...")

            kmeans = KMeans(n_clusters=k, random_state=CLUSTER_RANDOM_STATE, n_init=CLUSTER_N_INIT)
            kmeans.fit(np.asarray(vectors, dtype=float))

            model = ClusterModel(
                k=k,
                centroids=[[round(float(value), 6) for value in centroid]
                           for centroid in kmeans.cluster_centers_],
            )

            self.store.save(model)
            self._model = model
            print(f"  ✅ Saved archetype model to {self.store.path}")
            return model

    def current_model(self) -> Optional[ClusterModel]:
        """The model in memory, loading it from disk on first use."""
        if self._model is None:
            with self._load_lock:
                if self._model is None:
                    self._model = self.store.load()
        return self._model

    def classify_profile(self, profile: FeatureProfile) -> Union[int, str]:
        """Nearest cluster index for a profile, or "Unknown" without a model."""
        model = self.current_model()
        if model is None:
            return CLUSTER_UNKNOWN
        return model.nearest(build_feature_vector(profile))

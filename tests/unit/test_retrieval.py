"""Unit tests for inverted-index candidate retrieval."""

from src.matching.normalize import normalize_query
from src.matching.retrieval import CandidateRetriever
from src.matching.substitutions import DEFAULT_GRAPH


class TestCandidateRetriever:
    """Test CandidateRetriever index and retrieval."""

    def test_vocabulary_skips_empty_recipes(self, sample_recipes):
        """Test that recipes without ingredients are never indexed."""
        retriever = CandidateRetriever(sample_recipes)
        assert len(retriever) == len(sample_recipes)
        assert "tomato" in retriever.vocabulary
        assert "cherry tomatoes" in retriever.vocabulary
        assert all(key for key in retriever.vocabulary)

    def test_retrieve_literal_overlap(self, sample_recipes):
        """Test retrieval by a key present in several recipes, in catalog order."""
        retriever = CandidateRetriever(sample_recipes)
        titles = [recipe.title for recipe in retriever.retrieve({"garlic"})]
        assert titles == ["Tomato Soup", "Garlic Bread"]

    def test_recipe_ids_for(self, sample_recipes):
        """Test posting list lookup."""
        retriever = CandidateRetriever(sample_recipes)
        assert retriever.recipe_ids_for("rice") == ["2", "5"]
        assert retriever.recipe_ids_for("saffron") == []

    def test_retrieve_no_duplicates(self, sample_recipes):
        """Test that a recipe matching several keys is returned once."""
        retriever = CandidateRetriever(sample_recipes)
        results = retriever.retrieve({"tomato", "onion", "garlic"})
        assert [recipe.id for recipe in results] == ["1", "3"]

    def test_retrieve_unknown_keys(self, sample_recipes):
        """Test that unknown keys retrieve nothing."""
        retriever = CandidateRetriever(sample_recipes)
        assert retriever.retrieve({"saffron"}) == []
        assert retriever.retrieve(set()) == []

    def test_synonym_expansion_reaches_scallion(self, sample_recipes):
        """Test that "spring onion" retrieves a recipe listing only "scallion"."""
        retriever = CandidateRetriever(sample_recipes)
        assert retriever.retrieve(normalize_query(["spring onion"])) == []

        expanded = DEFAULT_GRAPH.expand_all(normalize_query(["spring onion"]))
        assert [recipe.title for recipe in retriever.retrieve(expanded)] == ["Scallion Fried Rice"]

    def test_partial_keys(self, sample_recipes):
        """Test substring keys in both directions."""
        retriever = CandidateRetriever(sample_recipes)
        assert retriever.partial_keys(["tomat"]) == {"tomato", "cherry tomatoes"}
        assert retriever.partial_keys(["brown rice"]) == {"rice"}
        assert retriever.partial_keys([""]) == set()

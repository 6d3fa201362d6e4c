from unittest import TestCase

from research_collector.models import NO_TRENDS
from research_collector.response_interpreter import fallback_query, interpret

NOTE = "Graph neural networks improve molecular property prediction across chemistry benchmarks"


class TestStructuredResponse(TestCase):
    def test_json_block_surrounded_by_prose(self):
        raw = """Sure! Here is my analysis:
        {
          "topics": ["GNNs", "Molecules"],
          "queries": ["graph neural networks", "molecular property prediction"],
          "trends": "Growing use of message passing."
        }
        Let me know if you need anything else."""

        result = interpret(raw, NOTE)

        self.assertEqual(result.topics, ["GNNs", "Molecules"])
        self.assertEqual(result.queries, ["graph neural networks", "molecular property prediction"])
        self.assertEqual(result.trends, "Growing use of message passing.")

    def test_missing_keys_are_defaulted(self):
        result = interpret('{"queries": ["protein folding"]}', NOTE)

        self.assertEqual(result.topics, [])
        self.assertEqual(result.queries, ["protein folding"])
        self.assertEqual(result.trends, NO_TRENDS)

    def test_lists_are_truncated_to_five(self):
        raw = '{"topics": ["a1", "a2", "a3", "a4", "a5", "a6"], "queries": ["q1", "q2", "q3", "q4", "q5", "q6", "q7"], "trends": "t"}'

        result = interpret(raw, NOTE)

        self.assertEqual(result.topics, ["a1", "a2", "a3", "a4", "a5"])
        self.assertEqual(result.queries, ["q1", "q2", "q3", "q4", "q5"])

    def test_invalid_json_falls_back_to_heuristics(self):
        raw = """{not valid json}
        Queries:
        1. deep learning for proteins
        """

        result = interpret(raw, NOTE)

        self.assertEqual(result.queries, ["deep learning for proteins"])

    def test_json_with_wrong_shape_falls_back(self):
        raw = '{"topics": "just a string", "queries": "also a string"}'

        result = interpret(raw, NOTE)

        # No section headers in the text, so the note supplies the query.
        self.assertEqual(len(result.queries), 1)
        self.assertTrue(result.queries[0].startswith("Graph neural networks"))


class TestHeuristicResponse(TestCase):
    def test_sections_and_bullets(self):
        raw = """Main research topics:
        - Graph neural networks
        * Drug discovery
        • AI
        Suggested search queries:
        1. graph neural networks molecules
        2) GNN drug discovery benchmark
        3. ab
        Trends and connections:
        Message passing is converging with transformers.
        Benchmarks are getting larger."""

        result = interpret(raw, NOTE)

        # "AI" and "ab" are too short to keep
        self.assertEqual(result.topics, ["Graph neural networks", "Drug discovery"])
        self.assertEqual(
            result.queries,
            ["graph neural networks molecules", "GNN drug discovery benchmark"],
        )
        self.assertIn("Message passing is converging with transformers.", result.trends)
        self.assertIn("Benchmarks are getting larger.", result.trends)

    def test_topics_seeded_from_first_three_queries(self):
        raw = """Queries:
        - query one here
        - query two here
        - query three here
        - query four here"""

        result = interpret(raw, NOTE)

        self.assertEqual(result.topics, ["query one here", "query two here", "query three here"])
        self.assertEqual(len(result.queries), 4)

    def test_plain_prose_uses_note_words_and_raw_trends(self):
        raw = "I could not determine anything useful from this note."

        result = interpret(raw, NOTE)

        self.assertEqual(
            result.queries,
            ["Graph neural networks improve molecular property prediction across chemistry benchmarks"],
        )
        self.assertEqual(result.topics, result.queries)
        self.assertEqual(result.trends, raw)

    def test_trends_fallback_is_limited_to_500_chars(self):
        raw = "x" * 800

        result = interpret(raw, NOTE)

        self.assertEqual(len(result.trends), 500)

    def test_no_long_words_means_no_queries(self):
        result = interpret("nothing here", "a bb ccc dddd")

        self.assertEqual(result.queries, [])
        self.assertEqual(result.topics, [])

    def test_empty_response_never_raises(self):
        result = interpret("", NOTE)

        self.assertEqual(len(result.queries), 1)
        self.assertEqual(result.trends, "")

    def test_truncates_heuristic_lists(self):
        lines = ["Topics:"] + [f"- topic number {i}" for i in range(8)]
        result = interpret("\n".join(lines), NOTE)

        self.assertEqual(len(result.topics), 5)
        self.assertEqual(result.topics[0], "topic number 0")


class TestFallbackQuery(TestCase):
    def test_uses_first_ten_long_words(self):
        note = " ".join(f"keyword{i}" for i in range(60))

        query = fallback_query(note)

        self.assertEqual(query.split(), [f"keyword{i}" for i in range(10)])

    def test_skips_short_words(self):
        self.assertEqual(fallback_query("the cat sat beside a window"), "beside window")

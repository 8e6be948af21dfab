import pytest

from answer_judge.evaluation.text import (
    analyze_structure,
    contains_keyword,
    extract_keywords,
    has_definition_pattern,
    has_flow_indicators,
    normalize,
    normalize_compact,
    simple_stem,
    split_sentences,
    word_count,
    words,
)


class TestNormalization:
    def test_normalize_replaces_punctuation_with_spaces(self):
        assert normalize("Hello,   World!  It's") == "hello world it s"

    def test_normalize_compact_deletes_punctuation(self):
        assert normalize_compact("Don't  stop!") == "dont  stop"

    def test_empty_input(self):
        assert normalize("") == ""
        assert normalize_compact("!!!") == ""

    def test_words_drop_empties(self):
        assert words("  Machine-learning, data!  ") == ["machine", "learning", "data"]

    def test_word_count_uses_whitespace(self):
        assert word_count("one two  three") == 3
        assert word_count("") == 0


class TestExtractKeywords:
    def test_filters_short_and_stop_words(self):
        assert extract_keywords("The cat could learn from data") == ["learn", "from", "data"]

    def test_deduplicates_in_order(self):
        assert extract_keywords("data model data MODEL") == ["data", "model"]

    def test_no_keywords(self):
        assert extract_keywords("a is to be") == []


class TestSimpleStem:
    @pytest.mark.parametrize(
        ("word", "stem"),
        [("learning", "learn"), ("trained", "train"), ("models", "model"), ("data", "data")],
    )
    def test_strips_one_suffix(self, word, stem):
        assert simple_stem(word) == stem

    def test_strips_only_one_suffix(self):
        assert simple_stem("beings") == "being"


class TestContainsKeyword:
    def test_direct_substring(self):
        assert contains_keyword("Computers learn from data", "data")

    def test_stem_match(self):
        assert contains_keyword("we train a model", "training")

    def test_haystack_inside_needle(self):
        assert contains_keyword("learn", "learning")

    def test_no_match(self):
        assert not contains_keyword("completely unrelated", "algorithm")

    def test_empty_inputs(self):
        assert not contains_keyword("", "data")
        assert not contains_keyword("data", "  ")


class TestStructure:
    def test_split_sentences(self):
        assert split_sentences("One. Two!! Three?") == ["One", "Two", "Three"]

    def test_flow_indicators_are_whole_words(self):
        assert has_flow_indicators("First, gather data")
        assert not has_flow_indicators("firstly-ish")

    def test_definition_pattern(self):
        assert has_definition_pattern("Machine learning is a field")
        assert has_definition_pattern("It means learning")
        assert not has_definition_pattern("Computers learn")

    def test_analyze_structure(self):
        profile = analyze_structure("AI is smart. It learns quickly.")
        assert profile.sentences == 2
        assert profile.avg_sentence_length == 3.0
        assert profile.has_definitions
        assert not profile.has_flow_indicators

    def test_analyze_empty(self):
        profile = analyze_structure("")
        assert profile.sentences == 0
        assert profile.avg_sentence_length == 0.0

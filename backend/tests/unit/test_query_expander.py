"""Unit tests for the QueryExpander."""

from task_search.application.services.lexicon import Lexicon, LexiconSnapshot
from task_search.application.services.query_expander import QueryExpander
from task_search.application.services.text_normalizer import normalize
from task_search.domain.entities import SearchConfig, VariantKind


def _texts(variants) -> list[str]:
    return [v.text for v in variants]


class TestExpand:
    def test_identity_variant_is_first(self):
        variants = QueryExpander().expand(normalize("Buy groceries"))

        assert variants[0].kind is VariantKind.IDENTITY
        assert variants[0].text == "buy groceries"
        assert variants[0].rank == 0

    def test_ranks_follow_list_order(self):
        variants = QueryExpander().expand(normalize("call dentist about appt"))
        assert [v.rank for v in variants] == list(range(len(variants)))

    def test_typo_correction_then_synonyms_of_corrected_words(self):
        variants = QueryExpander().expand(normalize("fx sink"))

        assert _texts(variants) == ["fx sink", "fix sink", "repair sink", "mend sink"]
        assert variants[1].kind is VariantKind.TYPO
        assert variants[2].kind is VariantKind.SYNONYM

    def test_long_tokens_allow_two_edits(self):
        variants = QueryExpander().expand(normalize("vendor registartion"))

        typo = [v for v in variants if v.kind is VariantKind.TYPO]
        assert [v.text for v in typo] == ["vendor registration"]

    def test_short_tokens_allow_one_edit(self):
        lexicon = Lexicon(base_words=frozenset({"milk"}))
        expander = QueryExpander(lexicon=lexicon)

        variants = expander.expand(normalize("mxlx"))

        assert _texts(variants) == ["mxlx"]

    def test_synonym_keys_are_not_typo_corrected(self):
        """'appt' is a known abbreviation, not a misspelling of 'apt' or 'app'."""
        variants = QueryExpander().expand(normalize("dentist appt"))

        assert not [v for v in variants if v.kind is VariantKind.TYPO]
        assert "dentist appointment" in _texts(variants)
        assert "dentist booking" in _texts(variants)

    def test_synonym_swaps_are_capped(self):
        config = SearchConfig(max_synonym_variants=2)
        variants = QueryExpander(config=config).expand(normalize("call and email"))

        synonyms = [v for v in variants if v.kind is VariantKind.SYNONYM]
        assert _texts(synonyms) == ["phone and email", "ring and email"]

    def test_entity_only_variant(self):
        variants = QueryExpander().expand(normalize('call "budget review"'))

        entity = [v for v in variants if v.kind is VariantKind.ENTITY]
        assert _texts(entity) == ["budget review"]

    def test_adjacent_pairs_for_three_or_more_tokens(self):
        variants = QueryExpander().expand(normalize("kitchen sink dentist"))

        partial = [v for v in variants if v.kind is VariantKind.PARTIAL]
        assert _texts(partial) == ["kitchen sink", "sink dentist"]
        assert partial[0].tokens == ("kitchen", "sink")

    def test_no_pairs_for_two_tokens(self):
        variants = QueryExpander().expand(normalize("kitchen sink"))
        assert not [v for v in variants if v.kind is VariantKind.PARTIAL]

    def test_variant_count_never_exceeds_cap(self):
        variants = QueryExpander().expand(normalize("call email buy fix meeting review"))

        assert len(variants) == 8
        assert len(set(_texts(variants))) == len(variants)

    def test_expansion_is_deterministic(self):
        expander = QueryExpander()
        nq = normalize("Email John Smith re the fx for dentst appt tomorrow")

        assert expander.expand(nq) == expander.expand(nq)

    def test_per_call_lexicon_extends_vocabulary(self):
        snapshot = LexiconSnapshot.default()
        expander = QueryExpander.from_snapshot(snapshot)
        extended = snapshot.lexicon.extended({"plumber"})

        without = expander.expand(normalize("plumbr"))
        with_corpus = expander.expand(normalize("plumbr"), lexicon=extended)

        assert "plumber" not in _texts(without)
        assert "plumber" in _texts(with_corpus)

    def test_identity_only(self):
        nq = normalize("fx sink")
        variants = QueryExpander().identity_only(nq)

        assert _texts(variants) == ["fx sink"]
        assert variants[0].tokens == ("fx", "sink")

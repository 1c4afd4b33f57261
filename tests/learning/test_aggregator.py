"""Tests for the SnippetAggregator."""

import threading

import pytest

from codemod_learn.learning.aggregator import (
    LearningRequest, NothingToLearnError, SnippetAggregator,
)
from codemod_learn.learning.models import (
    Diagnostic, FailureKind, FileOutcome, SnippetPair,
)


def _outcome(path, *pairs, diagnostics=()):
    return FileOutcome(path=path, pairs=list(pairs), diagnostics=list(diagnostics))


class TestAggregator:
    def test_files_kept_in_processing_order(self):
        f1 = SnippetPair("a", "b")
        f2 = SnippetPair("c", "d")
        agg = SnippetAggregator()
        agg.add(_outcome("f1.ts", f1))
        agg.add(_outcome("f2.ts", f2))

        assert agg.to_request().pairs == [f1, f2]

    def test_per_file_hunk_order_is_preserved(self):
        agg = SnippetAggregator()
        agg.add(_outcome("a.ts", SnippetPair("1", "1'"), SnippetPair("2", "2'")))
        agg.add(_outcome("b.ts", SnippetPair("3", "3'")))

        request = agg.to_request()

        assert [p.before for p in request.pairs] == ["1", "2", "3"]
        assert request.sources == ["a.ts", "a.ts", "b.ts"]

    def test_file_without_pairs_is_excluded(self):
        agg = SnippetAggregator()
        agg.add(_outcome("empty.ts"))
        agg.add(_outcome("b.ts", SnippetPair("x", "y")))

        assert agg.files == ["b.ts"]
        assert agg.to_request().sources == ["b.ts"]

    def test_all_files_empty_is_nothing_to_learn(self):
        agg = SnippetAggregator()
        agg.add(_outcome("a.ts"))
        agg.add(_outcome("b.ts"))

        assert agg.is_empty()
        with pytest.raises(NothingToLearnError, match="2 processed file"):
            agg.to_request()

    def test_no_files_is_nothing_to_learn(self):
        with pytest.raises(NothingToLearnError):
            SnippetAggregator().to_request()

    def test_diagnostics_are_collected(self):
        diag = Diagnostic(FailureKind.MISSING_CONTENT, "a.ts", "gone")
        agg = SnippetAggregator()
        agg.add(_outcome("a.ts", diagnostics=[diag]))

        assert agg.diagnostics == [diag]
        assert str(diag) == "missing_content: a.ts: gone"

    def test_concurrent_adds_are_all_recorded(self):
        agg = SnippetAggregator()

        def worker(n):
            agg.add(_outcome(f"f{n}.ts", SnippetPair(str(n), str(n))))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(agg.pairs) == 20
        assert len(agg.files) == 20


def test_request_payload():
    request = LearningRequest(pairs=[SnippetPair("a", ""), SnippetPair("", "b")])

    assert request.to_payload() == {
        "snippets": [{"before": "a", "after": ""}, {"before": "", "after": "b"}],
    }

"""Tests for the LearningPipeline."""

import pytest

from codemod_learn.learning.aggregator import NothingToLearnError
from codemod_learn.learning.models import FailureKind, SnippetPair
from codemod_learn.learning.pipeline import LearningPipeline


class FakeSource:
    """In-memory FileSource. Missing keys behave like unavailable content."""

    def __init__(self, files: dict[str, tuple]):
        self.files = files

    def get_diff(self, path):
        return self.files[path][0]

    def get_before_text(self, path):
        return self.files[path][1]

    def get_after_text(self, path):
        return self.files[path][2]


class BrokenSource(FakeSource):
    def get_diff(self, path):
        if path == "broken.ts":
            raise RuntimeError("git exploded")
        return super().get_diff(path)


SCENARIO = (
    "--- a/a.ts\n+++ b/a.ts\n"
    "@@ -10,2 +10,3 @@\n-old line\n+new line A\n+new line B\n next\n",
    "".join(f"line {n}\n" for n in range(1, 10)) + "old line\nnext\n",
    "".join(f"line {n}\n" for n in range(1, 10)) + "new line A\nnew line B\nnext\n",
)

SECOND = (
    "@@ -1 +1 @@\n-let x = 1;\n+let x = 2;\n",
    "let x = 1;\n",
    "let x = 2;\n",
)


class TestHunkStrategy:
    def test_scenario(self):
        pipeline = LearningPipeline(FakeSource({"a.ts": SCENARIO}))

        outcome = pipeline.process_file("a.ts")

        assert outcome.pairs == [SnippetPair(
            before="old line\nnext", after="new line A\nnew line B\nnext",
        )]

    def test_run_merges_in_input_order(self):
        files = {f"f{n}.ts": SECOND for n in range(8)}
        files["a.ts"] = SCENARIO
        order = ["a.ts"] + [f"f{n}.ts" for n in range(8)]

        aggregator = LearningPipeline(FakeSource(files), max_workers=4).run(order)

        assert aggregator.files == order
        request = aggregator.to_request()
        assert request.sources[0] == "a.ts"
        assert request.pairs[1] == SnippetPair("let x = 1;", "let x = 2;")

    def test_empty_diff_contributes_nothing(self):
        pipeline = LearningPipeline(FakeSource({
            "same.ts": ("", "x\n", "x\n"),
            "b.ts": SECOND,
        }))

        aggregator = pipeline.run(["same.ts", "b.ts"])

        assert aggregator.files == ["b.ts"]
        assert aggregator.diagnostics == []

    def test_every_file_empty_is_nothing_to_learn(self):
        pipeline = LearningPipeline(FakeSource({
            "a.ts": ("", "x\n", "x\n"),
            "b.ts": ("", "", ""),
        }))

        with pytest.raises(NothingToLearnError):
            pipeline.run(["a.ts", "b.ts"]).to_request()

    def test_missing_before_text(self):
        pipeline = LearningPipeline(FakeSource({"a.ts": (SECOND[0], None, "x\n")}))

        outcome = pipeline.process_file("a.ts")

        assert outcome.pairs == []
        assert outcome.diagnostics[0].kind is FailureKind.MISSING_CONTENT

    def test_missing_diff(self):
        outcome = LearningPipeline(FakeSource({"a.ts": (None, "", "")})).process_file("a.ts")

        assert outcome.diagnostics[0].kind is FailureKind.MISSING_CONTENT

    def test_collaborator_failure_is_isolated(self):
        source = BrokenSource({"broken.ts": SECOND, "b.ts": SECOND})

        aggregator = LearningPipeline(source).run(["broken.ts", "b.ts"])

        assert aggregator.files == ["b.ts"]
        assert aggregator.diagnostics[0].path == "broken.ts"
        assert "git exploded" in aggregator.diagnostics[0].message

    def test_malformed_hunk_reported_others_kept(self):
        diff = "@@ -1,? +1 @@\n-a\n+b\n" + SECOND[0]
        outcome = LearningPipeline(FakeSource({"a.ts": (diff, SECOND[1], SECOND[2])})) \
            .process_file("a.ts")

        assert outcome.pairs == [SnippetPair("let x = 1;", "let x = 2;")]
        assert outcome.diagnostics[0].kind is FailureKind.PARSE_ERROR

    def test_non_ascii_digit_header_is_parse_error_and_others_kept(self):
        diff = "@@ -1 +²,1 @@\n-a\n+b\n" + SECOND[0]
        outcome = LearningPipeline(FakeSource({"a.ts": (diff, SECOND[1], SECOND[2])})) \
            .process_file("a.ts")

        assert outcome.pairs == [SnippetPair("let x = 1;", "let x = 2;")]
        assert [d.kind for d in outcome.diagnostics] == [FailureKind.PARSE_ERROR]

    def test_internal_error_is_not_reported_as_missing_content(self, monkeypatch):
        pipeline = LearningPipeline(FakeSource({"a.ts": SECOND}))

        def boom(file_diff):
            raise ZeroDivisionError("slicer bug")

        monkeypatch.setattr(pipeline._slicer, "slice_file", boom)

        with pytest.raises(ZeroDivisionError):
            pipeline.process_file("a.ts")

    def test_run_without_paths(self):
        assert LearningPipeline(FakeSource({})).run([]).is_empty()

    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            LearningPipeline(FakeSource({}), strategy="ast")


class TestStatementStrategy:
    def test_unsupported_extension_is_rejected(self):
        pipeline = LearningPipeline(
            FakeSource({"notes.md": ("@@ -1 +1 @@\n-a\n+b\n", "a\n", "b\n")}),
            strategy="statements",
        )

        outcome = pipeline.process_file("notes.md")

        assert outcome.pairs == []
        assert outcome.diagnostics[0].kind is FailureKind.MISSING_CONTENT

    def test_reduces_to_changed_statement(self):
        pytest.importorskip("tree_sitter")
        pytest.importorskip("tree_sitter_javascript")
        before = "const a = 1;\n\nfunction f() {\n  return a;\n}\n"
        after = "const a = 1;\n\nfunction f() {\n  return a + 1;\n}\n"
        diff = "@@ -4 +4 @@\n-  return a;\n+  return a + 1;\n"
        pipeline = LearningPipeline(
            FakeSource({"f.js": (diff, before, after)}), strategy="statements",
        )

        outcome = pipeline.process_file("f.js")

        assert outcome.pairs == [SnippetPair(
            before="function f() {\n  return a;\n}",
            after="function f() {\n  return a + 1;\n}",
        )]

    def test_empty_diff(self):
        pipeline = LearningPipeline(
            FakeSource({"f.js": ("", "x;\n", "x;\n")}), strategy="statements",
        )

        outcome = pipeline.process_file("f.js")

        assert outcome.pairs == []
        assert outcome.diagnostics == []

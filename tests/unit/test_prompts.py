"""Unit tests for prompt construction."""

import json

from aicgen.llm.prompts import (
    MAX_LISTED_PATHS,
    SYSTEM_PROMPT,
    PromptContext,
    available_options,
    build_analysis_prompt,
    estimate_prompt_tokens,
    format_samples,
    summarize_metadata,
)
from aicgen.models.metadata import ProjectMetadata
from aicgen.models.result import ARCHITECTURE_PATTERNS, LANGUAGES
from aicgen.models.sampling import FileSample, SamplingReason


def make_sample(path: str, content: str) -> FileSample:
    return FileSample(
        path=path,
        content=content,
        size=len(content),
        estimated_tokens=1,
        reason=SamplingReason.ENTRY_POINT,
        language="go",
        importance=1.0,
    )


class TestPromptParts:
    """Tests for the pieces of the prompt."""

    def test_system_prompt_demands_json(self) -> None:
        """Test the fixed system instruction."""
        assert "Return ONLY valid JSON" in SYSTEM_PROMPT

    def test_available_options_are_closed_sets(self) -> None:
        """Test that options mirror the result value sets."""
        options = available_options()

        assert options["languages"] == list(LANGUAGES)
        assert options["architectures"] == list(ARCHITECTURE_PATTERNS)
        assert set(options) == {
            "languages",
            "projectTypes",
            "architectures",
            "datasources",
            "levels",
            "testingMaturity",
        }

    def test_summary_drops_fingerprint(self) -> None:
        """Test that the cache key is not sent to the provider."""
        summary = summarize_metadata(ProjectMetadata(language="go", fingerprint="abc"))

        assert "fingerprint" not in summary
        assert summary["language"] == "go"

    def test_summary_trims_long_path_lists(self) -> None:
        """Test that huge file lists are cut with a count."""
        files = [f"src/f{i}.go" for i in range(MAX_LISTED_PATHS + 25)]

        summary = summarize_metadata(ProjectMetadata(files=files))

        assert len(summary["files"]) == MAX_LISTED_PATHS + 1
        assert summary["files"][-1] == "... (25 more)"

    def test_format_samples(self) -> None:
        """Test delimited sample blocks."""
        text = format_samples([make_sample("main.go", "package main")])

        assert text == "--- main.go (entry-point) ---\npackage main\n---"


class TestBuildAnalysisPrompt:
    """Tests for the full prompt."""

    def test_sections(self) -> None:
        """Test that every section is present and metadata is valid JSON."""
        context = PromptContext(
            metadata=ProjectMetadata(files=["main.go"], language="go"),
            samples=[make_sample("main.go", "package main\n\nfunc main() {}")],
        )

        prompt = build_analysis_prompt(context)

        assert prompt.startswith("METADATA:\n")
        for section in ("FILE SAMPLES:", "AVAILABLE OPTIONS:", "SCHEMA:"):
            assert section in prompt
        assert "--- main.go (entry-point) ---" in prompt
        metadata_json = prompt.split("METADATA:\n", 1)[1].split("\n\nFILE SAMPLES:", 1)[0]
        assert json.loads(metadata_json)["files"] == ["main.go"]

    def test_no_samples(self) -> None:
        """Test the placeholder when nothing was sampled."""
        prompt = build_analysis_prompt(PromptContext(metadata=ProjectMetadata()))

        assert "FILE SAMPLES:\n(none)" in prompt

    def test_estimate_prompt_tokens(self) -> None:
        """Test the 3.5 characters per token estimate."""
        assert estimate_prompt_tokens("") == 0
        assert estimate_prompt_tokens("a" * 7) == 2
        assert estimate_prompt_tokens("a" * 8) == 3

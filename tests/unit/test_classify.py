"""Unit tests for the commit classifier and its alignment rules."""

import pytest

from relnotes.errors import GeneratorError, SchemaMismatchError
from relnotes.models.commit import ClassifiedCommit, CommitType, RawCommit
from relnotes.models.run import Stage
from relnotes.pipeline.classify import (
    align_classifications,
    classify_commits,
    is_explicitly_breaking,
    strip_type_prefix,
)


class TestPrefixHandling:
    @pytest.mark.parametrize("message, expected", [
        ("feat: add OAuth", "add OAuth"),
        ("fix(auth): callback loop", "callback loop"),
        ("feat!: drop v1 API", "drop v1 API"),
        ("Chore(deps)!:  bump redis", "bump redis"),
        ("oauth implementation", "oauth implementation"),
        ("Note: keep this prefix", "Note: keep this prefix"),
    ])
    def test_strip_type_prefix(self, message, expected):
        assert strip_type_prefix(message) == expected

    def test_prefix_only_message_kept(self):
        assert strip_type_prefix("fix:") == "fix:"

    @pytest.mark.parametrize("raw", [
        "feat!: drop v1 API",
        "refactor(core)!: new storage layout",
        "remove legacy endpoints\n\nBREAKING CHANGE: /v1 is gone",
        "BREAKING-CHANGE rename config keys",
    ])
    def test_explicitly_breaking(self, raw):
        assert is_explicitly_breaking(raw)

    @pytest.mark.parametrize("raw", ["feat: add OAuth", "fixed google oauth", "breaking the build less often"])
    def test_not_breaking(self, raw):
        assert not is_explicitly_breaking(raw)


class TestAlignment:
    def test_one_per_raw_commit_in_input_order(self):
        raw = [RawCommit(sha="a", raw_message="one"), RawCommit(sha="b", raw_message="two")]
        classified = [
            ClassifiedCommit(sha="b", type=CommitType.FIX, message="two"),
            ClassifiedCommit(sha="a", type=CommitType.FEAT, message="feat: one"),
        ]
        aligned = align_classifications(raw, classified)
        assert [c.sha for c in aligned] == ["a", "b"]
        assert aligned[0].message == "one"

    def test_unknown_shas_dropped(self):
        raw = [RawCommit(sha="a", raw_message="one")]
        classified = [
            ClassifiedCommit(sha="a", type=CommitType.FIX, message="one"),
            ClassifiedCommit(sha="zzz", type=CommitType.FEAT, message="invented"),
        ]
        assert [c.sha for c in align_classifications(raw, classified)] == ["a"]

    def test_duplicate_sha_first_wins(self):
        raw = [RawCommit(sha="a", raw_message="one")]
        classified = [
            ClassifiedCommit(sha="a", type=CommitType.FIX, message="first"),
            ClassifiedCommit(sha="a", type=CommitType.FEAT, message="second"),
        ]
        aligned = align_classifications(raw, classified)
        assert aligned[0].type == CommitType.FIX
        assert aligned[0].message == "first"

    def test_missing_sha_is_schema_mismatch(self):
        raw = [RawCommit(sha="a", raw_message="one"), RawCommit(sha="b", raw_message="two")]
        classified = [ClassifiedCommit(sha="a", type=CommitType.FIX, message="one")]
        with pytest.raises(SchemaMismatchError) as exc_info:
            align_classifications(raw, classified)
        assert exc_info.value.stage == Stage.CLASSIFY
        assert exc_info.value.errors == ["no classification for commit b"]

    def test_explicit_marker_overrides_model(self):
        raw = [RawCommit(sha="a", raw_message="feat!: drop v1 API")]
        classified = [ClassifiedCommit(sha="a", type=CommitType.FEAT, message="drop v1 API", breaking=False)]
        assert align_classifications(raw, classified)[0].breaking is True

    def test_model_verdict_kept(self):
        raw = [RawCommit(sha="a", raw_message="rework session storage")]
        classified = [ClassifiedCommit(sha="a", type=CommitType.REFACTOR, message="Rework sessions", breaking=True)]
        assert align_classifications(raw, classified)[0].breaking is True

    def test_empty_model_message_falls_back_to_raw(self):
        raw = [RawCommit(sha="a", raw_message="fix: null pointer in chat")]
        classified = [ClassifiedCommit(sha="a", type=CommitType.FIX, message="")]
        assert align_classifications(raw, classified)[0].message == "null pointer in chat"


@pytest.mark.asyncio
class TestClassifyCommits:
    async def test_classifies_sprint(self, scripted, canned):
        gen = scripted(responses={Stage.CLASSIFY: [canned.classified]})
        result = await classify_commits(gen, canned.sprint, "n-aible")
        assert [c.type for c in result] == [
            CommitType.FEAT, CommitType.FIX, CommitType.PERF, CommitType.CHORE, CommitType.TEST,
        ]
        assert gen.stages == [Stage.CLASSIFY]

    async def test_prompt_lists_every_commit(self, scripted, canned):
        gen = scripted(responses={Stage.CLASSIFY: [canned.classified]})
        await classify_commits(gen, canned.sprint, "n-aible")
        prompt = gen.calls[0][1]
        for raw in canned.sprint:
            assert f"{raw.sha}: {raw.raw_message}" in prompt
        assert "n-aible" in prompt

    async def test_unknown_type_is_schema_mismatch(self, scripted):
        raw = [RawCommit(sha="a", raw_message="tweak")]
        gen = scripted(responses={Stage.CLASSIFY: [
            {"commits": [{"sha": "a", "type": "style", "message": "tweak"}]},
        ]})
        with pytest.raises(SchemaMismatchError):
            await classify_commits(gen, raw, "n-aible")

    async def test_transport_failure_is_generator_error(self, scripted):
        raw = [RawCommit(sha="a", raw_message="tweak")]
        gen = scripted(failures={Stage.CLASSIFY: ConnectionError("quota exceeded")})
        with pytest.raises(GeneratorError) as exc_info:
            await classify_commits(gen, raw, "n-aible")
        assert exc_info.value.code == "LLM_CLASSIFY_COMMITS_FAILED"

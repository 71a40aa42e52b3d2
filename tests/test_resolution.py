import csv

import pytest

from chatgame.errors import UnrecognizedResolutionKind
from chatgame.resolution import ResolutionKind


def _telemetry_rows(harness):
    files = list(harness.data_dir.glob("telemetry_data_*.csv"))
    assert len(files) == 1
    with open(files[0], newline="", encoding="utf-8") as f:
        return list(csv.reader(f))


def test_parse_known_and_unknown_kinds():
    assert ResolutionKind.parse("AP") is ResolutionKind.AP
    assert ResolutionKind.parse("TNP") is ResolutionKind.TNP
    with pytest.raises(UnrecognizedResolutionKind):
        ResolutionKind.parse("XX")
    with pytest.raises(UnrecognizedResolutionKind):
        ResolutionKind.parse(None)


@pytest.mark.asyncio
async def test_attacker_correct_awards_points(harness):
    await harness.router.dispatch(
        "set game resolution", "mod", {"gameResolutionType": "AP", "teamAnswer": "42"}
    )
    resolution = await harness.resolver.resolve_game()

    assert harness.session.current_score == 5
    assert resolution == {
        "isAnswerCorrect": True,
        "pointsAwarded": 5,
        "teamAnswer": "42",
        "currentScore": 5,
    }
    assert harness.sio.events("game resolved") == [resolution]
    assert harness.sio.events("set answer") == ["42"]


@pytest.mark.asyncio
async def test_defender_correct_awards_points(harness):
    harness.session.current_score = 10
    harness.session.stage_resolution("DP", "7")

    resolution = await harness.resolver.resolve_game()

    assert harness.session.current_score == 15
    assert resolution["isAnswerCorrect"] is True


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", ["ANP", "DNP"])
async def test_no_points_kinds_keep_answer(harness, kind):
    harness.session.stage_resolution(kind, "wrong")

    resolution = await harness.resolver.resolve_game()

    assert harness.session.current_score == 0
    assert resolution == {
        "isAnswerCorrect": False,
        "pointsAwarded": 0,
        "teamAnswer": "wrong",
        "currentScore": 0,
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", ["TNP", "bogus", None])
async def test_timeout_or_unrecognized_clears_answer(harness, kind):
    harness.session.current_score = 3
    harness.session.stage_resolution(kind, "late answer")

    resolution = await harness.resolver.resolve_game()

    assert harness.session.current_score == 3
    assert resolution["pointsAwarded"] == 0
    assert resolution["teamAnswer"] is None
    assert resolution["currentScore"] == 3


@pytest.mark.asyncio
async def test_resolution_consumes_staged_inputs_once(harness):
    harness.session.stage_resolution("AP", "42")

    await harness.resolver.resolve_game()
    assert harness.session.game_resolution_type is None
    assert harness.session.team_answer is None

    second = await harness.resolver.resolve_game()
    assert harness.session.current_score == 5
    assert second["pointsAwarded"] == 0
    assert len(harness.sio.events("game resolved")) == 2


@pytest.mark.asyncio
async def test_resolution_records_telemetry_row(harness):
    harness.session.participant_name = "alice"
    harness.session.confederate_name = "bob"
    harness.session.stage_resolution("DNP", "12")

    await harness.resolver.resolve_game()

    header, row = _telemetry_rows(harness)
    assert header == ["USER", "CONFEDERATE", "ACTION", "TEXT", "TIMESTAMP", "X", "Y", "RESOLUTION"]
    assert row[0:4] == ["alice", "bob", "game resolved", "12"]
    assert row[7] == "DNP"


@pytest.mark.asyncio
async def test_resolution_survives_telemetry_failure(harness, tmp_path):
    blocked = tmp_path / "blocked"
    blocked.write_text("not a directory")
    harness.telemetry.directory = blocked
    harness.session.stage_resolution("AP", "42")

    resolution = await harness.resolver.resolve_game()

    assert resolution["currentScore"] == 5
    assert harness.sio.events("game resolved") == [resolution]


@pytest.mark.asyncio
async def test_reset_points(harness):
    harness.session.stage_resolution("AP", "1")
    await harness.resolver.resolve_game()

    await harness.router.dispatch("reset points", "mod")

    assert harness.session.current_score == 0
    assert harness.sio.events("points update") == [0]

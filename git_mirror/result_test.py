import pytest

from .result import MirrorResult


@pytest.mark.parametrize(
    "outcomes, succeeded",
    [
        # nothing recorded
        ([], True),
        # all successful
        ([True, True, True], True),
        # single failure
        ([False], False),
        # failure is not cleared by later successes
        ([True, False, True, True], False),
    ],
)
def test_result_accumulates(outcomes: list[bool], succeeded: bool) -> None:
    result = MirrorResult()
    for outcome in outcomes:
        assert result.record(outcome) == outcome
    assert result.succeeded == succeeded
    assert result.errors_occurred != succeeded

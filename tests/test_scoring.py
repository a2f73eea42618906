from lifehub.scoring import ScoringType, calculate_set_score, parse_number, round_half_up


def test_no_record_scores_neutral_baseline():
    for v1, v2 in [(50, 10), (1, 1), (0, 0), (500, 20)]:
        result = calculate_set_score({}, "bench", "Weight & Reps", v1, v2)
        assert result.score == 8.0
    result = calculate_set_score({}, "bench", "Weight & Reps", 50, 10)
    assert result.volume == 500
    assert result.is_pr


def test_score_relative_to_record():
    prs = {"bench": 500}
    result = calculate_set_score(prs, "bench", ScoringType.WEIGHT_REPS, 40, 10)
    assert result.score == 8.0
    assert result.volume == 400
    assert not result.is_pr


def test_score_capped():
    result = calculate_set_score({"bench": 100}, "bench", "Weight & Reps", 100, 10)
    assert result.score == 15
    assert result.is_pr


def test_equal_to_record_is_not_pr():
    result = calculate_set_score({"bench": 500}, "bench", "Weight & Reps", 50, 10)
    assert result.score == 10
    assert not result.is_pr


def test_volume_by_type():
    assert calculate_set_score({}, "plank", "Time", 30, 2).volume == 150
    assert calculate_set_score({}, "pushup", "Reps", "12", None).volume == 12
    assert calculate_set_score({}, "run", "Distance", "5km", "x").volume == 5
    assert calculate_set_score({}, "odd", "Tempo", 5, 5).volume == 0


def test_malformed_inputs_are_zero():
    result = calculate_set_score({"bench": 100}, "bench", "Weight & Reps", "abc", None)
    assert result.volume == 0
    assert result.score == 0
    assert not result.is_pr


def test_score_monotonic_in_volume_and_record():
    prs = {"squat": 1000}
    scores = [calculate_set_score(prs, "squat", "Reps", v, 0).score for v in range(0, 3000, 50)]
    assert scores == sorted(scores)

    by_record = [
        calculate_set_score({"squat": p}, "squat", "Reps", 500, 0).score
        for p in (400, 600, 800, 1000)
    ]
    assert by_record == sorted(by_record, reverse=True)
    assert len(set(by_record)) == len(by_record)


def test_does_not_mutate_records():
    prs = {"bench": 100}
    calculate_set_score(prs, "bench", "Weight & Reps", 100, 10)
    assert prs == {"bench": 100}


def test_parse_number():
    assert parse_number("12kg") == 12
    assert parse_number(" 3.5 ") == 3.5
    assert parse_number(".5") == 0.5
    assert parse_number("") == 0
    assert parse_number(None) == 0
    assert parse_number(True) == 0
    assert parse_number(float("nan")) == 0
    assert parse_number([1]) == 0


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(12.5) == 13
    assert round_half_up(17.6) == 18
    assert round_half_up(2.4) == 2
    assert round_half_up(0) == 0


def test_negative_input_scores_zero():
    result = calculate_set_score({"pushup": 100}, "pushup", "Reps", "-50", 0)
    assert result.score == 0
    assert not result.is_pr

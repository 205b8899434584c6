from types import SimpleNamespace

from wizard.step_status import StepStatus, build_step_statuses, resolve_step_status


def test_initial_step_bar(make_wizard) -> None:
    statuses = build_step_statuses(make_wizard())

    assert [entry.status for entry in statuses] == [
        StepStatus.WARNING,
        StepStatus.LOCKED,
        StepStatus.LOCKED,
        StepStatus.LOCKED,
    ]
    assert statuses[0].is_current
    assert statuses[0].label == "Grunddaten"
    assert statuses[1].messages == ()
    assert not statuses[1].can_navigate


def test_complete_and_visited_steps(make_wizard) -> None:
    wizard = make_wizard()
    wizard.update_fields(
        {
            "title": "Brüche üben",
            "description": "Arbeitsblatt zur Bruchrechnung mit Lösungen.",
            "cycle": "2",
            "subject": "Mathematik",
            "priceType": "free",
        }
    )
    wizard.go_next()
    wizard.go_next()
    wizard.go_back()

    statuses = {entry.step: entry for entry in build_step_statuses(wizard, lang="en")}

    assert statuses[1].status is StepStatus.COMPLETE
    assert statuses[2].status is StepStatus.COMPLETE
    assert statuses[3].status is StepStatus.COMPLETE
    assert statuses[4].status is StepStatus.LOCKED
    assert statuses[2].is_current
    assert statuses[1].label == "Basics"


def test_error_summary_lists_three_and_counts_the_rest(make_wizard) -> None:
    wizard = make_wizard()
    for _ in range(3):
        wizard.go_next()

    step_four = build_step_statuses(wizard)[3]

    assert step_four.status is StepStatus.WARNING
    assert len(step_four.messages) == 3
    assert step_four.hidden_error_count == 3
    assert step_four.more_errors_label == "+3 weitere"


def test_status_precedence() -> None:
    base = SimpleNamespace(is_current=True, is_visited=True, is_complete=True, is_valid=True, error_count=0)

    assert resolve_step_status(**vars(base)) is StepStatus.COMPLETE
    assert (
        resolve_step_status(**{**vars(base), "is_complete": False}) is StepStatus.CURRENT
    )
    assert (
        resolve_step_status(**{**vars(base), "is_valid": False, "error_count": 1}) is StepStatus.WARNING
    )
    assert (
        resolve_step_status(
            is_current=False, is_visited=True, is_complete=False, is_valid=True, error_count=0
        )
        is StepStatus.VISITED
    )
    assert (
        resolve_step_status(
            is_current=False, is_visited=False, is_complete=False, is_valid=False, error_count=2
        )
        is StepStatus.LOCKED
    )

"""
Tests for the dashboard form state machine.
"""

import pytest

from bazaar.api.errors import FormSubmissionError, ImageTooLargeError
from bazaar.dashboard.forms import DashboardForm, FormState, InvalidTransitionError


def test_new_form_starts_from_defaults():
    form = DashboardForm("product", defaults={"category": "Study Material"})
    form.open_new({"title": "Kettle"})

    assert form.state is FormState.EDITING
    assert form.is_new
    assert form.values == {"category": "Study Material", "title": "Kettle"}


def test_existing_form_is_prefilled():
    form = DashboardForm("product")
    form.open_existing("abc", {"title": "Kettle", "price": 5})

    assert form.state is FormState.EDITING
    assert not form.is_new
    assert form.target_id == "abc"
    assert form.values["title"] == "Kettle"


def test_successful_submit_closes_form():
    form = DashboardForm("product").open_new({"title": "Kettle"})
    seen = {}

    def save(values):
        seen.update(values)
        assert form.state is FormState.SUBMITTING
        return "saved"

    assert form.submit(save) == "saved"
    assert seen == {"title": "Kettle"}
    assert form.state is FormState.CLOSED
    assert form.values == {}


def test_failed_submit_returns_to_editing_with_values():
    form = DashboardForm("product").open_new({"title": "Kettle", "price": 5})

    def save(values):
        raise ImageTooLargeError(size=2_000_000, max_bytes=1_048_576)

    with pytest.raises(FormSubmissionError) as exc_info:
        form.submit(save)

    error = exc_info.value
    assert error.status_code == 413
    assert isinstance(error.cause, ImageTooLargeError)
    assert error.details["form"] == {"title": "Kettle", "price": 5}
    assert form.state is FormState.EDITING
    assert form.error == "Image must be less than 1MB"
    assert form.values == {"title": "Kettle", "price": 5}


def test_unexpected_failure_is_reraised_and_form_stays_open():
    form = DashboardForm("carousel").open_new({"title": "Sale"})

    def save(values):
        raise KeyError("boom")

    with pytest.raises(KeyError):
        form.submit(save)
    assert form.state is FormState.EDITING


def test_form_can_be_resubmitted_after_failure():
    form = DashboardForm("product").open_new({"title": "Kettle"})
    attempts = []

    def flaky(values):
        attempts.append(values)
        if len(attempts) == 1:
            raise ImageTooLargeError(size=10, max_bytes=1)
        return "ok"

    with pytest.raises(FormSubmissionError):
        form.submit(flaky)
    assert form.submit(flaky) == "ok"
    assert form.state is FormState.CLOSED
    assert form.error is None


@pytest.mark.parametrize("operation", ["submit", "update"])
def test_closed_form_rejects_editing_operations(operation):
    form = DashboardForm("product")
    with pytest.raises(InvalidTransitionError):
        if operation == "submit":
            form.submit(lambda values: None)
        else:
            form.update(title="x")


def test_open_form_cannot_be_opened_again():
    form = DashboardForm("product").open_new()
    with pytest.raises(InvalidTransitionError):
        form.open_existing("abc", {})


def test_snapshot_is_json_friendly():
    from decimal import Decimal
    from uuid import uuid4

    target = uuid4()
    form = DashboardForm("product").open_existing(target, {"price": Decimal("9.99"), "id": target})
    assert form.snapshot() == {"price": "9.99", "id": str(target)}

from types import SimpleNamespace

import pytest

from gkesetup.errors import ContextKeyError, UserAbort
from gkesetup.model import EnvironmentContext, ProvisioningStep
from gkesetup.sequencer import StepSequencer, is_affirmative

from conftest import answers


@pytest.mark.parametrize("response", ["y", "Y", "yes", "YES", "Yes", "", " ", "\t"])
def test_affirmative_responses(response):
    assert is_affirmative(response)


@pytest.mark.parametrize("response", ["n", "no", "x", "maybe", "N", "yess", "nope"])
def test_declining_responses(response):
    assert not is_affirmative(response)


def test_confirm_reads_one_line_per_call(console):
    reader = answers("y", "no")
    seq = StepSequencer(1, console=console, reader=reader)
    assert seq.confirm("first? ") is True
    assert seq.confirm("second? ") is False
    assert reader.prompts == ["first? ", "second? "]


def test_advance_counts_one_to_n(console, capsys):
    seq = StepSequencer(4, console=console)
    numbers = [seq.advance(f"step {i}") for i in range(4)]
    assert numbers == [1, 2, 3, 4]
    out = capsys.readouterr().out
    assert "1/4. step 0" in out
    assert "4/4. step 3" in out


def test_advance_past_total_is_an_error(console):
    seq = StepSequencer(1, console=console)
    seq.advance("only")
    with pytest.raises(ValueError):
        seq.advance("one too many")


def test_abort_raises_user_abort(console):
    seq = StepSequencer(1, console=console)
    with pytest.raises(UserAbort):
        seq.abort("operator said no")


def _ctx():
    return SimpleNamespace(env=EnvironmentContext())


def test_run_numbers_gated_and_ungated_steps_alike(console, capsys):
    ran = []
    steps = [
        ProvisioningStep("plain", lambda ctx: ran.append(1)),
        ProvisioningStep("gated", lambda ctx: ran.append(2), requires_confirmation=True, prompt="ok? "),
        ProvisioningStep("plain again", lambda ctx: ran.append(3)),
    ]
    seq = StepSequencer(len(steps), console=console, reader=answers("y"))
    states = seq.run(steps, _ctx())

    assert ran == [1, 2, 3]
    assert states == {1: "executed", 2: "executed", 3: "executed"}
    out = capsys.readouterr().out
    assert "1/3. plain" in out
    assert "2/3. gated" in out
    assert "3/3. plain again" in out


def test_decline_stops_the_run(console):
    ran = []
    steps = [
        ProvisioningStep("first", lambda ctx: ran.append("first")),
        ProvisioningStep("gated", lambda ctx: ran.append("gated"), requires_confirmation=True),
        ProvisioningStep("never", lambda ctx: ran.append("never")),
    ]
    seq = StepSequencer(len(steps), console=console, reader=answers("n"))
    with pytest.raises(UserAbort):
        seq.run(steps, _ctx())

    assert ran == ["first"]
    assert seq.states == {1: "executed", 2: "aborted", 3: "pending"}


def test_failure_marks_step_aborted_without_rollback(console):
    def boom(ctx):
        raise RuntimeError("gcloud exploded")

    steps = [
        ProvisioningStep("ok", lambda ctx: None),
        ProvisioningStep("boom", boom),
        ProvisioningStep("later", lambda ctx: None),
    ]
    seq = StepSequencer(len(steps), console=console)
    with pytest.raises(RuntimeError):
        seq.run(steps, _ctx())
    assert seq.states == {1: "executed", 2: "aborted", 3: "pending"}


def test_descriptions_and_prompts_are_filled_from_context(console, capsys):
    reader = answers("yes")
    ctx = _ctx()
    ctx.env["ProjectID"] = "portability-qa"
    steps = [
        ProvisioningStep(
            "Creating project {ProjectID}",
            lambda c: None,
            requires_confirmation=True,
            prompt="Create {ProjectID}? ",
        )
    ]
    StepSequencer(1, console=console, reader=reader).run(steps, ctx)

    assert "1/1. Creating project portability-qa" in capsys.readouterr().out
    assert reader.prompts == ["Create portability-qa? "]


def test_description_naming_unproduced_key_fails(console):
    steps = [ProvisioningStep("Using {InstanceGroupName}", lambda c: None)]
    with pytest.raises(ContextKeyError):
        StepSequencer(1, console=console).run(steps, _ctx())


def test_run_requires_matching_step_count(console):
    seq = StepSequencer(2, console=console)
    with pytest.raises(ValueError):
        seq.run([ProvisioningStep("one", lambda c: None)], _ctx())

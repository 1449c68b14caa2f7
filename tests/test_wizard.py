"""
Tests for session-backed multi-step forms
"""
import pytest

from opticare.core.forms import EmailForm, OtpForm
from opticare.core.wizard import Wizard, WizardFlow, WizardStep, otp_pending

FLOW = WizardFlow('signup', [
    WizardStep('email', EmailForm),
    WizardStep('otp', OtpForm, skip_if=otp_pending),
    WizardStep('review'),
])


@pytest.fixture
def wizard():
    return Wizard(FLOW, store={})


def test_flow_rejects_duplicate_step_names():
    with pytest.raises(ValueError):
        WizardFlow('broken', [WizardStep('a'), WizardStep('a')])


def test_fresh_wizard_starts_at_first_step(wizard):
    assert not wizard.started
    assert wizard.step_name == 'email'
    assert wizard.is_first
    assert wizard.progress == pytest.approx(100 / 3)


def test_submit_validates_without_moving(wizard):
    wizard.start()
    ok, errors = wizard.submit({'email': 'nope'})
    assert not ok
    assert errors == {'email': 'Invalid email address.'}

    ok, errors = wizard.submit({'email': 'jane@opticare.lk'})
    assert ok and errors == {}
    assert wizard.data == {'email': 'jane@opticare.lk'}
    assert wizard.step_name == 'email'


def test_advance_and_back(wizard):
    wizard.start()
    assert wizard.advance().name == 'otp'
    assert wizard.advance().name == 'review'
    assert wizard.is_last
    assert wizard.advance().name == 'review'
    assert wizard.back().name == 'otp'


def test_verified_otp_step_disappears(wizard):
    wizard.start(step='otp')
    wizard.mark_otp_verified()
    assert [step.name for step in wizard.steps] == ['email', 'review']
    assert wizard.step_name == 'review'
    assert wizard.back().name == 'email'


def test_start_prefills_and_copies(wizard):
    record = {'email': 'jane@opticare.lk'}
    wizard.start(data=record, context={'testId': 7}, otp_verified=True)
    record['email'] = 'changed@opticare.lk'
    assert wizard.data == {'email': 'jane@opticare.lk'}
    assert wizard.context == {'testId': 7}
    assert wizard.otp_verified


def test_start_at_unknown_step_fails(wizard):
    with pytest.raises(KeyError):
        wizard.start(step='missing')


def test_reset_clears_state(wizard):
    wizard.start(data={'name': 'Jane'})
    wizard.reset()
    assert not wizard.started
    assert wizard.data == {}


def test_display_step_submit_is_noop(wizard):
    wizard.start(step='review')
    assert wizard.submit({'anything': 1}) == (True, {})

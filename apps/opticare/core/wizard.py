"""
Session-backed multi-step forms

A WizardFlow names the ordered steps of a form and the schema each step is
validated against. A Wizard binds a flow to a store (the Flask session by
default) and keeps the current step, the data collected so far and whether the
user's email has been verified by OTP. Everything it stores is plain JSON, so
the state survives the round trip through the session cookie.
"""
import copy
import logging

from flask import session

from opticare.core.forms import validate_form

logger = logging.getLogger(__name__)


class WizardStep:
    """One page of a wizard

    schema is None for display-only steps. skip_if receives the wizard state
    and hides the step while it returns True.
    """

    def __init__(self, name, schema=None, title=None, skip_if=None):
        self.name = name
        self.schema = schema
        self.title = title or name.replace('_', ' ').title()
        self.skip_if = skip_if

    def is_active(self, state):
        return self.skip_if is None or not self.skip_if(state)

    def __repr__(self):
        return f'WizardStep({self.name!r})'


def otp_pending(state):
    """skip_if helper for OTP steps that disappear once the email is verified"""
    return state.get('otp_verified', False)


class WizardFlow:
    """Ordered steps of one multi-step form"""

    def __init__(self, name, steps):
        if not steps:
            raise ValueError('A wizard needs at least one step')
        names = [step.name for step in steps]
        if len(set(names)) != len(names):
            raise ValueError(f'Duplicate step names in wizard {name}')
        self.name = name
        self.steps = list(steps)

    def step(self, name):
        for step in self.steps:
            if step.name == name:
                return step
        raise KeyError(f'Wizard {self.name} has no step {name}')


class Wizard:
    """State of one flow for the current user"""

    def __init__(self, flow, store=None):
        self.flow = flow
        self.store = session if store is None else store
        self.key = f'wizard:{flow.name}'

    def _fresh_state(self):
        return {
            'step': self.flow.steps[0].name,
            'data': {},
            'otp_verified': False,
            'context': {},
        }

    @property
    def state(self):
        stored = self.store.get(self.key)
        if stored is None:
            return self._fresh_state()
        return copy.deepcopy(stored)

    def _save(self, state):
        self.store[self.key] = state

    @property
    def started(self):
        return self.key in self.store

    def start(self, data=None, context=None, otp_verified=False, step=None):
        """Begin the flow, optionally prefilled with an existing record"""
        state = self._fresh_state()
        state['data'] = copy.deepcopy(data or {})
        state['context'] = copy.deepcopy(context or {})
        state['otp_verified'] = otp_verified
        if step:
            self.flow.step(step)
            state['step'] = step
        self._save(state)
        logger.info(f'Wizard {self.flow.name} started at step {state["step"]}')

    def reset(self):
        self.store.pop(self.key, None)

    @property
    def steps(self):
        """Steps currently shown to the user"""
        state = self.state
        return [step for step in self.flow.steps if step.is_active(state)]

    @property
    def current(self):
        state = self.state
        step = self.flow.step(state['step'])
        if step.is_active(state):
            return step
        # the stored step was hidden (e.g. OTP after verification): fall forward
        active = self.steps
        position = self.flow.steps.index(step)
        for candidate in self.flow.steps[position:]:
            if candidate in active:
                return candidate
        return active[-1]

    @property
    def step_name(self):
        return self.current.name

    @property
    def index(self):
        return self.steps.index(self.current)

    @property
    def progress(self):
        return (self.index + 1) / len(self.steps) * 100

    @property
    def is_first(self):
        return self.index == 0

    @property
    def is_last(self):
        return self.index == len(self.steps) - 1

    @property
    def data(self):
        return self.state['data']

    @property
    def context(self):
        return self.state['context']

    @property
    def otp_verified(self):
        return self.state['otp_verified']

    def submit(self, form):
        """Validate the current step and merge its data

        Returns (True, {}) or (False, errors). Never moves to another step.
        """
        step = self.current
        if step.schema is None:
            return True, {}

        model, errors = validate_form(step.schema, form)
        if errors:
            return False, errors

        state = self.state
        state['data'].update(model.model_dump(mode='json'))
        self._save(state)
        return True, {}

    def clear_otp_verified(self):
        state = self.state
        state['otp_verified'] = False
        self._save(state)

    def _move_to(self, step):
        state = self.state
        state['step'] = step.name
        self._save(state)

    def advance(self):
        steps = self.steps
        position = steps.index(self.current)
        if position < len(steps) - 1:
            self._move_to(steps[position + 1])
        return self.current

    def back(self):
        steps = self.steps
        position = steps.index(self.current)
        if position > 0:
            self._move_to(steps[position - 1])
        return self.current

    def go_to(self, name):
        self._move_to(self.flow.step(name))
        return self.current

    def mark_otp_verified(self):
        state = self.state
        state['otp_verified'] = True
        self._save(state)
        logger.info(f'Wizard {self.flow.name}: email verified')

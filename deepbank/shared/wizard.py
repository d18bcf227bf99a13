"""Multi-step transactional flows (recharge, withdrawal, bonus conversion).

A flow is a fixed sequence of steps. Each step owns a validator that must
accept the accumulated payload before the user can move on, and the last
step ends in exactly one remote submission at a time.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Sequence

from deepbank.shared.loading import LoadingCoordinator
from deepbank.shared.logging import format_error_for_user, log_with_context
from deepbank.shared.notifications import NotificationCenter, Remediation
from deepbank.shared.validation import ValidationErrorKind, ValidationResult

logger = logging.getLogger(__name__)


class SubmissionState(Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class SubmissionErrorKind(Enum):
    INSUFFICIENT_FUNDS = "insufficient_funds"
    OUTSIDE_OPERATING_HOURS = "outside_operating_hours"
    NO_BANK_ACCOUNT = "no_bank_account"
    LIMIT_EXCEEDED = "limit_exceeded"
    NOT_AUTHENTICATED = "not_authenticated"
    UNKNOWN = "unknown"
    IN_PROGRESS = "in_progress"
    NOT_READY = "not_ready"


REMEDIATIONS: dict[SubmissionErrorKind, Remediation] = {
    SubmissionErrorKind.INSUFFICIENT_FUNDS: Remediation.DEPOSIT_FUNDS,
    SubmissionErrorKind.NO_BANK_ACCOUNT: Remediation.ADD_BANK_ACCOUNT,
}


@dataclass(frozen=True)
class SubmissionReceipt:
    reference: str
    amount: int
    message: str = ""


@dataclass(frozen=True)
class SubmissionError:
    kind: SubmissionErrorKind
    message: str = ""
    remediation: Remediation = Remediation.NONE


SubmissionOutcome = SubmissionReceipt | SubmissionError


class BusinessRuleRejection(Exception):
    """Raised by submit handlers when the backend refuses a valid request."""

    def __init__(self, kind: SubmissionErrorKind, message: str = ""):
        super().__init__(message or kind.value)
        self.kind = kind
        self.message = message or kind.value

    @property
    def remediation(self) -> Remediation:
        return REMEDIATIONS.get(self.kind, Remediation.NONE)


StepValidator = Callable[[Mapping[str, Any]], ValidationResult]
SubmitHandler = Callable[[dict[str, Any]], SubmissionReceipt]


@dataclass(frozen=True)
class WizardStep:
    name: str
    validate: StepValidator | None = None
    title: str = ""


class WizardController:
    """Drives one instance of a multi-step flow.

    ``advance`` validates the current step before moving forward,
    ``retreat`` steps back without discarding input, and ``submit`` runs the
    remote call from the final step while holding the shared loading
    coordinator. Concurrent ``submit`` calls while one is in flight are
    no-ops.
    """

    def __init__(
        self,
        steps: Sequence[WizardStep],
        submit_handler: SubmitHandler,
        loading: LoadingCoordinator,
        notifications: NotificationCenter | None = None,
        name: str = "wizard",
        submitting_message: str = "Submitting...",
        success_message: str = "Request submitted successfully",
        reset_on_success: bool = True,
    ):
        if not steps:
            raise ValueError("A wizard needs at least one step")
        self.name = name
        self._steps = list(steps)
        self._submit_handler = submit_handler
        self._loading = loading
        self._notifications = notifications
        self.submitting_message = submitting_message
        self.success_message = success_message
        self.reset_on_success = reset_on_success

        self._lock = threading.Lock()
        self._step = 1
        self._payload: dict[str, Any] = {}
        self._submission_state = SubmissionState.IDLE
        self._last_receipt: SubmissionReceipt | None = None
        self._last_error: SubmissionError | None = None

    @property
    def step(self) -> int:
        with self._lock:
            return self._step

    @property
    def step_count(self) -> int:
        return len(self._steps)

    @property
    def current_step(self) -> WizardStep:
        with self._lock:
            return self._steps[self._step - 1]

    @property
    def current_step_name(self) -> str:
        return self.current_step.name

    @property
    def is_final_step(self) -> bool:
        with self._lock:
            return self._step == len(self._steps)

    @property
    def payload(self) -> dict[str, Any]:
        with self._lock:
            return dict(self._payload)

    @property
    def submission_state(self) -> SubmissionState:
        with self._lock:
            return self._submission_state

    @property
    def last_receipt(self) -> SubmissionReceipt | None:
        with self._lock:
            return self._last_receipt

    @property
    def last_error(self) -> SubmissionError | None:
        with self._lock:
            return self._last_error

    def can_leave(self) -> bool:
        return self.submission_state != SubmissionState.SUBMITTING

    def advance(self, step_payload: Mapping[str, Any] | None = None) -> ValidationResult:
        with self._lock:
            if self._submission_state == SubmissionState.SUBMITTING:
                return ValidationResult.fail(
                    ValidationErrorKind.SUBMISSION_IN_PROGRESS,
                    "Please wait for the current request to finish",
                )
            if self._submission_state == SubmissionState.SUCCEEDED:
                self._submission_state = SubmissionState.IDLE

            if step_payload:
                self._payload.update(step_payload)
            step = self._steps[self._step - 1]
            payload = dict(self._payload)

        result = step.validate(payload) if step.validate else ValidationResult.ok()

        with self._lock:
            if not result.is_valid:
                logger.debug(
                    "%s: step %d (%s) rejected: %s",
                    self.name,
                    self._step,
                    step.name,
                    result.error_kind.value if result.error_kind else "invalid",
                )
                return result

            if isinstance(result.normalized_value, Mapping):
                self._payload.update(result.normalized_value)
            if self._step < len(self._steps):
                self._step += 1
            logger.debug("%s: advanced to step %d", self.name, self._step)
        return result

    def retreat(self) -> None:
        with self._lock:
            if self._submission_state == SubmissionState.SUBMITTING:
                return
            self._step = max(1, self._step - 1)

    def reset(self) -> None:
        with self._lock:
            if self._submission_state == SubmissionState.SUBMITTING:
                return
            self._step = 1
            self._payload = {}
            self._submission_state = SubmissionState.IDLE
            self._last_error = None

    def submit(self) -> SubmissionOutcome:
        with self._lock:
            if self._submission_state == SubmissionState.SUBMITTING:
                logger.info("%s: submission already in flight, ignoring", self.name)
                return SubmissionError(
                    SubmissionErrorKind.IN_PROGRESS,
                    "A submission is already in progress",
                )
            if self._step != len(self._steps):
                return SubmissionError(
                    SubmissionErrorKind.NOT_READY,
                    "Complete every step before submitting",
                )
            self._submission_state = SubmissionState.SUBMITTING
            payload = dict(self._payload)

        log_with_context(
            logger,
            logging.INFO,
            f"{self.name}: submitting",
            flow=self.name,
            amount=payload.get("amount"),
        )
        try:
            with self._loading.operation(self.submitting_message):
                receipt = self._submit_handler(payload)
        except BusinessRuleRejection as e:
            logger.warning("%s: rejected by backend (%s): %s", self.name, e.kind.value, e.message)
            outcome: SubmissionOutcome = SubmissionError(e.kind, e.message, e.remediation)
        except Exception as e:
            logger.exception("%s: submission failed", self.name)
            outcome = SubmissionError(
                SubmissionErrorKind.UNKNOWN, format_error_for_user(e)
            )
        else:
            outcome = receipt

        self._finish(outcome)
        return outcome

    def _finish(self, outcome: SubmissionOutcome) -> None:
        with self._lock:
            if isinstance(outcome, SubmissionReceipt):
                self._submission_state = SubmissionState.SUCCEEDED
                self._last_receipt = outcome
                self._last_error = None
                if self.reset_on_success:
                    self._step = 1
                    self._payload = {}
            else:
                self._submission_state = SubmissionState.FAILED
                self._last_error = outcome

        if self._notifications is None:
            return
        if isinstance(outcome, SubmissionReceipt):
            self._notifications.success(outcome.message or self.success_message)
        else:
            self._notifications.error(
                outcome.message or "Something went wrong. Please try again.",
                remediation=outcome.remediation,
            )

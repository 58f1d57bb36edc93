"""Onboarding flow service."""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from moodtracker.core.result import Err, ErrorKind, Ok, Result
from moodtracker.models.onboarding_step import OnboardingStep
from moodtracker.models.user import User
from moodtracker.schemas.auth import UserOut
from moodtracker.schemas.onboarding import (
    OnboardingStarted,
    OnboardingStartRequest,
    OnboardingStepOut,
    OnboardingStepsPage,
    OnboardingStepUpdate,
    PaginationOut,
)

logger = logging.getLogger(__name__)

# Steps created for every user, in display order
DEFAULT_STEPS = ("profile", "preferences", "verification")


class SqlOnboardingService:
    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def start_onboarding(self, user_id: int, profile: OnboardingStartRequest) -> Result[OnboardingStarted]:
        """Record profile details and create the default steps."""
        with self._session_factory() as db:
            user = db.get(User, user_id)
            if not user:
                return Err(ErrorKind.NOT_FOUND, "User not found")
            existing = db.execute(
                select(func.count()).select_from(OnboardingStep).where(OnboardingStep.user_id == user_id)
            ).scalar_one()
            if existing:
                return Err(ErrorKind.CONFLICT, "Onboarding already started")

            user.first_name = profile.first_name
            user.last_name = profile.last_name
            user.company = profile.company
            user.role = profile.role
            user.onboarding_completed = False
            steps = [
                OnboardingStep(
                    user_id=user_id,
                    step=name,
                    position=position,
                    # Starting onboarding is what fills in the profile
                    completed=name == "profile",
                )
                for position, name in enumerate(DEFAULT_STEPS, start=1)
            ]
            db.add_all(steps)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                return Err(ErrorKind.CONFLICT, "Onboarding already started")
            db.refresh(user)
            for step in steps:
                db.refresh(step)
            logger.info("Onboarding started user_id=%s", user_id)
            return Ok(
                OnboardingStarted(
                    user=UserOut.model_validate(user),
                    steps=[OnboardingStepOut.model_validate(step) for step in steps],
                )
            )

    def list_steps(self, user_id: int, page: int, limit: int) -> Result[OnboardingStepsPage]:
        owned = OnboardingStep.user_id == user_id
        with self._session_factory() as db:
            total = db.execute(select(func.count()).select_from(OnboardingStep).where(owned)).scalar_one()
            if not total:
                return Err(ErrorKind.NOT_FOUND, "No onboarding steps found")
            completed = db.execute(
                select(func.count())
                .select_from(OnboardingStep)
                .where(owned, OnboardingStep.completed.is_(True))
            ).scalar_one()
            steps = (
                db.execute(
                    select(OnboardingStep)
                    .where(owned)
                    .order_by(OnboardingStep.position, OnboardingStep.id)
                    .offset((page - 1) * limit)
                    .limit(limit)
                )
                .scalars()
                .all()
            )
        return Ok(
            OnboardingStepsPage(
                steps=[OnboardingStepOut.model_validate(step) for step in steps],
                completed_steps=completed,
                total_steps=total,
                pagination=PaginationOut(
                    page=page,
                    limit=limit,
                    total=total,
                    has_next=page * limit < total,
                    has_prev=page > 1,
                ),
            )
        )

    def update_step(self, step_id: int, user_id: int, update: OnboardingStepUpdate) -> Result[OnboardingStepOut]:
        with self._session_factory() as db:
            step = db.get(OnboardingStep, step_id)
            if not step:
                return Err(ErrorKind.NOT_FOUND, "Onboarding step not found")
            if step.user_id != user_id:
                return Err(ErrorKind.UNAUTHORIZED, "Access denied")
            step.completed = update.completed
            if update.data is not None:
                step.data = update.data
            db.commit()
            db.refresh(step)
            logger.info("Onboarding step updated id=%s completed=%s", step_id, step.completed)
            return Ok(OnboardingStepOut.model_validate(step))

    def complete_onboarding(self, user_id: int) -> Result[UserOut]:
        with self._session_factory() as db:
            user = db.get(User, user_id)
            if not user:
                return Err(ErrorKind.NOT_FOUND, "User not found")
            user.onboarding_completed = True
            db.commit()
            db.refresh(user)
            logger.info("Onboarding completed user_id=%s", user_id)
            return Ok(UserOut.model_validate(user))

"""
Pet service.

Keeps ``daily_allowance_grams`` in sync with the pet profile and
recalculates schedule portions whenever the allowance changes.
"""

import datetime

from fastapi import HTTPException, status
from sqlmodel import Session

from pawfeed.db.repositories.feeding_schedule import FeedingScheduleRepository
from pawfeed.db.repositories.pet import PetRepository
from pawfeed.feeding.allowance import daily_allowance_grams
from pawfeed.feeding.portions import PortionValidationError, prune_noops, recalculate
from pawfeed.models.pet import Pet
from pawfeed.schemas.pet import PetCreate, PetResponse, PetUpdate
from pawfeed.services.feeding_schedule_service import to_snapshot

_PROFILE_FIELDS = ("weight_kg", "food_kcal_per_100g", "neuter_status", "activity_level")


class PetService:
    """Service for pet business logic."""

    def __init__(self, session: Session):
        self.session = session
        self.repository = PetRepository(session)
        self.schedule_repository = FeedingScheduleRepository(session)

    def create(self, feeder_id: str, data: PetCreate) -> PetResponse:
        allowance = data.daily_allowance_grams
        if allowance is None:
            allowance = daily_allowance_grams(data.weight_kg, data.food_kcal_per_100g,
                                              data.neuter_status, data.activity_level)

        pet = Pet(feeder_id=feeder_id, name=data.name, daily_allowance_grams=allowance, weight_kg=data.weight_kg,
                  food_kcal_per_100g=data.food_kcal_per_100g, neuter_status=data.neuter_status.value,
                  activity_level=data.activity_level.value, bowl_number=data.bowl_number,
                  rfid_tag_id=data.rfid_tag_id, )
        pet = self.repository.create(pet)
        return self._to_response(pet)

    def get_by_id(self, feeder_id: str, pet_id: int) -> PetResponse:
        return self._to_response(self._get_owned_pet(feeder_id, pet_id))

    def get_all(self, feeder_id: str) -> list[PetResponse]:
        return [self._to_response(p) for p in self.repository.get_all_by_feeder(feeder_id)]

    def update(self, feeder_id: str, pet_id: int, data: PetUpdate) -> PetResponse:
        """Update a pet.

        An explicit ``daily_allowance_grams`` wins; otherwise a profile
        change re-derives the allowance.  If the allowance changes, the
        pet edit and the new portions are committed together.
        """
        pet = self.repository.lock_for_update(pet_id)
        if not pet or pet.feeder_id != feeder_id:
            self.session.rollback()
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Pet not found", )

        previous_allowance = pet.daily_allowance_grams
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        for key, value in changes.items():
            setattr(pet, key, getattr(value, "value", value))

        if "daily_allowance_grams" not in changes and any(f in changes for f in _PROFILE_FIELDS):
            pet.daily_allowance_grams = daily_allowance_grams(pet.weight_kg, pet.food_kcal_per_100g,
                                                              pet.neuter_status, pet.activity_level)
        pet.updated_at = datetime.datetime.utcnow()
        self.session.add(pet)

        if pet.daily_allowance_grams != previous_allowance:
            existing = self.schedule_repository.get_all_by_pet(pet_id)
            snapshots = [to_snapshot(e) for e in existing]
            try:
                result = recalculate(pet.daily_allowance_grams, snapshots)
            except PortionValidationError as e:
                self.session.rollback()
                raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e), ) from e
            # Commits the pet row together with the schedule batch.
            self.schedule_repository.apply_batch(prune_noops(result, snapshots))
        else:
            self.session.commit()

        self.session.refresh(pet)
        return self._to_response(pet)

    def delete(self, feeder_id: str, pet_id: int) -> None:
        """Delete a pet together with its schedules."""
        pet = self._get_owned_pet(feeder_id, pet_id)
        for entry in self.schedule_repository.get_all_by_pet(pet_id):
            self.session.delete(entry)
        self.session.delete(pet)
        self.session.commit()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_owned_pet(self, feeder_id: str, pet_id: int) -> Pet:
        pet = self.repository.get_by_id(pet_id)
        if not pet or pet.feeder_id != feeder_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Pet not found", )
        return pet

    @staticmethod
    def _to_response(pet: Pet) -> PetResponse:
        return PetResponse.model_validate(pet)
